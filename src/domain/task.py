"""Task domain models and enums."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class TaskStatus(StrEnum):
    """Task lifecycle status."""

    INBOX = "INBOX"
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    WAITING_ON_CLIENT = "WAITING_ON_CLIENT"
    DONE = "DONE"
    CANCELLED = "CANCELLED"


class TaskCategory(StrEnum):
    """What area of the household a task belongs to."""

    HOUSEHOLD = "HOUSEHOLD"
    ERRANDS = "ERRANDS"
    MAINTENANCE = "MAINTENANCE"
    GROCERIES = "GROCERIES"
    KIDS = "KIDS"
    PETS = "PETS"
    EVENTS = "EVENTS"
    OTHER = "OTHER"


class Urgency(StrEnum):
    """Task urgency."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Recurrence(StrEnum):
    """How a task repeats once completed."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class ServiceType(StrEnum):
    """Service line a task (or a staff member) belongs to."""

    CLEANING = "CLEANING"
    PA = "PA"


TERMINAL_STATUSES: frozenset[TaskStatus] = frozenset({TaskStatus.DONE, TaskStatus.CANCELLED})


class Task(BaseModel):
    """Task data transfer object."""

    id: str = Field(..., description="Unique task ID")
    created: str | None = Field(default=None, description="Creation timestamp")
    updated: str | None = Field(default=None, description="Last update timestamp")
    household_id: str = Field(..., description="Owning household ID")
    title: str = Field(..., description="Task title")
    description: str | None = Field(default=None, description="Detailed task description")
    status: TaskStatus = Field(default=TaskStatus.INBOX, description="Current lifecycle status")
    category: TaskCategory = Field(default=TaskCategory.OTHER, description="Task category")
    urgency: Urgency = Field(default=Urgency.MEDIUM, description="Task urgency")
    due_at: datetime | None = Field(default=None, description="Due timestamp")
    location: str | None = Field(default=None, description="Where the task happens")
    notes: str | None = Field(default=None, description="Free-form notes")
    assigned_to: str | None = Field(default=None, description="Assigned user ID")
    created_by: str = Field(..., description="User ID of the creator, or 'system'")
    service_type: ServiceType = Field(default=ServiceType.PA, description="Service line")
    recurrence: Recurrence | None = Field(default=Recurrence.NONE, description="Repeat rule")
    recurrence_custom_days: int | None = Field(default=None, description="Step in days for custom recurrence")
    recurrence_group_id: str | None = Field(default=None, description="Shared ID of a recurring series")
    recurrence_occurrence: int | None = Field(default=1, description="1-based position in the series")
    cancelled_at: datetime | None = Field(default=None, description="Cancellation timestamp")
    cancelled_by: str | None = Field(default=None, description="User ID that cancelled the task")
    cancellation_reason: str | None = Field(default=None, description="Optional cancellation reason")

    @property
    def is_terminal(self) -> bool:
        """Whether the task is DONE or CANCELLED."""
        return self.status in TERMINAL_STATUSES

    @property
    def is_recurring(self) -> bool:
        """Whether completing the task may generate a successor."""
        return self.recurrence is not None and self.recurrence != Recurrence.NONE
