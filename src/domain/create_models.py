"""Pydantic models for creating records in database."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from src.core.config import Constants
from src.domain.household import HouseholdRole
from src.domain.important_date import ImportantDateType
from src.domain.task import Recurrence, ServiceType, TaskCategory, TaskStatus, Urgency


class TaskCreate(BaseModel):
    """Pydantic model for creating a task record."""

    household_id: str = Field(..., description="Owning household ID")
    title: str = Field(..., min_length=1, max_length=Constants.TASK_TITLE_MAX_LENGTH, description="Task title")
    description: str | None = Field(None, max_length=Constants.TASK_TEXT_MAX_LENGTH)
    status: TaskStatus = Field(default=TaskStatus.INBOX)
    category: TaskCategory = Field(default=TaskCategory.OTHER)
    urgency: Urgency = Field(default=Urgency.MEDIUM)
    due_at: datetime | None = Field(None, description="Due timestamp")
    location: str | None = Field(None, max_length=Constants.TASK_TEXT_MAX_LENGTH)
    notes: str | None = Field(None, max_length=Constants.TASK_TEXT_MAX_LENGTH)
    assigned_to: str | None = Field(None, description="Assigned user ID")
    created_by: str = Field(..., description="Acting user ID, or 'system'")
    service_type: ServiceType = Field(default=ServiceType.PA)
    recurrence: Recurrence = Field(default=Recurrence.NONE)
    recurrence_custom_days: int | None = Field(None, gt=0, description="Step in days for custom recurrence")
    recurrence_group_id: str | None = Field(None, description="Series ID when continuing an existing series")
    recurrence_occurrence: int = Field(default=1, ge=1)

    @field_validator("title")
    @classmethod
    def validate_title_not_blank(cls, v: str) -> str:
        """Validate title has visible characters."""
        if not v.strip():
            msg = "Title must not be blank"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_custom_days(self) -> "TaskCreate":
        """Require a step when recurrence is custom."""
        if self.recurrence == Recurrence.CUSTOM and self.recurrence_custom_days is None:
            msg = "recurrence_custom_days is required for custom recurrence"
            raise ValueError(msg)
        return self


class ImportantDateCreate(BaseModel):
    """Pydantic model for creating an important date record."""

    household_id: str = Field(..., description="Owning household ID")
    type: ImportantDateType = Field(default=ImportantDateType.OTHER)
    title: str = Field(..., min_length=1, max_length=Constants.IMPORTANT_DATE_TITLE_MAX_LENGTH)
    date: datetime = Field(..., description="Date of the event in any reference year")
    notes: str | None = Field(None, max_length=Constants.IMPORTANT_DATE_NOTES_MAX_LENGTH)


class HouseholdCreate(BaseModel):
    """Pydantic model for creating a household record."""

    name: str = Field(..., min_length=1, description="Household display name")


class MemberCreate(BaseModel):
    """Pydantic model for adding a user to a household."""

    household_id: str = Field(..., description="Household ID")
    user_id: str = Field(..., min_length=1, description="User ID")
    role: HouseholdRole = Field(default=HouseholdRole.CLIENT)
    service_type: ServiceType | None = Field(None, description="Service line for staff members")
