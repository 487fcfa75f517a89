"""Update models for database operations."""

from datetime import datetime

from pydantic import BaseModel

from src.domain.task import TaskStatus


class TaskStatusUpdate(BaseModel):
    """Update payload for a task status change."""

    status: TaskStatus


class TaskCancellationUpdate(BaseModel):
    """Update payload written when a task is cancelled."""

    status: TaskStatus = TaskStatus.CANCELLED
    cancelled_at: datetime
    cancelled_by: str
    cancellation_reason: str | None = None


class RecurrenceGroupUpdate(BaseModel):
    """Update payload anchoring a task as the head of a recurring series."""

    recurrence_group_id: str
