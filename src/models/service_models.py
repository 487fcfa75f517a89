"""Pydantic models for service layer return types.

These models provide type safety at service boundaries, converting database
dictionaries into typed objects with validation.
"""

from pydantic import BaseModel

from src.domain.task import Task


class CompletionResult(BaseModel):
    """Outcome of completing a task."""

    completed_task: Task
    next_task: Task | None = None
    next_due: str | None = None


class HouseholdMomentsFailure(BaseModel):
    """A household the moments sweep could not process."""

    household_id: str
    error: str


class MomentsRunSummary(BaseModel):
    """Totals for one moments automation sweep."""

    households_processed: int
    households_failed: int
    tasks_created: int
    failures: list[HouseholdMomentsFailure] = []


class MomentsGenerateResponse(BaseModel):
    """Result of generating moments tasks for a single household."""

    tasks_created: int
    message: str

