"""Module Protocol defining the plugin interface for modular architecture."""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, model_validator


if TYPE_CHECKING:
    from fastapi import APIRouter


class ScheduledJob(BaseModel):
    """Scheduled job definition, run every ``interval_hours``."""

    id: str
    name: str
    func: Callable[[], Awaitable[None]]
    interval_hours: int
    run_at_startup: bool = False

    @model_validator(mode="after")
    def validate_trigger(self) -> "ScheduledJob":
        """Ensure the interval is positive."""
        if self.interval_hours <= 0:
            msg = f"Scheduled job '{self.id}' interval_hours must be positive"
            raise ValueError(msg)
        return self


class Module(Protocol):
    """Protocol defining the interface for feature modules. Self-contained plugins with schemas, jobs, and routes."""

    @property
    def name(self) -> str:
        """Module name (unique identifier)."""
        ...

    @property
    def description(self) -> str:
        """Module description (human-readable)."""
        ...

    def get_table_schemas(self) -> dict[str, str]:
        """Return table schemas for this module.

        Returns:
            Dictionary mapping table names to CREATE TABLE SQL statements
        """
        ...

    def get_indexes(self) -> list[str]:
        """Return indexes for this module's tables.

        Returns:
            List of CREATE INDEX SQL statements
        """
        ...

    def get_scheduled_jobs(self) -> list[ScheduledJob]:
        """Return scheduled jobs for this module.

        Returns:
            List of ScheduledJob definitions
        """
        ...

    def get_router(self) -> "APIRouter | None":
        """Return the HTTP router for this module, if it exposes one."""
        ...
