"""Moments module: reminders for birthdays, anniversaries and other important dates."""

from typing import TYPE_CHECKING

from src.core.module import ScheduledJob


if TYPE_CHECKING:
    from fastapi import APIRouter


class MomentsModule:
    """Moments module.

    Provides:
    - Important dates per household (month/day recurring every year)
    - A periodic sweep creating reminder tasks for dates coming up
    """

    @property
    def name(self) -> str:
        """Module name (unique identifier)."""
        return "moments"

    @property
    def description(self) -> str:
        """Module description (human-readable)."""
        return "Reminder tasks for upcoming birthdays, anniversaries and other important dates"

    def get_table_schemas(self) -> dict[str, str]:
        """Return table schemas for this module."""
        return {
            "important_dates": """CREATE TABLE IF NOT EXISTS important_dates (
        id TEXT PRIMARY KEY,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        household_id TEXT NOT NULL REFERENCES households(id),
        type TEXT NOT NULL DEFAULT 'OTHER'
            CHECK (type IN ('BIRTHDAY', 'ANNIVERSARY', 'MEMORIAL', 'HOLIDAY', 'OTHER')),
        title TEXT NOT NULL,
        date TEXT NOT NULL,
        notes TEXT
    )""",
        }

    def get_indexes(self) -> list[str]:
        """Return indexes for this module's tables."""
        return [
            "CREATE INDEX IF NOT EXISTS idx_important_dates_household_id ON important_dates (household_id)",
        ]

    def get_scheduled_jobs(self) -> list[ScheduledJob]:
        """Return scheduled jobs for this module."""
        import src.modules.moments.scheduler_jobs

        return src.modules.moments.scheduler_jobs.get_scheduled_jobs()

    def get_router(self) -> "APIRouter":
        """Return the HTTP router for this module."""
        from src.modules.moments.router import router

        return router
