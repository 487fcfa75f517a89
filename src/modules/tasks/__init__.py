"""Tasks module for household task management."""

from typing import TYPE_CHECKING

from src.core.module import ScheduledJob


if TYPE_CHECKING:
    from fastapi import APIRouter


class TasksModule:
    """Tasks module for household task management.

    Provides:
    - Task CRUD operations scoped to a household
    - State machine for task lifecycle (DONE / CANCELLED are terminal)
    - Recurring series: completing an occurrence creates the next one
    - Role-based authorization for assistants, clients and staff
    """

    @property
    def name(self) -> str:
        """Module name (unique identifier)."""
        return "tasks"

    @property
    def description(self) -> str:
        """Module description (human-readable)."""
        return "Household tasks with recurring series and role-based access"

    def get_table_schemas(self) -> dict[str, str]:
        """Return table schemas for this module."""
        return {
            "tasks": """CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        household_id TEXT NOT NULL REFERENCES households(id),
        title TEXT NOT NULL,
        description TEXT,
        status TEXT NOT NULL DEFAULT 'INBOX'
            CHECK (status IN ('INBOX', 'PLANNED', 'IN_PROGRESS', 'WAITING_ON_CLIENT', 'DONE', 'CANCELLED')),
        category TEXT NOT NULL DEFAULT 'OTHER'
            CHECK (category IN (
                'HOUSEHOLD', 'ERRANDS', 'MAINTENANCE', 'GROCERIES', 'KIDS', 'PETS', 'EVENTS', 'OTHER'
            )),
        urgency TEXT NOT NULL DEFAULT 'MEDIUM' CHECK (urgency IN ('LOW', 'MEDIUM', 'HIGH')),
        due_at TEXT,
        location TEXT,
        notes TEXT,
        assigned_to TEXT,
        created_by TEXT NOT NULL,
        service_type TEXT NOT NULL DEFAULT 'PA' CHECK (service_type IN ('CLEANING', 'PA')),
        recurrence TEXT NOT NULL DEFAULT 'none'
            CHECK (recurrence IN ('none', 'daily', 'weekly', 'biweekly', 'monthly', 'custom')),
        recurrence_custom_days INTEGER CHECK (recurrence_custom_days IS NULL OR recurrence_custom_days > 0),
        recurrence_group_id TEXT,
        recurrence_occurrence INTEGER NOT NULL DEFAULT 1,
        cancelled_at TEXT,
        cancelled_by TEXT,
        cancellation_reason TEXT
    )""",
        }

    def get_indexes(self) -> list[str]:
        """Return indexes for this module's tables."""
        return [
            "CREATE INDEX IF NOT EXISTS idx_tasks_household_id ON tasks (household_id)",
            "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks (status)",
            "CREATE INDEX IF NOT EXISTS idx_tasks_assigned_to ON tasks (assigned_to)",
            "CREATE INDEX IF NOT EXISTS idx_tasks_recurrence_group_id ON tasks (recurrence_group_id)",
        ]

    def get_scheduled_jobs(self) -> list[ScheduledJob]:
        """Return scheduled jobs for this module."""
        return []

    def get_router(self) -> "APIRouter":
        """Return the HTTP router for this module."""
        from src.modules.tasks.router import router

        return router
