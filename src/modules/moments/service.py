"""Moments service: reminder tasks for upcoming important dates."""

import logging
from datetime import UTC, datetime, timedelta

from src.core import db_client
from src.core.config import Constants
from src.core.date_windows import (
    as_utc,
    combine_with_time_of,
    format_month_day,
    is_within_window,
    next_annual_occurrence,
)
from src.core.db_client import sanitize_param
from src.core.logging import log_with_household_context, span
from src.domain.create_models import ImportantDateCreate, TaskCreate
from src.domain.important_date import ImportantDate
from src.domain.task import TaskCategory, TaskStatus, Urgency
from src.models.service_models import HouseholdMomentsFailure, MomentsRunSummary
from src.modules.tasks import service as task_service
from src.services.household_service import get_all_households


logger = logging.getLogger(__name__)


def reminder_title(important_date: ImportantDate) -> str:
    """Title of the reminder task for an important date."""
    return f"{important_date.title} coming up"


async def create_important_date(*, data: ImportantDateCreate) -> ImportantDate:
    """Create an important date for a household.

    Raises:
        db_client.DatabaseError: If database operation fails
    """
    with span("moments_service.create_important_date"):
        record = await db_client.create_record(collection="important_dates", data=data.model_dump(mode="json"))
        logger.info("Created important date '%s' in household %s", data.title, data.household_id)
        return ImportantDate.model_validate(record)


async def get_important_dates(*, household_id: str) -> list[ImportantDate]:
    """List all important dates of a household."""
    with span("moments_service.get_important_dates"):
        records = await db_client.list_all_records(
            collection="important_dates",
            filter_query=f'household_id = "{sanitize_param(household_id)}"',
            sort="+created",
        )
        return [ImportantDate.model_validate(r) for r in records]


async def generate_moments_tasks(*, household_id: str, now: datetime | None = None) -> int:
    """Create reminder tasks for important dates coming up in a household.

    Each date is projected onto its next annual occurrence (today counts).
    Dates landing within the lookahead window get a reminder task due a few
    days ahead, unless a task with the same title already exists.

    Args:
        household_id: Household to process
        now: Override for the current time

    Returns:
        Number of tasks created

    Raises:
        db_client.DatabaseError: If database operation fails
    """
    with span("moments_service.generate_moments_tasks", household_id=household_id):
        now = as_utc(now or datetime.now(UTC))
        today = now.date()

        important_dates = await get_important_dates(household_id=household_id)
        existing_titles = {task.title for task in await task_service.get_tasks(household_id=household_id)}

        tasks_created = 0
        for important_date in important_dates:
            target_day = next_annual_occurrence(important_date.date.date(), today)
            if not is_within_window(target_day, today, Constants.MOMENTS_LOOKAHEAD_DAYS):
                continue

            title = reminder_title(important_date)
            if title in existing_titles:
                continue

            description = f"Reminder: {important_date.title} on {format_month_day(target_day)}."
            if important_date.notes:
                description += f" {important_date.notes}"

            target_at = combine_with_time_of(target_day, important_date.date)
            await task_service.create_task(
                data=TaskCreate(
                    household_id=household_id,
                    title=title,
                    description=description,
                    category=TaskCategory.HOUSEHOLD,
                    urgency=Urgency.MEDIUM,
                    status=TaskStatus.INBOX,
                    due_at=target_at - timedelta(days=Constants.MOMENTS_REMINDER_LEAD_DAYS),
                    created_by=Constants.SYSTEM_ACTOR_ID,
                )
            )
            existing_titles.add(title)
            tasks_created += 1

        if tasks_created:
            log_with_household_context(
                logger, "info", f"Created {tasks_created} moments task(s)", household_id=household_id
            )
        return tasks_created


async def run_moments_automation(*, now: datetime | None = None) -> MomentsRunSummary:
    """Run the moments sweep over every household.

    A failure inside one household is logged and the sweep moves on to the
    next one. Failing to list households propagates to the caller.

    Returns:
        Totals for the sweep
    """
    with span("moments_service.run_moments_automation"):
        households = await get_all_households()

        tasks_created = 0
        failures: list[HouseholdMomentsFailure] = []
        for household in households:
            try:
                tasks_created += await generate_moments_tasks(household_id=household.id, now=now)
            except Exception as e:
                log_with_household_context(
                    logger, "error", f"Moments automation failed: {e}", household_id=household.id
                )
                failures.append(HouseholdMomentsFailure(household_id=household.id, error=str(e)))

        if tasks_created:
            logger.info(
                "Moments automation created %d task(s) across %d household(s)", tasks_created, len(households)
            )

        return MomentsRunSummary(
            households_processed=len(households),
            households_failed=len(failures),
            tasks_created=tasks_created,
            failures=failures,
        )
