"""Scheduled jobs for the moments module."""

import logging

from src.core.config import Constants, settings
from src.core.module import ScheduledJob
from src.modules.moments.service import run_moments_automation


logger = logging.getLogger(__name__)


async def moments_automation_job() -> None:
    """Run the moments sweep over all households.

    Runs every 24 hours and once when the scheduler starts.
    """
    summary = await run_moments_automation()
    if summary.households_failed:
        logger.warning(
            "Moments automation finished with %d failed household(s) of %d",
            summary.households_failed,
            summary.households_processed,
        )


def get_scheduled_jobs() -> list[ScheduledJob]:
    """Return scheduled jobs for the moments module."""
    return [
        ScheduledJob(
            id="moments_automation",
            name="Generate Moments Reminder Tasks",
            interval_hours=Constants.MOMENTS_INTERVAL_HOURS,
            run_at_startup=settings.moments_run_on_startup,
            func=moments_automation_job,
        ),
    ]
