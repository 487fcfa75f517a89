"""Scheduler for periodic module jobs."""

import logging
from datetime import UTC, datetime
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from src.core.module import ScheduledJob
from src.core.module_registry import get_all_scheduled_jobs, register_default_modules
from src.core.scheduler_tracker import retry_job_with_backoff


logger = logging.getLogger(__name__)


def create_scheduler() -> AsyncIOScheduler:
    """Create a scheduler handle owned by the caller (the app lifespan)."""
    return AsyncIOScheduler(timezone=UTC)


def register_jobs(scheduler: AsyncIOScheduler, jobs: list[ScheduledJob]) -> None:
    """Add module jobs to the scheduler, each wrapped in retry tracking."""
    now = datetime.now(UTC)
    for job in jobs:
        # next_run_time=None would add the job paused; omit it to wait for the trigger
        extra: dict[str, Any] = {"next_run_time": now} if job.run_at_startup else {}
        scheduler.add_job(
            retry_job_with_backoff,
            trigger=IntervalTrigger(hours=job.interval_hours, timezone=UTC),
            args=[job.func, job.id],
            id=job.id,
            name=job.name,
            **extra,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        logger.info("Scheduled job %s (%s)", job.id, "runs now" if job.run_at_startup else "waits for trigger")


def start_scheduler(scheduler: AsyncIOScheduler) -> None:
    """Register every module's jobs and start the scheduler."""
    register_default_modules()
    register_jobs(scheduler, get_all_scheduled_jobs())
    scheduler.start()
    logger.info("Scheduler started with %d job(s)", len(scheduler.get_jobs()))


def stop_scheduler(scheduler: AsyncIOScheduler) -> None:
    """Shut down the scheduler without waiting for running jobs."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
