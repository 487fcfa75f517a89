"""Job execution tracking and monitoring for scheduled jobs."""

import asyncio
import json
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from src.core.config import Constants
from src.core.redis_client import RedisClient, redis_client


logger = logging.getLogger(__name__)

_DLQ_KEY = "hearth:scheduler:dlq"


def _job_key(job_name: str) -> str:
    return f"hearth:scheduler:job:{job_name}"


class JobTracker:
    """Track job execution history and health status.

    State lives in Redis when it is configured, else in process memory.
    """

    def __init__(self, client: RedisClient | None = None) -> None:
        """Initialize job tracker."""
        self._redis = client if client is not None else redis_client
        self._memory_storage: dict[str, dict[str, Any]] = {}
        self._dead_letter_queue: deque[dict[str, str]] = deque(maxlen=Constants.TRACKER_DEAD_LETTER_QUEUE_MAXLEN)

    def _memory(self, job_name: str) -> dict[str, Any]:
        return self._memory_storage.setdefault(job_name, {})

    async def record_job_start(self, job_name: str) -> None:
        """Record job execution start."""
        now = datetime.now(UTC).isoformat()
        if self._redis.is_available:
            await self._redis.set_hash_fields(
                _job_key(job_name), {"current_run": now}, ttl_seconds=Constants.TRACKER_STATUS_TTL_SECONDS
            )
            return
        self._memory(job_name)["current_run"] = now

    async def record_job_success(self, job_name: str) -> None:
        """Record successful job execution and reset the failure streak."""
        now = datetime.now(UTC).isoformat()
        if self._redis.is_available:
            key = _job_key(job_name)
            await self._redis.set_hash_fields(
                key,
                {"last_success": now, "consecutive_failures": "0"},
                ttl_seconds=Constants.TRACKER_STATUS_TTL_SECONDS,
            )
            await self._redis.increment_hash_field(key, "success_count", Constants.TRACKER_STATUS_TTL_SECONDS)
            await self._redis.delete_hash_field(key, "current_run")
            return

        job = self._memory(job_name)
        job["last_success"] = now
        job["consecutive_failures"] = 0
        job["success_count"] = job.get("success_count", 0) + 1
        job.pop("current_run", None)

    async def record_job_failure(self, job_name: str, error: str) -> int | None:
        """Record failed job execution.

        Returns:
            The number of consecutive failures, or None if it could not be read
        """
        now = datetime.now(UTC).isoformat()
        if self._redis.is_available:
            key = _job_key(job_name)
            await self._redis.set_hash_fields(
                key,
                {"last_failure": now, "last_error": error[:500]},
                ttl_seconds=Constants.TRACKER_STATUS_TTL_SECONDS,
            )
            consecutive_failures = await self._redis.increment_hash_field(
                key, "consecutive_failures", Constants.TRACKER_STATUS_TTL_SECONDS
            )
            await self._redis.increment_hash_field(key, "failure_count", Constants.TRACKER_STATUS_TTL_SECONDS)
            await self._redis.delete_hash_field(key, "current_run")
            return consecutive_failures

        job = self._memory(job_name)
        job["last_failure"] = now
        job["last_error"] = error[:500]
        job["consecutive_failures"] = job.get("consecutive_failures", 0) + 1
        job["failure_count"] = job.get("failure_count", 0) + 1
        job.pop("current_run", None)
        return job["consecutive_failures"]

    async def get_job_status(self, job_name: str) -> dict[str, Any]:
        """Get job execution status."""
        if self._redis.is_available:
            job: dict[str, Any] = await self._redis.get_hash(_job_key(job_name))
        else:
            job = self._memory_storage.get(job_name, {})

        return {
            "job_name": job_name,
            "last_success": job.get("last_success"),
            "last_failure": job.get("last_failure"),
            "last_error": job.get("last_error"),
            "consecutive_failures": int(job.get("consecutive_failures", 0)),
            "success_count": int(job.get("success_count", 0)),
            "failure_count": int(job.get("failure_count", 0)),
            "currently_running": job.get("current_run") is not None,
            "current_run_started": job.get("current_run"),
        }

    async def add_to_dead_letter_queue(self, job_name: str, error: str, context: str) -> None:
        """Add a persistently failing job to the dead letter queue."""
        entry = {
            "job_name": job_name,
            "error": error,
            "context": context,
            "timestamp": datetime.now(UTC).isoformat(),
        }
        self._dead_letter_queue.append(entry)
        logger.error("Job added to dead letter queue", extra=entry)

        if self._redis.is_available:
            await self._redis.push_capped(
                _DLQ_KEY,
                json.dumps(entry),
                maxlen=Constants.TRACKER_DEAD_LETTER_QUEUE_MAXLEN,
                ttl_seconds=Constants.TRACKER_DLQ_TTL_SECONDS,
            )

    async def get_dead_letter_queue(self) -> list[dict[str, str]]:
        """Get all items in the dead letter queue, oldest first."""
        if self._redis.is_available:
            return [json.loads(item) for item in reversed(await self._redis.get_list(_DLQ_KEY))]
        return list(self._dead_letter_queue)


# Global job tracker instance
job_tracker = JobTracker()


async def retry_job_with_backoff(
    job_func: Callable[[], Awaitable[Any]],
    job_name: str,
    max_retries: int = Constants.JOB_MAX_RETRIES,
    base_delay: float = Constants.JOB_RETRY_BASE_DELAY_SECONDS,
) -> None:
    """Execute job with retry logic and exponential backoff.

    Args:
        job_func: Async function to execute
        job_name: Name of the job for tracking
        max_retries: Maximum number of attempts
        base_delay: Base delay in seconds for exponential backoff
    """
    await job_tracker.record_job_start(job_name)

    last_error = None
    for attempt in range(max_retries):
        try:
            logger.info("Executing %s (attempt %d/%d)", job_name, attempt + 1, max_retries)
            await job_func()
        except Exception as e:
            last_error = str(e)
            logger.error("%s failed on attempt %d/%d: %s", job_name, attempt + 1, max_retries, last_error)

            if attempt < max_retries - 1:
                delay = base_delay**attempt
                logger.info("Retrying %s in %.1fs", job_name, delay)
                await asyncio.sleep(delay)
        else:
            await job_tracker.record_job_success(job_name)
            logger.info("%s completed successfully", job_name)
            return

    error_msg = f"Failed after {max_retries} attempts: {last_error}"
    consecutive_failures = await job_tracker.record_job_failure(job_name, error_msg)

    logger.critical(
        "%s failed after all retry attempts",
        job_name,
        extra={"error": error_msg, "consecutive_failures": consecutive_failures},
    )

    if consecutive_failures and consecutive_failures >= Constants.JOB_CONSECUTIVE_FAILURE_THRESHOLD:
        await job_tracker.add_to_dead_letter_queue(
            job_name=job_name,
            error=last_error or "Unknown error",
            context=f"Failed {consecutive_failures} consecutive times",
        )
