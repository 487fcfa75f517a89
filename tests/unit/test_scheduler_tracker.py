"""Tests for scheduler job tracking and retry functionality."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.core.redis_client import RedisClient
from src.core.scheduler_tracker import JobTracker, retry_job_with_backoff


@pytest.fixture
def job_tracker() -> JobTracker:
    """Create a job tracker instance for testing with in-memory storage."""
    return JobTracker(client=RedisClient(url=""))


@pytest.fixture
def no_sleep():
    """Skip backoff delays."""
    with patch("src.core.scheduler_tracker.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep


@pytest.mark.unit
async def test_record_job_start_in_memory(job_tracker: JobTracker) -> None:
    """Test recording job start in memory storage."""
    await job_tracker.record_job_start("test_job")

    status = await job_tracker.get_job_status("test_job")
    assert status["currently_running"] is True
    assert status["current_run_started"] is not None


@pytest.mark.unit
async def test_record_job_success_in_memory(job_tracker: JobTracker) -> None:
    """Test recording successful job execution in memory."""
    await job_tracker.record_job_start("test_job")
    await job_tracker.record_job_success("test_job")

    status = await job_tracker.get_job_status("test_job")
    assert status["last_success"] is not None
    assert status["consecutive_failures"] == 0
    assert status["success_count"] == 1
    assert status["currently_running"] is False


@pytest.mark.unit
async def test_record_job_failure_in_memory(job_tracker: JobTracker) -> None:
    """Test recording failed job execution in memory."""
    await job_tracker.record_job_start("test_job")
    consecutive = await job_tracker.record_job_failure("test_job", "Test error")

    status = await job_tracker.get_job_status("test_job")
    assert consecutive == 1
    assert status["last_failure"] is not None
    assert status["last_error"] == "Test error"
    assert status["consecutive_failures"] == 1
    assert status["failure_count"] == 1
    assert status["currently_running"] is False


@pytest.mark.unit
async def test_consecutive_failures_tracking(job_tracker: JobTracker) -> None:
    """Test that consecutive failures are tracked correctly."""
    await job_tracker.record_job_failure("test_job", "Error 1")
    await job_tracker.record_job_failure("test_job", "Error 2")
    status = await job_tracker.get_job_status("test_job")
    assert status["consecutive_failures"] == 2

    # Success resets the streak but keeps the totals
    await job_tracker.record_job_success("test_job")
    status = await job_tracker.get_job_status("test_job")
    assert status["consecutive_failures"] == 0
    assert status["failure_count"] == 2


@pytest.mark.unit
async def test_add_to_dead_letter_queue(job_tracker: JobTracker) -> None:
    """Test adding job to dead letter queue."""
    await job_tracker.add_to_dead_letter_queue("failed_job", "Persistent error", "Failed 3 consecutive times")

    dlq = await job_tracker.get_dead_letter_queue()
    assert len(dlq) == 1
    assert dlq[0]["job_name"] == "failed_job"
    assert dlq[0]["error"] == "Persistent error"
    assert dlq[0]["context"] == "Failed 3 consecutive times"


@pytest.mark.unit
async def test_dead_letter_queue_max_size(job_tracker: JobTracker) -> None:
    """Only the newest 100 entries are kept."""
    for i in range(150):
        await job_tracker.add_to_dead_letter_queue(f"job_{i}", f"error_{i}", "context")

    dlq = await job_tracker.get_dead_letter_queue()
    assert len(dlq) == 100
    assert dlq[0]["job_name"] == "job_50"
    assert dlq[-1]["job_name"] == "job_149"


@pytest.mark.unit
async def test_get_job_status_for_nonexistent_job(job_tracker: JobTracker) -> None:
    """Test getting status for a job that hasn't run yet."""
    status = await job_tracker.get_job_status("nonexistent_job")

    assert status["job_name"] == "nonexistent_job"
    assert status["last_success"] is None
    assert status["last_failure"] is None
    assert status["consecutive_failures"] == 0
    assert status["success_count"] == 0
    assert status["failure_count"] == 0
    assert status["currently_running"] is False


@pytest.mark.unit
async def test_error_truncation(job_tracker: JobTracker) -> None:
    """Test that long error messages are truncated."""
    await job_tracker.record_job_failure("test_job", "x" * 1000)

    status = await job_tracker.get_job_status("test_job")
    assert len(status["last_error"]) == 500


@pytest.mark.unit
async def test_redis_backed_status() -> None:
    """With Redis configured, status is read from the job hash."""
    client = MagicMock(spec=RedisClient)
    client.is_available = True
    client.get_hash = AsyncMock(
        return_value={"last_success": "2024-01-01T00:00:00+00:00", "success_count": "4", "consecutive_failures": "0"}
    )
    tracker = JobTracker(client=client)

    status = await tracker.get_job_status("moments_automation")

    client.get_hash.assert_awaited_once_with("hearth:scheduler:job:moments_automation")
    assert status["success_count"] == 4
    assert status["last_success"] == "2024-01-01T00:00:00+00:00"
    assert status["currently_running"] is False


@pytest.mark.unit
async def test_redis_backed_failure_returns_streak() -> None:
    client = MagicMock(spec=RedisClient)
    client.is_available = True
    client.set_hash_fields = AsyncMock(return_value=True)
    client.increment_hash_field = AsyncMock(side_effect=[3, 7])
    client.delete_hash_field = AsyncMock(return_value=True)
    tracker = JobTracker(client=client)

    assert await tracker.record_job_failure("moments_automation", "boom") == 3
    client.delete_hash_field.assert_awaited_once_with("hearth:scheduler:job:moments_automation", "current_run")


@pytest.mark.unit
async def test_redis_backed_dead_letter_queue() -> None:
    """Entries are pushed as JSON and read back oldest first."""
    client = MagicMock(spec=RedisClient)
    client.is_available = True
    client.push_capped = AsyncMock(return_value=True)
    newest, oldest = {"job_name": "b"}, {"job_name": "a"}
    client.get_list = AsyncMock(return_value=[json.dumps(newest), json.dumps(oldest)])
    tracker = JobTracker(client=client)

    await tracker.add_to_dead_letter_queue("b", "error", "context")

    pushed = json.loads(client.push_capped.await_args.args[1])
    assert pushed["job_name"] == "b"
    assert await tracker.get_dead_letter_queue() == [oldest, newest]


@pytest.mark.unit
async def test_retry_job_with_backoff_success_first_try(no_sleep) -> None:
    """Test successful job execution on first try."""
    mock_job = AsyncMock()

    with patch("src.core.scheduler_tracker.job_tracker") as mock_tracker:
        mock_tracker.record_job_start = AsyncMock()
        mock_tracker.record_job_success = AsyncMock()

        await retry_job_with_backoff(mock_job, "test_job")

        mock_job.assert_called_once()
        mock_tracker.record_job_start.assert_called_once_with("test_job")
        mock_tracker.record_job_success.assert_called_once_with("test_job")
        no_sleep.assert_not_called()


@pytest.mark.unit
async def test_retry_job_with_backoff_success_after_retry(no_sleep) -> None:
    """Test successful job execution after retries."""
    mock_job = AsyncMock(side_effect=[Exception("Error 1"), Exception("Error 2"), None])

    with patch("src.core.scheduler_tracker.job_tracker") as mock_tracker:
        mock_tracker.record_job_start = AsyncMock()
        mock_tracker.record_job_success = AsyncMock()

        await retry_job_with_backoff(mock_job, "test_job", max_retries=3, base_delay=2.0)

        assert mock_job.call_count == 3
        mock_tracker.record_job_success.assert_called_once_with("test_job")
        assert [c.args[0] for c in no_sleep.call_args_list] == [1.0, 2.0]


@pytest.mark.unit
async def test_retry_job_with_backoff_all_retries_exhausted(no_sleep) -> None:
    """Test job failure after all retries exhausted."""
    mock_job = AsyncMock(side_effect=Exception("Persistent error"))

    with patch("src.core.scheduler_tracker.job_tracker") as mock_tracker:
        mock_tracker.record_job_start = AsyncMock()
        mock_tracker.record_job_failure = AsyncMock(return_value=1)
        mock_tracker.add_to_dead_letter_queue = AsyncMock()

        await retry_job_with_backoff(mock_job, "test_job", max_retries=3)

        assert mock_job.call_count == 3
        mock_tracker.record_job_failure.assert_called_once()
        assert "Persistent error" in mock_tracker.record_job_failure.call_args.args[1]
        mock_tracker.add_to_dead_letter_queue.assert_not_called()


@pytest.mark.unit
async def test_retry_job_with_backoff_adds_to_dlq_after_consecutive_failures(no_sleep) -> None:
    """Test that job is added to DLQ after 3+ consecutive failures."""
    mock_job = AsyncMock(side_effect=Exception("Persistent error"))

    with patch("src.core.scheduler_tracker.job_tracker") as mock_tracker:
        mock_tracker.record_job_start = AsyncMock()
        mock_tracker.record_job_failure = AsyncMock(return_value=3)
        mock_tracker.add_to_dead_letter_queue = AsyncMock()

        await retry_job_with_backoff(mock_job, "test_job", max_retries=2)

        mock_tracker.add_to_dead_letter_queue.assert_called_once_with(
            job_name="test_job", error="Persistent error", context="Failed 3 consecutive times"
        )


@pytest.mark.unit
async def test_retry_uses_shared_tracker(in_memory_job_tracker, no_sleep) -> None:
    """Runs are recorded on the module-level tracker."""
    await retry_job_with_backoff(AsyncMock(), "moments_automation")

    status = await in_memory_job_tracker.get_job_status("moments_automation")
    assert status["success_count"] == 1
