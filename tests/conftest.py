"""Pytest configuration and shared fixtures."""

import pytest

from src.core import scheduler_tracker
from src.core.redis_client import RedisClient


@pytest.fixture(autouse=True)
def in_memory_job_tracker(monkeypatch) -> scheduler_tracker.JobTracker:
    """Give every test a fresh job tracker that keeps state in memory."""
    tracker = scheduler_tracker.JobTracker(client=RedisClient(url=""))
    monkeypatch.setattr(scheduler_tracker, "job_tracker", tracker)
    return tracker
