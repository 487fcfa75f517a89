"""Pytest configuration and fixtures for integration tests against SQLite."""

import pytest

from src.core import db_client
from src.core.config import settings


@pytest.fixture
async def sqlite_db(tmp_path, monkeypatch):
    """Point the app at a fresh SQLite file with the full schema."""
    monkeypatch.setattr(settings, "sqlite_db_path", str(tmp_path / "hearth.db"))
    await db_client.init_db()
    yield
    await db_client.close_connection()
