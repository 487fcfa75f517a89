"""Pytest configuration and fixtures for unit tests."""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from src.domain.create_models import HouseholdCreate, ImportantDateCreate, MemberCreate, TaskCreate
from src.domain.household import Household, HouseholdMember, HouseholdRole
from src.domain.important_date import ImportantDate
from src.domain.task import ServiceType, Task
from src.modules.moments import service as moments_service
from src.modules.tasks import service as task_service
from src.services import household_service
from tests.unit.mocks import InMemoryDBClient


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def patched_db(monkeypatch, in_memory_db):
    """Patches src.core.db_client functions to use InMemoryDBClient."""
    for name in (
        "create_record",
        "get_record",
        "update_record",
        "conditional_update",
        "delete_record",
        "list_records",
        "list_all_records",
        "get_first_record",
    ):
        monkeypatch.setattr(f"src.core.db_client.{name}", getattr(in_memory_db, name))

    return in_memory_db


@pytest.fixture
def household_factory(patched_db) -> Callable[..., Awaitable[Household]]:
    """Factory for creating households.

    Usage:
        household = await household_factory(name="The Smiths")
    """

    async def _create(name: str = "Test Household") -> Household:
        return await household_service.create_household(data=HouseholdCreate(name=name))

    return _create


@pytest.fixture
def member_factory(patched_db) -> Callable[..., Awaitable[HouseholdMember]]:
    """Factory for adding members to a household.

    Usage:
        staff = await member_factory(household.id, "u-staff", HouseholdRole.STAFF, ServiceType.CLEANING)
    """

    async def _create(
        household_id: str,
        user_id: str,
        role: HouseholdRole = HouseholdRole.ASSISTANT,
        service_type: ServiceType | None = None,
    ) -> HouseholdMember:
        return await household_service.add_member(
            data=MemberCreate(household_id=household_id, user_id=user_id, role=role, service_type=service_type)
        )

    return _create


@pytest.fixture
def task_factory(patched_db) -> Callable[..., Awaitable[Task]]:
    """Factory for creating tasks with custom data.

    Usage:
        task = await task_factory(household.id, title="Water plants", recurrence="weekly")
    """

    async def _create(household_id: str, **kwargs: Any) -> Task:
        data: dict[str, Any] = {
            "title": "Water plants",
            "created_by": "u-assistant",
            "due_at": datetime(2024, 1, 1, 9, 0, tzinfo=UTC),
        }
        data.update(kwargs)
        return await task_service.create_task(data=TaskCreate(household_id=household_id, **data))

    return _create


@pytest.fixture
def important_date_factory(patched_db) -> Callable[..., Awaitable[ImportantDate]]:
    """Factory for creating important dates.

    Usage:
        date = await important_date_factory(household.id, title="Mom's Birthday", date=datetime(...))
    """

    async def _create(household_id: str, **kwargs: Any) -> ImportantDate:
        data: dict[str, Any] = {"title": "Mom's Birthday", "date": datetime(1960, 3, 5, tzinfo=UTC)}
        data.update(kwargs)
        return await moments_service.create_important_date(
            data=ImportantDateCreate(household_id=household_id, **data)
        )

    return _create
