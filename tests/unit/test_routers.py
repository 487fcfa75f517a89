"""Tests for the tasks and moments HTTP routes."""

from datetime import UTC, datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from src.domain.household import HouseholdRole
from src.domain.task import ServiceType
from src.main import app


@pytest.fixture
async def client(patched_db):
    """HTTP client bound to the app, backed by the in-memory database."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
async def household(household_factory, member_factory):
    household = await household_factory(name="The Smiths")
    await member_factory(household.id, "u-assistant", HouseholdRole.ASSISTANT)
    await member_factory(household.id, "u-client", HouseholdRole.CLIENT)
    await member_factory(household.id, "u-staff", HouseholdRole.STAFF, ServiceType.CLEANING)
    return household


def _headers(household_id: str, user_id: str = "u-assistant") -> dict[str, str]:
    return {"X-Household-Id": household_id, "X-User-Id": user_id}


@pytest.mark.unit
async def test_create_and_complete_recurring_task(client, household):
    response = await client.post(
        "/tasks",
        json={"title": "Water plants", "recurrence": "weekly", "due_at": "2024-01-01T09:00:00Z"},
        headers=_headers(household.id),
    )
    assert response.status_code == 201
    task = response.json()
    assert task["created_by"] == "u-assistant"
    assert task["household_id"] == household.id

    response = await client.post(f"/tasks/{task['id']}/complete", headers=_headers(household.id))

    assert response.status_code == 200
    body = response.json()
    assert body["completed_task"]["status"] == "DONE"
    assert body["next_task"]["recurrence_occurrence"] == 2
    assert body["next_due"] == "Jan 8"

    series = await client.get(f"/tasks/series/{task['id']}", headers=_headers(household.id, "u-client"))
    assert series.status_code == 200
    assert [t["recurrence_occurrence"] for t in series.json()] == [1, 2]


@pytest.mark.unit
async def test_missing_identity_headers(client, household):
    response = await client.get("/tasks", headers={"X-Household-Id": household.id})

    assert response.status_code == 422
    assert response.json()["code"] == "ERR_VALIDATION"


@pytest.mark.unit
async def test_client_cannot_create_tasks(client, household):
    response = await client.post("/tasks", json={"title": "Buy milk"}, headers=_headers(household.id, "u-client"))

    assert response.status_code == 403
    assert response.json()["code"] == "ERR_FORBIDDEN"


@pytest.mark.unit
async def test_staff_completing_unassigned_task(client, household, task_factory):
    task = await task_factory(household.id, service_type=ServiceType.CLEANING)

    response = await client.post(f"/tasks/{task.id}/complete", headers=_headers(household.id, "u-staff"))

    assert response.status_code == 403


@pytest.mark.unit
async def test_complete_unknown_task(client, household):
    response = await client.post("/tasks/missing/complete", headers=_headers(household.id))

    assert response.status_code == 404
    assert response.json()["code"] == "ERR_NOT_FOUND"


@pytest.mark.unit
async def test_complete_cancelled_task(client, household, task_factory):
    task = await task_factory(household.id)
    cancel = await client.post(
        f"/tasks/{task.id}/cancel", json={"reason": "Not needed"}, headers=_headers(household.id)
    )
    assert cancel.status_code == 200
    assert cancel.json()["cancellation_reason"] == "Not needed"

    response = await client.post(f"/tasks/{task.id}/complete", headers=_headers(household.id))

    assert response.status_code == 400
    assert response.json()["code"] == "ERR_INVALID_STATE_TRANSITION"


@pytest.mark.unit
async def test_custom_recurrence_requires_days(client, household):
    response = await client.post(
        "/tasks", json={"title": "Descale kettle", "recurrence": "custom"}, headers=_headers(household.id)
    )

    assert response.status_code == 422


@pytest.mark.unit
async def test_list_tasks_by_status(client, household, task_factory):
    await task_factory(household.id, title="Inbox")
    await task_factory(household.id, title="Planned", status="PLANNED")

    response = await client.get("/tasks", params={"status": "PLANNED"}, headers=_headers(household.id, "u-client"))

    assert response.status_code == 200
    assert [t["title"] for t in response.json()] == ["Planned"]


@pytest.mark.unit
async def test_important_dates_and_generate(client, household):
    upcoming = datetime.now(UTC) + timedelta(days=5)
    response = await client.post(
        "/important-dates",
        json={"type": "BIRTHDAY", "title": "Grandma's Birthday", "date": upcoming.isoformat()},
        headers=_headers(household.id),
    )
    assert response.status_code == 201

    listed = await client.get("/important-dates", headers=_headers(household.id, "u-client"))
    assert [d["title"] for d in listed.json()] == ["Grandma's Birthday"]

    first = await client.post("/moments/generate", headers=_headers(household.id))
    second = await client.post("/moments/generate", headers=_headers(household.id))

    assert first.status_code == 200
    assert first.json()["tasks_created"] == 1
    assert second.json()["tasks_created"] == 0


@pytest.mark.unit
async def test_staff_cannot_manage_moments(client, household):
    response = await client.post("/moments/generate", headers=_headers(household.id, "u-staff"))

    assert response.status_code == 403
