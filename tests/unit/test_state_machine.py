"""Tests for task status transitions."""

import pytest

from src.core.errors import InvalidStateTransitionError
from src.domain.task import TaskStatus
from src.modules.tasks import state_machine


@pytest.mark.unit
@pytest.mark.parametrize("status", [TaskStatus.INBOX, TaskStatus.PLANNED, TaskStatus.IN_PROGRESS])
def test_active_statuses_can_finish(status):
    """Active tasks can be completed or cancelled."""
    assert state_machine.can_transition(status, TaskStatus.DONE)
    assert state_machine.can_transition(status, TaskStatus.CANCELLED)


@pytest.mark.unit
@pytest.mark.parametrize("status", [TaskStatus.DONE, TaskStatus.CANCELLED])
def test_terminal_statuses_are_final(status):
    """DONE and CANCELLED allow no further transitions."""
    assert not any(state_machine.can_transition(status, target) for target in TaskStatus)


@pytest.mark.unit
async def test_transition_to_done(task_factory, household_factory):
    """An active task moves to DONE."""
    household = await household_factory()
    task = await task_factory(household.id)

    done = await state_machine.transition_to_done(task=task)

    assert done is not None
    assert done.status == TaskStatus.DONE


@pytest.mark.unit
async def test_transition_to_done_loses_race(task_factory, household_factory, patched_db):
    """A stale copy of a task completed elsewhere yields None and leaves the record alone."""
    household = await household_factory()
    task = await task_factory(household.id)
    await patched_db.update_record(collection="tasks", record_id=task.id, data={"status": "DONE"})
    before = await patched_db.get_record(collection="tasks", record_id=task.id)

    assert await state_machine.transition_to_done(task=task) is None
    assert await patched_db.get_record(collection="tasks", record_id=task.id) == before


@pytest.mark.unit
async def test_transition_to_done_after_concurrent_cancel(task_factory, household_factory):
    """A stale copy of a task cancelled elsewhere cannot be completed."""
    household = await household_factory()
    task = await task_factory(household.id)
    await state_machine.transition_to_cancelled(task=task, cancelled_by="u-assistant")

    with pytest.raises(InvalidStateTransitionError):
        await state_machine.transition_to_done(task=task)


@pytest.mark.unit
async def test_transition_to_cancelled_on_done_task(task_factory, household_factory):
    """DONE tasks cannot be cancelled."""
    household = await household_factory()
    task = await task_factory(household.id, status=TaskStatus.DONE)

    with pytest.raises(InvalidStateTransitionError):
        await state_machine.transition_to_cancelled(task=task, cancelled_by="u-assistant")
