"""Task service for CRUD operations and recurring task completion."""

import logging
from typing import Any

from src.core import db_client
from src.core.db_client import sanitize_param
from src.core.errors import NotFoundError
from src.core.logging import span
from src.core.recurrence import calculate_next_occurrence, format_due_label
from src.domain.create_models import TaskCreate
from src.domain.task import Task, TaskStatus
from src.domain.update_models import RecurrenceGroupUpdate
from src.models.service_models import CompletionResult
from src.modules.tasks import state_machine
from src.modules.tasks.permissions import Permission, authorize_task_action, require_permission
from src.services.household_service import get_household_member


logger = logging.getLogger(__name__)

# Fields a successor inherits from the occurrence that was just completed
_SUCCESSOR_FIELDS = (
    "title",
    "description",
    "category",
    "urgency",
    "location",
    "notes",
    "recurrence",
    "recurrence_custom_days",
)


async def create_task(*, data: TaskCreate) -> Task:
    """Create a new task.

    Args:
        data: Validated task creation payload

    Returns:
        Created task

    Raises:
        db_client.DatabaseError: If database operation fails
    """
    with span("task_service.create_task"):
        record = await db_client.create_record(collection="tasks", data=data.model_dump(mode="json"))
        logger.info("Created task '%s' in household %s", data.title, data.household_id)
        return Task.model_validate(record)


async def get_task(*, household_id: str, task_id: str) -> Task | None:
    """Fetch a task by ID, or None if it does not exist in the household."""
    with span("task_service.get_task"):
        try:
            record = await db_client.get_record(collection="tasks", record_id=task_id)
        except db_client.RecordNotFoundError:
            return None

        # Tasks from other households are indistinguishable from missing ones
        if record["household_id"] != household_id:
            return None
        return Task.model_validate(record)


async def get_tasks(*, household_id: str, status: TaskStatus | None = None) -> list[Task]:
    """List all tasks of a household, optionally filtered by status."""
    with span("task_service.get_tasks"):
        filter_query = f'household_id = "{sanitize_param(household_id)}"'
        if status is not None:
            filter_query += f' && status = "{status}"'

        records = await db_client.list_all_records(collection="tasks", filter_query=filter_query, sort="+created")
        return [Task.model_validate(r) for r in records]


async def update_task(*, household_id: str, task_id: str, data: dict[str, Any]) -> Task | None:
    """Apply a partial update to a task, returning None if it does not exist in the household."""
    with span("task_service.update_task"):
        if await get_task(household_id=household_id, task_id=task_id) is None:
            return None

        record = await db_client.update_record(collection="tasks", record_id=task_id, data=data)
        return Task.model_validate(record)


async def get_recurrence_series(*, household_id: str, group_id: str) -> list[Task]:
    """List the occurrences of a recurring series in order."""
    with span("task_service.get_recurrence_series"):
        records = await db_client.list_all_records(
            collection="tasks",
            filter_query=(
                f'household_id = "{sanitize_param(household_id)}" && recurrence_group_id = "{sanitize_param(group_id)}"'
            ),
            sort="+recurrence_occurrence",
        )
        return [Task.model_validate(r) for r in records]


async def _get_editable_task(*, household_id: str, task_id: str, acting_user_id: str) -> Task:
    """Resolve a task the acting user may edit.

    Membership and role are checked before the task is looked up.

    Raises:
        ForbiddenError: If the user may not edit this task
        NotFoundError: If the task does not exist in the household
    """
    member = await get_household_member(household_id=household_id, user_id=acting_user_id)
    member = require_permission(member, Permission.EDIT_TASKS)

    task = await get_task(household_id=household_id, task_id=task_id)
    if task is None:
        msg = f"Task {task_id} not found"
        raise NotFoundError(msg)

    authorize_task_action(member, task)
    return task


async def _create_successor(*, task: Task, acting_user_id: str) -> tuple[Task, Task] | None:
    """Create the next occurrence of a completed recurring task.

    Returns:
        (completed task with its series id set, successor), or None when the
        recurrence rule yields no next date
    """
    next_due = calculate_next_occurrence(task.recurrence, task.recurrence_custom_days, task.due_at)
    if next_due is None:
        logger.info("Recurring task %s has no next occurrence", task.id)
        return None

    group_id = task.recurrence_group_id or task.id
    successor = await create_task(
        data=TaskCreate(
            **task.model_dump(include=set(_SUCCESSOR_FIELDS)),
            household_id=task.household_id,
            due_at=next_due,
            status=TaskStatus.PLANNED,
            created_by=acting_user_id,
            recurrence_group_id=group_id,
            recurrence_occurrence=(task.recurrence_occurrence or 1) + 1,
        )
    )

    if task.recurrence_group_id is None:
        record = await db_client.update_record(
            collection="tasks",
            record_id=task.id,
            data=RecurrenceGroupUpdate(recurrence_group_id=group_id).model_dump(),
        )
        task = Task.model_validate(record)

    logger.info(
        "Created occurrence %d of series %s: task %s due %s",
        successor.recurrence_occurrence,
        group_id,
        successor.id,
        next_due.isoformat(),
    )
    return task, successor


async def complete_task(*, household_id: str, task_id: str, acting_user_id: str) -> CompletionResult:
    """Mark a task DONE and, for recurring tasks, create the next occurrence.

    The first completion of a series anchors it: the completed task's
    recurrence_group_id is set to its own id and shared with the successor.
    Completing a task that is already DONE changes nothing.

    Args:
        household_id: Household the task belongs to
        task_id: Task to complete
        acting_user_id: User performing the completion

    Returns:
        The completed task, plus the successor and its due label if one was created

    Raises:
        ForbiddenError: If the user may not complete this task
        NotFoundError: If the task does not exist in the household
        InvalidStateTransitionError: If the task is CANCELLED
        db_client.DatabaseError: If database operation fails
    """
    with span("task_service.complete_task"):
        task = await _get_editable_task(household_id=household_id, task_id=task_id, acting_user_id=acting_user_id)

        completed = await state_machine.transition_to_done(task=task)
        if completed is None:
            current = await get_task(household_id=household_id, task_id=task_id)
            return CompletionResult(completed_task=current or task)

        if not completed.is_recurring:
            return CompletionResult(completed_task=completed)

        created = await _create_successor(task=completed, acting_user_id=acting_user_id)
        if created is None:
            return CompletionResult(completed_task=completed)

        completed, successor = created
        return CompletionResult(
            completed_task=completed,
            next_task=successor,
            next_due=format_due_label(successor.due_at) if successor.due_at else None,
        )


async def cancel_task(
    *,
    household_id: str,
    task_id: str,
    acting_user_id: str,
    reason: str | None = None,
) -> Task:
    """Cancel a task that is not yet DONE or CANCELLED.

    Raises:
        ForbiddenError: If the user may not cancel this task
        NotFoundError: If the task does not exist in the household
        InvalidStateTransitionError: If the task is already DONE or CANCELLED
    """
    with span("task_service.cancel_task"):
        task = await _get_editable_task(household_id=household_id, task_id=task_id, acting_user_id=acting_user_id)
        cancelled = await state_machine.transition_to_cancelled(task=task, cancelled_by=acting_user_id, reason=reason)
        logger.info("User %s cancelled task %s", acting_user_id, task_id)
        return cancelled
