"""State transition functions for task lifecycle management."""

import logging
from datetime import UTC, datetime

from src.core import db_client
from src.core.db_client import sanitize_param
from src.core.errors import InvalidStateTransitionError, NotFoundError
from src.core.logging import span
from src.domain.task import TERMINAL_STATUSES, Task, TaskStatus
from src.domain.update_models import TaskCancellationUpdate, TaskStatusUpdate


logger = logging.getLogger(__name__)

_ACTIVE_STATUSES: frozenset[TaskStatus] = frozenset(TaskStatus) - TERMINAL_STATUSES

# Active tasks move freely between active statuses and may end as DONE or CANCELLED.
ALLOWED_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    **{status: frozenset(TaskStatus) - {status} for status in _ACTIVE_STATUSES},
    TaskStatus.DONE: frozenset(),
    TaskStatus.CANCELLED: frozenset(),
}

_NOT_TERMINAL_FILTER = f'status != "{TaskStatus.DONE}" && status != "{TaskStatus.CANCELLED}"'


def can_transition(current: TaskStatus, target: TaskStatus) -> bool:
    """Check whether current -> target is an allowed status change."""
    return target in ALLOWED_TRANSITIONS[current]


def validate_transition(*, task: Task, target: TaskStatus) -> None:
    """Raise InvalidStateTransitionError if task cannot move to target."""
    if not can_transition(task.status, target):
        msg = f"Cannot move task {task.id} from {task.status} to {target}"
        raise InvalidStateTransitionError(msg)


async def _reload(task: Task) -> Task:
    try:
        record = await db_client.get_record(collection="tasks", record_id=task.id)
    except db_client.RecordNotFoundError as e:
        msg = f"Task {task.id} not found"
        raise NotFoundError(msg) from e
    return Task.model_validate(record)


async def transition_to_done(*, task: Task) -> Task | None:
    """Mark a task DONE with a compare-and-set on its status.

    Returns:
        The updated task, or None if the task was already DONE
        (including when a concurrent completion won the race)

    Raises:
        InvalidStateTransitionError: If the task is CANCELLED
    """
    with span("task_state_machine.transition_to_done"):
        if task.status == TaskStatus.DONE:
            return None
        validate_transition(task=task, target=TaskStatus.DONE)

        record = await db_client.conditional_update(
            collection="tasks",
            record_id=task.id,
            data=TaskStatusUpdate(status=TaskStatus.DONE).model_dump(mode="json"),
            filter_query=f'household_id = "{sanitize_param(task.household_id)}" && {_NOT_TERMINAL_FILTER}',
        )
        if record is not None:
            logger.info("Transitioned task %s to DONE", task.id)
            return Task.model_validate(record)

        current = await _reload(task)
        if current.status == TaskStatus.DONE:
            logger.info("Task %s was already DONE", task.id)
            return None
        validate_transition(task=current, target=TaskStatus.DONE)
        msg = f"Task {task.id} changed while being completed"
        raise InvalidStateTransitionError(msg)


async def transition_to_cancelled(*, task: Task, cancelled_by: str, reason: str | None = None) -> Task:
    """Mark a non-terminal task CANCELLED and record who cancelled it.

    Raises:
        InvalidStateTransitionError: If the task is already DONE or CANCELLED
    """
    with span("task_state_machine.transition_to_cancelled"):
        validate_transition(task=task, target=TaskStatus.CANCELLED)

        update = TaskCancellationUpdate(
            cancelled_at=datetime.now(UTC),
            cancelled_by=cancelled_by,
            cancellation_reason=reason,
        )
        record = await db_client.conditional_update(
            collection="tasks",
            record_id=task.id,
            data=update.model_dump(mode="json"),
            filter_query=f'household_id = "{sanitize_param(task.household_id)}" && {_NOT_TERMINAL_FILTER}',
        )
        if record is None:
            current = await _reload(task)
            validate_transition(task=current, target=TaskStatus.CANCELLED)
            msg = f"Task {task.id} changed while being cancelled"
            raise InvalidStateTransitionError(msg)

        logger.info("Transitioned task %s to CANCELLED", task.id)
        return Task.model_validate(record)
