"""HTTP routes for household tasks."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.core.config import Constants
from src.domain.create_models import TaskCreate
from src.domain.task import Recurrence, ServiceType, Task, TaskCategory, TaskStatus, Urgency
from src.interface.request_context import RequestContext, get_request_context
from src.models.service_models import CompletionResult
from src.modules.tasks import service
from src.modules.tasks.permissions import Permission, require_permission
from src.services.household_service import get_household_member


router = APIRouter(prefix="/tasks", tags=["tasks"])

Context = Annotated[RequestContext, Depends(get_request_context)]


class TaskCreateRequest(BaseModel):
    """Request body for creating a task; household and creator come from the caller."""

    title: str = Field(..., min_length=1, max_length=Constants.TASK_TITLE_MAX_LENGTH)
    description: str | None = None
    status: TaskStatus = TaskStatus.INBOX
    category: TaskCategory = TaskCategory.OTHER
    urgency: Urgency = Urgency.MEDIUM
    due_at: datetime | None = None
    location: str | None = None
    notes: str | None = None
    assigned_to: str | None = None
    service_type: ServiceType = ServiceType.PA
    recurrence: Recurrence = Recurrence.NONE
    recurrence_custom_days: int | None = Field(None, gt=0)


class TaskCancelRequest(BaseModel):
    """Request body for cancelling a task."""

    reason: str | None = Field(None, max_length=Constants.TASK_TEXT_MAX_LENGTH)


async def _require(ctx: RequestContext, permission: Permission) -> None:
    member = await get_household_member(household_id=ctx.household_id, user_id=ctx.user_id)
    require_permission(member, permission)


@router.get("")
async def list_tasks(ctx: Context, status: TaskStatus | None = None) -> list[Task]:
    """List the household's tasks."""
    await _require(ctx, Permission.VIEW_TASKS)
    return await service.get_tasks(household_id=ctx.household_id, status=status)


@router.post("", status_code=201)
async def create_task(ctx: Context, body: TaskCreateRequest) -> Task:
    """Create a task in the caller's household."""
    await _require(ctx, Permission.EDIT_TASKS)
    data = TaskCreate(**body.model_dump(), household_id=ctx.household_id, created_by=ctx.user_id)
    return await service.create_task(data=data)


@router.post("/{task_id}/complete")
async def complete_task(ctx: Context, task_id: str) -> CompletionResult:
    """Complete a task, creating its next occurrence when it recurs."""
    return await service.complete_task(household_id=ctx.household_id, task_id=task_id, acting_user_id=ctx.user_id)


@router.post("/{task_id}/cancel")
async def cancel_task(ctx: Context, task_id: str, body: TaskCancelRequest | None = None) -> Task:
    """Cancel a task that is not yet finished."""
    return await service.cancel_task(
        household_id=ctx.household_id,
        task_id=task_id,
        acting_user_id=ctx.user_id,
        reason=body.reason if body else None,
    )


@router.get("/series/{group_id}")
async def get_series(ctx: Context, group_id: str) -> list[Task]:
    """List every occurrence of a recurring series."""
    await _require(ctx, Permission.VIEW_TASKS)
    return await service.get_recurrence_series(household_id=ctx.household_id, group_id=group_id)
