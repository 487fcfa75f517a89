"""HTTP routes for important dates and moments generation."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.core.config import Constants
from src.domain.create_models import ImportantDateCreate
from src.domain.important_date import ImportantDate, ImportantDateType
from src.interface.request_context import RequestContext, get_request_context
from src.models.service_models import MomentsGenerateResponse
from src.modules.moments import service
from src.modules.tasks.permissions import Permission, require_permission
from src.services.household_service import get_household_member


router = APIRouter(tags=["moments"])

Context = Annotated[RequestContext, Depends(get_request_context)]


class ImportantDateCreateRequest(BaseModel):
    """Request body for creating an important date."""

    type: ImportantDateType = ImportantDateType.OTHER
    title: str = Field(..., min_length=1, max_length=Constants.IMPORTANT_DATE_TITLE_MAX_LENGTH)
    date: datetime
    notes: str | None = Field(None, max_length=Constants.IMPORTANT_DATE_NOTES_MAX_LENGTH)


async def _require(ctx: RequestContext, permission: Permission) -> None:
    member = await get_household_member(household_id=ctx.household_id, user_id=ctx.user_id)
    require_permission(member, permission)


@router.get("/important-dates")
async def list_important_dates(ctx: Context) -> list[ImportantDate]:
    """List the household's important dates."""
    await _require(ctx, Permission.VIEW_TASKS)
    return await service.get_important_dates(household_id=ctx.household_id)


@router.post("/important-dates", status_code=201)
async def create_important_date(ctx: Context, body: ImportantDateCreateRequest) -> ImportantDate:
    """Add an important date to the household."""
    await _require(ctx, Permission.MANAGE_IMPORTANT_DATES)
    data = ImportantDateCreate(**body.model_dump(), household_id=ctx.household_id)
    return await service.create_important_date(data=data)


@router.post("/moments/generate")
async def generate_moments(ctx: Context) -> MomentsGenerateResponse:
    """Create reminder tasks for the household's upcoming important dates now."""
    await _require(ctx, Permission.GENERATE_MOMENTS)
    tasks_created = await service.generate_moments_tasks(household_id=ctx.household_id)
    return MomentsGenerateResponse(
        tasks_created=tasks_created,
        message=f"Created {tasks_created} task(s) from upcoming important dates",
    )
