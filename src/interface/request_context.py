"""Caller identity asserted by the upstream gateway."""

from typing import Annotated

from fastapi import Header
from pydantic import BaseModel


class RequestContext(BaseModel):
    """Household and user a request acts on behalf of."""

    household_id: str
    user_id: str


async def get_request_context(
    x_household_id: Annotated[str, Header(min_length=1)],
    x_user_id: Annotated[str, Header(min_length=1)],
) -> RequestContext:
    """Read the X-Household-Id and X-User-Id headers."""
    return RequestContext(household_id=x_household_id, user_id=x_user_id)
