"""Household service for tenants and their members."""

import logging

from src.core import db_client
from src.core.db_client import sanitize_param
from src.core.logging import span
from src.domain.create_models import HouseholdCreate, MemberCreate
from src.domain.household import Household, HouseholdMember


logger = logging.getLogger(__name__)


async def create_household(*, data: HouseholdCreate) -> Household:
    """Create a new household.

    Args:
        data: Household creation payload

    Returns:
        Created household

    Raises:
        db_client.DatabaseError: If database operation fails
    """
    with span("household_service.create_household"):
        record = await db_client.create_record(collection="households", data=data.model_dump())
        logger.info("Created household: %s", record["id"])
        return Household.model_validate(record)


async def get_all_households() -> list[Household]:
    """List every household in the system, oldest first."""
    with span("household_service.get_all_households"):
        records = await db_client.list_all_records(collection="households", sort="+created")
        return [Household.model_validate(r) for r in records]


async def add_member(*, data: MemberCreate) -> HouseholdMember:
    """Add a user to a household with a role.

    Raises:
        ValueError: If the user is already a member of the household
        db_client.DatabaseError: If database operation fails
    """
    with span("household_service.add_member"):
        existing = await get_household_member(household_id=data.household_id, user_id=data.user_id)
        if existing is not None:
            msg = f"User {data.user_id} is already a member of household {data.household_id}"
            raise ValueError(msg)

        record = await db_client.create_record(collection="household_members", data=data.model_dump())
        logger.info("Added %s to household %s as %s", data.user_id, data.household_id, data.role)
        return HouseholdMember.model_validate(record)


async def get_household_member(*, household_id: str, user_id: str) -> HouseholdMember | None:
    """Look up a user's membership in a household, or None if not a member."""
    record = await db_client.get_first_record(
        collection="household_members",
        filter_query=(
            f'household_id = "{sanitize_param(household_id)}" && user_id = "{sanitize_param(user_id)}"'
        ),
    )
    if record is None:
        return None
    return HouseholdMember.model_validate(record)
