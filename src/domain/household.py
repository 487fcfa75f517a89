"""Household and membership domain models."""

from enum import StrEnum

from pydantic import BaseModel, Field

from src.domain.task import ServiceType


class HouseholdRole(StrEnum):
    """Role of a user inside a household."""

    ASSISTANT = "ASSISTANT"
    CLIENT = "CLIENT"
    STAFF = "STAFF"


class Household(BaseModel):
    """Household (tenant boundary)."""

    id: str = Field(..., description="Unique household ID")
    created: str | None = Field(default=None, description="Creation timestamp")
    updated: str | None = Field(default=None, description="Last update timestamp")
    name: str = Field(..., description="Household display name")


class HouseholdMember(BaseModel):
    """A user's membership in a household."""

    id: str = Field(..., description="Unique membership ID")
    household_id: str = Field(..., description="Household ID")
    user_id: str = Field(..., description="User ID")
    role: HouseholdRole = Field(default=HouseholdRole.CLIENT, description="Role in the household")
    service_type: ServiceType | None = Field(default=None, description="Service line the member works in")
