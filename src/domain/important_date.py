"""Important date domain models (birthdays, anniversaries, ...)."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class ImportantDateType(StrEnum):
    """Kind of important date."""

    BIRTHDAY = "BIRTHDAY"
    ANNIVERSARY = "ANNIVERSARY"
    MEMORIAL = "MEMORIAL"
    HOLIDAY = "HOLIDAY"
    OTHER = "OTHER"


class ImportantDate(BaseModel):
    """Important date data transfer object.

    Only month and day of ``date`` matter; the year is a reference year.
    """

    id: str = Field(..., description="Unique important date ID")
    created: str | None = Field(default=None, description="Creation timestamp")
    updated: str | None = Field(default=None, description="Last update timestamp")
    household_id: str = Field(..., description="Owning household ID")
    type: ImportantDateType = Field(default=ImportantDateType.OTHER, description="Kind of date")
    title: str = Field(..., description="Title, e.g. \"Mom's Birthday\"")
    date: datetime = Field(..., description="Date of the event in any reference year")
    notes: str | None = Field(default=None, description="Free-form notes appended to reminders")
