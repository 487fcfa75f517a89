"""Date helpers for annually recurring dates and lookahead windows."""

from datetime import UTC, date, datetime, timedelta

from dateutil.relativedelta import relativedelta


def as_utc(value: datetime) -> datetime:
    """Return value in UTC, assuming UTC for naive values."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def project_to_year(value: date, year: int) -> date:
    """Move a month/day onto another year, clamping Feb 29 to Feb 28."""
    return value + relativedelta(year=year)


def next_annual_occurrence(value: date, today: date) -> date:
    """Return the next occurrence of value's month/day on or after today.

    The date is first projected onto today's year; if that already passed,
    it is projected onto the following year.
    """
    projected = project_to_year(value, today.year)
    if projected < today:
        projected = project_to_year(value, today.year + 1)
    return projected


def is_within_window(target: date, start: date, days: int) -> bool:
    """Check start <= target <= start + days (inclusive both ends)."""
    return start <= target <= start + timedelta(days=days)


def combine_with_time_of(target: date, reference: datetime) -> datetime:
    """Place target at reference's wall-clock time, in reference's timezone.

    Naive references are taken as UTC.
    """
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=UTC)
    return datetime.combine(target, reference.timetz())


def format_month_day(value: date) -> str:
    """Format a date as "March 5"."""
    return f"{value:%B} {value.day}"
