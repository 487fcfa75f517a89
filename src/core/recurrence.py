"""Recurrence arithmetic for recurring task series."""

from datetime import UTC, datetime, timedelta

from dateutil.relativedelta import relativedelta


_FIXED_INTERVALS: dict[str, timedelta] = {
    "daily": timedelta(days=1),
    "weekly": timedelta(weeks=1),
    "biweekly": timedelta(weeks=2),
}


def calculate_next_occurrence(
    recurrence: str | None,
    custom_days: int | None,
    current_due_at: datetime | None,
    *,
    now: datetime | None = None,
) -> datetime | None:
    """Compute the due date of the next occurrence in a recurring series.

    The anchor is the current due date, or the current time when the task
    has no due date. Monthly steps keep the day of month and clamp to the
    last valid day (Jan 31 -> Feb 29 in a leap year).

    Args:
        recurrence: One of "daily", "weekly", "biweekly", "monthly", "custom";
            anything else (including "none") yields no next occurrence
        custom_days: Step in days for "custom"; must be a positive integer
        current_due_at: Due date of the occurrence being completed
        now: Override for the current time when there is no due date

    Returns:
        The next due date, or None when the series does not continue
    """
    anchor = current_due_at or now or datetime.now(UTC)

    if recurrence in _FIXED_INTERVALS:
        return anchor + _FIXED_INTERVALS[recurrence]

    if recurrence == "monthly":
        return anchor + relativedelta(months=1)

    if recurrence == "custom":
        # bool is an int subclass; True is not a day count
        if isinstance(custom_days, int) and not isinstance(custom_days, bool) and custom_days > 0:
            return anchor + timedelta(days=custom_days)
        return None

    return None


def format_due_label(due_at: datetime) -> str:
    """Format a due date as a short label, e.g. "Feb 29"."""
    return f"{due_at:%b} {due_at.day}"
