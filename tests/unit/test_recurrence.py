"""Tests for recurrence date arithmetic."""

from datetime import UTC, datetime, timedelta

import pytest

from src.core.recurrence import calculate_next_occurrence, format_due_label


@pytest.mark.unit
@pytest.mark.parametrize(
    ("recurrence", "custom_days", "anchor", "expected"),
    [
        ("daily", None, datetime(2024, 1, 31), datetime(2024, 2, 1)),
        ("weekly", None, datetime(2024, 1, 1), datetime(2024, 1, 8)),
        ("biweekly", None, datetime(2024, 1, 1), datetime(2024, 1, 15)),
        ("monthly", None, datetime(2024, 1, 31), datetime(2024, 2, 29)),
        ("monthly", None, datetime(2023, 1, 31), datetime(2023, 2, 28)),
        ("monthly", None, datetime(2024, 12, 15), datetime(2025, 1, 15)),
        ("custom", 5, datetime(2024, 1, 1), datetime(2024, 1, 6)),
    ],
)
def test_next_occurrence_steps(recurrence, custom_days, anchor, expected):
    """Each rule advances the anchor by its step, clamping monthly steps to month length."""
    assert calculate_next_occurrence(recurrence, custom_days, anchor) == expected


@pytest.mark.unit
@pytest.mark.parametrize(
    ("recurrence", "custom_days"),
    [
        ("custom", 0),
        ("custom", -3),
        ("custom", None),
        ("custom", True),
        ("none", None),
        ("none", 5),
        (None, None),
        ("yearly", None),
    ],
)
def test_no_next_occurrence(recurrence, custom_days):
    """Invalid custom steps and non-recurring rules yield no next occurrence."""
    assert calculate_next_occurrence(recurrence, custom_days, datetime(2024, 1, 1)) is None


@pytest.mark.unit
def test_anchor_falls_back_to_now():
    """Without a due date the next occurrence is computed from the current time."""
    before = datetime.now(UTC)
    result = calculate_next_occurrence("weekly", None, None)
    after = datetime.now(UTC)

    assert result is not None
    assert before + timedelta(days=7) <= result <= after + timedelta(days=7)


@pytest.mark.unit
def test_anchor_fallback_uses_injected_now():
    """An explicit now is used when there is no due date."""
    now = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)

    assert calculate_next_occurrence("daily", None, None, now=now) == datetime(2024, 3, 11, 12, 0, tzinfo=UTC)


@pytest.mark.unit
def test_due_date_preserves_time_and_timezone():
    """The step keeps the anchor's time of day and timezone."""
    anchor = datetime(2024, 1, 31, 18, 30, tzinfo=UTC)

    assert calculate_next_occurrence("monthly", None, anchor) == datetime(2024, 2, 29, 18, 30, tzinfo=UTC)


@pytest.mark.unit
def test_format_due_label():
    """Due labels use the short month name and unpadded day."""
    assert format_due_label(datetime(2024, 2, 29)) == "Feb 29"
    assert format_due_label(datetime(2024, 1, 8)) == "Jan 8"
