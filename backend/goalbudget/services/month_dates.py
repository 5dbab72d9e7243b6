from __future__ import annotations

import calendar
from datetime import date, datetime, timezone


def utc_today() -> date:
    """Wrapper for deterministic tests."""
    return datetime.now(timezone.utc).date()


def month_start_of(value: date) -> date:
    return date(value.year, value.month, 1)


def month_index(value: date) -> int:
    # Absolute month counter; only differences between two indexes are meaningful.
    return value.year * 12 + value.month


def months_between(earlier: date, later: date) -> int:
    """Whole calendar months from `earlier` to `later`, ignoring the day."""
    return month_index(later) - month_index(earlier)


def shift_months(month_start: date, offset: int) -> date:
    # Normalize any input date to month start for stable month arithmetic.
    absolute_index = (month_start.year * 12 + (month_start.month - 1)) + offset
    next_year, month_zero_based = divmod(absolute_index, 12)
    return date(next_year, month_zero_based + 1, 1)


def add_months_clamped(value: date, offset: int) -> date:
    """Same day `offset` months later, clamped to the target month's last day."""
    target = shift_months(value, offset)
    last_day = calendar.monthrange(target.year, target.month)[1]
    return date(target.year, target.month, min(value.day, last_day))


def month_start_end_exclusive(year: int, month: int) -> tuple[date, date]:
    """Build [month_start, next_month_start) boundaries."""
    month_start = date(year, month, 1)
    return month_start, shift_months(month_start, 1)
