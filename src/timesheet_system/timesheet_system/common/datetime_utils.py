from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from ..core.constants import DAYS_PER_WEEK
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def utc_now() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc)


def week_start_for(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def week_days(week_start: date) -> list[date]:
    start = week_start_for(week_start)
    return [start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def week_end_for(day: date) -> date:
    return week_start_for(day) + timedelta(days=DAYS_PER_WEEK - 1)


def month_range(day: date) -> tuple[date, date]:
    start = day.replace(day=1)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return start, next_month - timedelta(days=1)


def elapsed_seconds(start: datetime, end: datetime) -> int:
    """Whole seconds from ``start`` to ``end``, floored and never negative."""
    return max(int((end - start).total_seconds()), 0)


def resolve_range(
    name: str,
    *,
    today: date,
    anchor: Optional[date] = None,
    custom_start: Optional[date] = None,
    custom_end: Optional[date] = None,
) -> tuple[date, date]:
    """Resolve a named range filter (today / this_week / this_month / custom).

    ``this_week`` follows the visible week (``anchor``) rather than the calendar week of today.
    A custom range missing either bound falls back to ``this_week``.
    """

    name = (name or "this_week").strip().lower()
    if name == "today":
        return today, today
    if name == "this_month":
        return month_range(today)
    if name == "custom" and custom_start and custom_end:
        if custom_end < custom_start:
            raise ValidationError("End date must be on or after start date")
        return custom_start, custom_end

    base = anchor or today
    return week_start_for(base), week_end_for(base)
