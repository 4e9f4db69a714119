"""Pure read-side aggregation over time entries.

Nothing here mutates or persists; callers pass a snapshot of entries.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Callable, Iterable, Sequence

from ..common.datetime_utils import week_days
from ..core.enums import BillingType
from ..core.exceptions import ValidationError
from ..time_entries.model import TimeEntry
from .grouping import group_entries
from .model import BillingTotals, MatrixRow, SummaryRow, WeeklyMatrix


def in_range(entries: Iterable[TimeEntry], start: date, end: date) -> list[TimeEntry]:
    return [e for e in entries if start <= e.work_date <= end]


def total_hours(entries: Iterable[TimeEntry]) -> float:
    return math.fsum(e.worked_hours for e in entries)


def hours_on(entries: Iterable[TimeEntry], day: date) -> float:
    return total_hours(e for e in entries if e.work_date == day)


def build_weekly_matrix(entries: Iterable[TimeEntry], week_start: date) -> WeeklyMatrix:
    days = week_days(week_start)
    start, end = days[0], days[-1]
    groups = group_entries(in_range(entries, start, end))

    rows: list[MatrixRow] = []
    for key, items in groups.items():
        hours_by_date: dict[date, float] = {}
        descriptions: dict[date, str] = {}
        for day in days:
            on_day = [e for e in items if e.work_date == day]
            hours_by_date[day] = total_hours(on_day)
            notes = [e.description for e in on_day if e.description]
            if notes:
                descriptions[day] = "\n".join(notes)
        rows.append(
            MatrixRow(
                key=key,
                representative=items[0],
                hours_by_date=hours_by_date,
                total=math.fsum(hours_by_date.values()),
                descriptions=descriptions,
            )
        )

    day_totals = {day: math.fsum(r.hours_by_date[day] for r in rows) for day in days}
    return WeeklyMatrix(
        week_start=start,
        days=days,
        rows=rows,
        day_totals=day_totals,
        grand_total=math.fsum(day_totals.values()),
    )


def build_summary(entries: Iterable[TimeEntry], start: date, end: date) -> list[SummaryRow]:
    groups = group_entries(in_range(entries, start, end))
    return [
        SummaryRow(key=key, representative=items[0], total_hours=total_hours(items), entry_count=len(items))
        for key, items in groups.items()
    ]


_LOG_SORT_KEYS: dict[str, Callable[[TimeEntry], object]] = {
    "date": lambda e: (e.work_date, e.entry_id or 0),
    "project": lambda e: (e.project_name.lower(), e.work_date),
    "task": lambda e: (e.task_name.lower(), e.work_date),
    "hours": lambda e: (e.worked_hours, e.work_date),
    "status": lambda e: (e.status.value, e.work_date),
    "billing": lambda e: (e.billing_type.value, e.work_date),
}


def build_logs(
    entries: Iterable[TimeEntry],
    start: date,
    end: date,
    *,
    sort_by: str = "date",
    descending: bool = False,
) -> list[TimeEntry]:
    """Flat entries in range; zero-hour rows (e.g. holders) are left out."""

    sort_key = _LOG_SORT_KEYS.get(sort_by)
    if sort_key is None:
        raise ValidationError(f"Unsupported sort key: {sort_by}")
    rows = [e for e in in_range(entries, start, end) if e.worked_hours > 0]
    return sorted(rows, key=sort_key, reverse=descending)


def billing_totals(entries: Sequence[TimeEntry]) -> BillingTotals:
    return BillingTotals(
        total=total_hours(entries),
        billable=total_hours(e for e in entries if e.billing_type == BillingType.BILLABLE),
        non_billable=total_hours(e for e in entries if e.billing_type == BillingType.NON_BILLABLE),
    )
