from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import CellAction, TimesheetStatus
from ..time_entries.model import GroupKey, TimeEntry


@dataclass(frozen=True)
class WeeklyTimesheet:
    """Submission flag for one employee's Monday-start week."""

    employee_id: int
    week_start: date
    status: TimesheetStatus = TimesheetStatus.NOT_SUBMITTED
    timesheet_id: Optional[int] = None

    @property
    def is_submitted(self) -> bool:
        return self.status == TimesheetStatus.SUBMITTED

    def to_dict(self) -> dict:
        return {
            "id": self.timesheet_id,
            "employee_id": self.employee_id,
            "week_start": self.week_start.isoformat(),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class EntryFilters:
    project_id: Optional[int] = None
    employee_id: Optional[int] = None
    on_date: Optional[date] = None

    def matches(self, entry: TimeEntry) -> bool:
        if self.project_id is not None and entry.project_id != self.project_id:
            return False
        if self.employee_id is not None and not entry.group_key.includes(self.employee_id):
            return False
        if self.on_date is not None and entry.work_date != self.on_date:
            return False
        return True


@dataclass(frozen=True)
class MatrixRow:
    key: GroupKey
    representative: TimeEntry
    hours_by_date: dict[date, float]
    total: float
    descriptions: dict[date, str] = field(default_factory=dict)

    def hours_on(self, day: date) -> float:
        return self.hours_by_date.get(day, 0.0)


@dataclass(frozen=True)
class WeeklyMatrix:
    week_start: date
    days: list[date]
    rows: list[MatrixRow]
    day_totals: dict[date, float]
    grand_total: float

    def row_for(self, key: GroupKey) -> Optional[MatrixRow]:
        for row in self.rows:
            if row.key == key:
                return row
        return None

    def cell(self, key: GroupKey, day: date) -> float:
        row = self.row_for(key)
        return row.hours_on(day) if row else 0.0


@dataclass(frozen=True)
class SummaryRow:
    key: GroupKey
    representative: TimeEntry
    total_hours: float
    entry_count: int


@dataclass(frozen=True)
class BillingTotals:
    total: float
    billable: float
    non_billable: float

    def to_dict(self) -> dict:
        return {"total": self.total, "billable": self.billable, "non_billable": self.non_billable}


@dataclass(frozen=True)
class CellResult:
    action: CellAction
    entry: Optional[TimeEntry] = None

    def to_dict(self) -> dict:
        return {"action": self.action.value, "entry": self.entry.to_dict() if self.entry else None}
