from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import elapsed_seconds
from ..core.enums import ClockStatus


@dataclass(frozen=True)
class DailyTime:
    """Domain entity: one employee's attendance clock for one calendar date.

    ``committed_seconds`` only holds closed intervals. The open interval (while clocked in)
    starts at ``open_interval_start`` and is folded in on pause/clock-out.
    """

    employee_id: int
    work_date: date
    status: ClockStatus
    committed_seconds: int = 0
    open_interval_start: Optional[datetime] = None
    record_id: Optional[int] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def not_started(cls, employee_id: int, work_date: date) -> "DailyTime":
        """Transient view of a day nobody clocked yet (not persisted)."""
        return cls(employee_id=int(employee_id), work_date=work_date, status=ClockStatus.NOT_STARTED)

    @property
    def is_persisted(self) -> bool:
        return self.record_id is not None

    def open_seconds(self, now: datetime) -> int:
        if self.status != ClockStatus.CLOCKED_IN or self.open_interval_start is None:
            return 0
        return elapsed_seconds(self.open_interval_start, now)

    def display_seconds(self, now: datetime) -> int:
        """Committed time plus the live open interval; never stored."""
        return self.committed_seconds + self.open_seconds(now)

    def evolve(self, **changes) -> "DailyTime":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "date": self.work_date.isoformat(),
            "status": self.status.value,
            "committed_seconds": self.committed_seconds,
            "open_interval_start": self.open_interval_start.isoformat() if self.open_interval_start else None,
        }
