from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import TimesheetStatus
from .model import WeeklyTimesheet


class TimesheetRepository(Protocol):
    def get(self, employee_id: int, week_start: date) -> Optional[WeeklyTimesheet]:
        raise NotImplementedError

    def upsert(self, *, employee_id: int, week_start: date, status: TimesheetStatus) -> WeeklyTimesheet:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int) -> Sequence[WeeklyTimesheet]:
        raise NotImplementedError

    def list_all(self) -> Sequence[WeeklyTimesheet]:
        raise NotImplementedError

    def locked_week(self, employee_id: int, week_start: date) -> AbstractContextManager:
        """Hold an exclusive lock on one (employee, week) while its flag is checked or changed."""

        raise NotImplementedError
