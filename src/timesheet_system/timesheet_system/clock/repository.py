from __future__ import annotations

from datetime import date
from typing import Callable, Optional, Protocol, Sequence

from .model import DailyTime
from .states.base import ClockDecision

ClockTransition = Callable[[DailyTime], ClockDecision]


class ClockRepository(Protocol):
    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[DailyTime]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, start: date, end: date) -> Sequence[DailyTime]:
        raise NotImplementedError

    def apply(self, employee_id: int, work_date: date, transition: ClockTransition) -> DailyTime:
        """Run ``transition`` as one atomic read-modify-write on the (employee, date) record.

        The transition receives the stored record, or a transient NOT_STARTED record when none
        exists. Changed decisions are persisted (insert or update) before the lock is released.
        """

        raise NotImplementedError
