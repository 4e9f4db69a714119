from __future__ import annotations

import logging
from contextlib import ExitStack, contextmanager
from datetime import date
from typing import Iterable, Iterator, Optional, Sequence

from ..common.datetime_utils import week_start_for
from ..core.enums import TimesheetStatus
from ..core.exceptions import LockedWeek
from .model import WeeklyTimesheet
from .repository import TimesheetRepository

logger = logging.getLogger(__name__)


def _employee_ids(employee_ids: int | Iterable[int]) -> list[int]:
    if isinstance(employee_ids, int):
        return [employee_ids]
    return sorted({int(e) for e in employee_ids})


class TimesheetLock:
    """Per (employee, week) submission flag gating timesheet mutations.

    Submission is one-way: there is no unsubmit path. ``submit`` and ``guarded`` both hold the
    repository's week lock, so a mutation either finishes before a submission or sees it.
    """

    def __init__(self, timesheets: TimesheetRepository):
        self._timesheets = timesheets

    def submit(self, employee_id: int, week_start: date) -> WeeklyTimesheet:
        monday = week_start_for(week_start)
        with self._timesheets.locked_week(int(employee_id), monday):
            sheet = self._timesheets.upsert(
                employee_id=int(employee_id),
                week_start=monday,
                status=TimesheetStatus.SUBMITTED,
            )
        logger.info("Week submitted employee=%s week=%s", employee_id, monday)
        return sheet

    def get(self, employee_id: int, week_start: date) -> WeeklyTimesheet:
        monday = week_start_for(week_start)
        sheet = self._timesheets.get(int(employee_id), monday)
        return sheet or WeeklyTimesheet(employee_id=int(employee_id), week_start=monday)

    def is_locked(self, employee_id: int, week_start: date) -> bool:
        sheet = self._timesheets.get(int(employee_id), week_start_for(week_start))
        return sheet is not None and sheet.is_submitted

    def ensure_unlocked(self, employee_ids: int | Iterable[int], day: date) -> None:
        """Raise ``LockedWeek`` if ``day`` falls in a submitted week of any given employee."""

        monday = week_start_for(day)
        for employee_id in _employee_ids(employee_ids):
            if self.is_locked(employee_id, monday):
                logger.warning("Rejected change to submitted week employee=%s week=%s", employee_id, monday)
                raise LockedWeek(int(employee_id), monday)

    @contextmanager
    def guarded(self, employee_ids: int | Iterable[int], day: date) -> Iterator[None]:
        """Hold the week locks of ``employee_ids`` (ascending) and fail with ``LockedWeek`` if any is submitted."""

        monday = week_start_for(day)
        ids = _employee_ids(employee_ids)
        with ExitStack() as stack:
            for employee_id in ids:
                stack.enter_context(self._timesheets.locked_week(employee_id, monday))
            self.ensure_unlocked(ids, monday)
            yield

    def list_timesheets(self, employee_id: Optional[int] = None) -> Sequence[WeeklyTimesheet]:
        if employee_id is None:
            return self._timesheets.list_all()
        return self._timesheets.list_for_employee(int(employee_id))
