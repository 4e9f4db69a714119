from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import utc_now
from ..core.exceptions import InvalidTransition
from .factory import ClockStateFactory
from .model import DailyTime
from .repository import ClockRepository
from .states.base import ClockDecision, ClockState

logger = logging.getLogger(__name__)


class ClockService:
    """Daily attendance clock: clock in, pause, clock out, and live elapsed time.

    Every action is delegated to the state object of the stored status and applied through
    ``ClockRepository.apply`` so that concurrent calls for one (employee, date) serialize.
    """

    def __init__(
        self,
        records: ClockRepository,
        *,
        state_factory: ClockStateFactory | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._records = records
        self._factory = state_factory or ClockStateFactory()
        self._clock = clock

    def _resolve(self, work_date: Optional[date], now: Optional[datetime]) -> tuple[date, datetime]:
        now = now or self._clock()
        return (work_date or now.date()), now

    def _run(
        self,
        action: str,
        employee_id: int,
        work_date: date,
        now: datetime,
        pick: Callable[[ClockState], Callable[..., ClockDecision]],
    ) -> DailyTime:
        decisions: list[ClockDecision] = []

        def transition(current: DailyTime) -> ClockDecision:
            state = self._factory.for_status(current.status)
            decision = pick(state)(current, now=now)
            decisions.append(decision)
            return decision

        try:
            record = self._records.apply(employee_id, work_date, transition)
        except InvalidTransition:
            logger.warning("%s rejected employee=%s date=%s: day already clocked out", action, employee_id, work_date)
            raise

        if not decisions or not decisions[-1].changed:
            logger.debug("%s ignored employee=%s date=%s status=%s", action, employee_id, work_date, record.status.value)
        else:
            logger.info(
                "%s employee=%s date=%s status=%s committed=%ss",
                action,
                employee_id,
                work_date,
                record.status.value,
                record.committed_seconds,
            )
        return record

    def clock_in(self, employee_id: int, *, work_date: date | None = None, now: datetime | None = None) -> DailyTime:
        work_date, now = self._resolve(work_date, now)
        return self._run("clock_in", int(employee_id), work_date, now, lambda s: s.clock_in)

    def pause(self, employee_id: int, *, work_date: date | None = None, now: datetime | None = None) -> DailyTime:
        work_date, now = self._resolve(work_date, now)
        return self._run("pause", int(employee_id), work_date, now, lambda s: s.pause)

    def clock_out(self, employee_id: int, *, work_date: date | None = None, now: datetime | None = None) -> DailyTime:
        work_date, now = self._resolve(work_date, now)
        return self._run("clock_out", int(employee_id), work_date, now, lambda s: s.clock_out)

    def get_daily_time(self, employee_id: int, *, work_date: date) -> Optional[DailyTime]:
        return self._records.get_for_employee_and_date(int(employee_id), work_date)

    def get_display_seconds(
        self,
        employee_id: int,
        *,
        work_date: date | None = None,
        now: datetime | None = None,
    ) -> int:
        work_date, now = self._resolve(work_date, now)
        record = self._records.get_for_employee_and_date(int(employee_id), work_date)
        if record is None:
            return 0
        return record.display_seconds(now)

    def get_history(self, employee_id: int, *, start: date, end: date) -> Sequence[DailyTime]:
        return self._records.list_for_employee(int(employee_id), start=start, end=end)
