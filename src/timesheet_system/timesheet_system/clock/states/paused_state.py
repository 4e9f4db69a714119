from __future__ import annotations

from datetime import datetime

from ...core.enums import ClockStatus
from ..model import DailyTime
from .base import ClockDecision, ClockState


class PausedState(ClockState):
    status = ClockStatus.PAUSED

    def clock_in(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        return ClockDecision(current.evolve(status=ClockStatus.CLOCKED_IN, open_interval_start=now))

    def pause(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        return ClockDecision.unchanged(current)

    def clock_out(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        return ClockDecision(current.evolve(status=ClockStatus.CLOCKED_OUT, open_interval_start=None))
