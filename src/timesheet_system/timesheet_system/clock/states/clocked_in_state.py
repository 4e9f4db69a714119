from __future__ import annotations

from datetime import datetime

from ...core.enums import ClockStatus
from ..model import DailyTime
from .base import ClockDecision, ClockState


class ClockedInState(ClockState):
    status = ClockStatus.CLOCKED_IN

    def clock_in(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        return ClockDecision.unchanged(current)

    def pause(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        return ClockDecision(self.commit_open_interval(current, now=now, status=ClockStatus.PAUSED))

    def clock_out(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        return ClockDecision(self.commit_open_interval(current, now=now, status=ClockStatus.CLOCKED_OUT))
