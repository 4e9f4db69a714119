from __future__ import annotations

from datetime import datetime

from ...core.enums import ClockStatus
from ...core.exceptions import InvalidTransition
from ..model import DailyTime
from .base import ClockDecision, ClockState


class ClockedOutState(ClockState):
    """Terminal for the day."""

    status = ClockStatus.CLOCKED_OUT

    def clock_in(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        raise InvalidTransition("Already clocked out for the day.")

    def pause(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        return ClockDecision.unchanged(current)

    def clock_out(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        return ClockDecision.unchanged(current)
