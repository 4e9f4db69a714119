from __future__ import annotations

from datetime import datetime

from ...core.enums import ClockStatus
from ..model import DailyTime
from .base import ClockDecision, ClockState


class NotStartedState(ClockState):
    """No clock action yet today (also used for a day with no stored record)."""

    status = ClockStatus.NOT_STARTED

    def clock_in(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        return ClockDecision(current.evolve(status=ClockStatus.CLOCKED_IN, open_interval_start=now))

    def pause(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        return ClockDecision.unchanged(current)

    def clock_out(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        # Out-of-order clock-out still closes the day, with nothing to commit.
        return ClockDecision(current.evolve(status=ClockStatus.CLOCKED_OUT, open_interval_start=None))
