from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ...core.enums import ClockStatus
from ..model import DailyTime


@dataclass(frozen=True)
class ClockDecision:
    record: DailyTime
    changed: bool = True

    @classmethod
    def unchanged(cls, record: DailyTime) -> "ClockDecision":
        return cls(record=record, changed=False)


class ClockState(ABC):
    """State Pattern: each clock status decides how it reacts to the three actions."""

    status: ClockStatus

    @abstractmethod
    def clock_in(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        raise NotImplementedError

    @abstractmethod
    def pause(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        raise NotImplementedError

    @abstractmethod
    def clock_out(self, current: DailyTime, *, now: datetime) -> ClockDecision:
        raise NotImplementedError

    @staticmethod
    def commit_open_interval(current: DailyTime, *, now: datetime, status: ClockStatus) -> DailyTime:
        return current.evolve(
            status=status,
            committed_seconds=current.committed_seconds + current.open_seconds(now),
            open_interval_start=None,
        )
