from __future__ import annotations

from dataclasses import dataclass, field

from ..core.enums import ClockStatus
from .states.base import ClockState
from .states.clocked_in_state import ClockedInState
from .states.clocked_out_state import ClockedOutState
from .states.not_started_state import NotStartedState
from .states.paused_state import PausedState


def _default_states() -> dict[ClockStatus, ClockState]:
    states: list[ClockState] = [NotStartedState(), ClockedInState(), PausedState(), ClockedOutState()]
    return {s.status: s for s in states}


@dataclass
class ClockStateFactory:
    """Factory Pattern: pick the state object for the record's current status."""

    states: dict[ClockStatus, ClockState] = field(default_factory=_default_states)

    def for_status(self, status: ClockStatus) -> ClockState:
        return self.states[ClockStatus(status)]
