from __future__ import annotations

from datetime import date


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class InvalidTransition(DomainError):
    """Raised when a clock action is attempted on a clocked-out day."""


class LockedWeek(DomainError):
    """Raised when a mutation targets a submitted week."""

    def __init__(self, employee_id: int, week_start: date):
        super().__init__(f"Timesheet for week {week_start.isoformat()} is already submitted")
        self.employee_id = employee_id
        self.week_start = week_start
