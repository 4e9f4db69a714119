from __future__ import annotations

from enum import Enum


class ClockStatus(str, Enum):
    """Daily attendance clock state for one employee on one date."""

    NOT_STARTED = "Not Started"
    CLOCKED_IN = "Clocked In"
    PAUSED = "Paused"
    CLOCKED_OUT = "Clocked Out"


class TimesheetStatus(str, Enum):
    """Weekly submission flag."""

    NOT_SUBMITTED = "Not Submitted"
    SUBMITTED = "Submitted"


class EntryStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class BillingType(str, Enum):
    BILLABLE = "billable"
    NON_BILLABLE = "non-billable"


class CellAction(str, Enum):
    """Outcome of a matrix cell upsert."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    UNCHANGED = "unchanged"
