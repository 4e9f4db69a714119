from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import date
from typing import Optional, Protocol, Sequence

from .model import GroupKey, TimeEntry


class TimeEntryRepository(Protocol):
    def get(self, entry_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def create(self, entry: TimeEntry) -> TimeEntry:
        raise NotImplementedError

    def update(self, entry: TimeEntry) -> TimeEntry:
        raise NotImplementedError

    def upsert(self, entry: TimeEntry) -> TimeEntry:
        """Create when ``entry.entry_id`` is None, otherwise update."""

        raise NotImplementedError

    def delete(self, entry_id: int) -> bool:
        raise NotImplementedError

    def list_by_employee(self, employee_id: int) -> Sequence[TimeEntry]:
        raise NotImplementedError

    def list_by_date_range(
        self,
        start: date,
        end: date,
        *,
        project_id: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[TimeEntry]:
        raise NotImplementedError

    def locked_cell(self, key: GroupKey, work_date: date) -> AbstractContextManager:
        """Hold an exclusive lock on one (group, date) cell while it is read and written."""

        raise NotImplementedError
