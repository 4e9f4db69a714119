from __future__ import annotations

import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional

import pytest

from src.timesheet_system.timesheet_system.clock.model import DailyTime
from src.timesheet_system.timesheet_system.container import wire_container
from src.timesheet_system.timesheet_system.core.enums import TimesheetStatus
from src.timesheet_system.timesheet_system.directory.model import Employee, Project
from src.timesheet_system.timesheet_system.time_entries.model import GroupKey, TimeEntry
from src.timesheet_system.timesheet_system.timesheets.model import WeeklyTimesheet


class InMemoryClockRepository:
    def __init__(self):
        self._by_employee_date: dict[tuple[int, date], DailyTime] = {}
        self._lock = threading.Lock()
        self._id = 0

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[DailyTime]:
        return self._by_employee_date.get((employee_id, work_date))

    def list_for_employee(self, employee_id: int, *, start: date, end: date):
        items = [r for (e, d), r in self._by_employee_date.items() if e == employee_id and start <= d <= end]
        items.sort(key=lambda r: r.work_date)
        return items

    def apply(self, employee_id: int, work_date: date, transition):
        with self._lock:
            current = self._by_employee_date.get((employee_id, work_date)) or DailyTime.not_started(employee_id, work_date)
            decision = transition(current)
            if not decision.changed:
                return current
            record = decision.record
            if record.record_id is None:
                self._id += 1
                record = record.evolve(record_id=self._id)
            self._by_employee_date[(employee_id, work_date)] = record
            return record


class InMemoryTimeEntryRepository:
    def __init__(self):
        self._entries: dict[int, TimeEntry] = {}
        self._id = 0
        self._guard = threading.Lock()
        self._cells: defaultdict[tuple[GroupKey, date], threading.Lock] = defaultdict(threading.Lock)

    def get(self, entry_id: int) -> Optional[TimeEntry]:
        return self._entries.get(entry_id)

    def create(self, entry: TimeEntry) -> TimeEntry:
        with self._guard:
            self._id += 1
            created = entry.evolve(entry_id=self._id)
            self._entries[self._id] = created
            return created

    def update(self, entry: TimeEntry) -> TimeEntry:
        self._entries[int(entry.entry_id)] = entry
        return entry

    def upsert(self, entry: TimeEntry) -> TimeEntry:
        return self.create(entry) if entry.entry_id is None else self.update(entry)

    def delete(self, entry_id: int) -> bool:
        return self._entries.pop(entry_id, None) is not None

    def list_by_employee(self, employee_id: int):
        return [e for e in self._entries.values() if employee_id in e.assignee_ids]

    def list_by_date_range(self, start: date, end: date, *, project_id=None, employee_id=None):
        return [
            e
            for e in self._entries.values()
            if start <= e.work_date <= end
            and (project_id is None or e.project_id == project_id)
            and (employee_id is None or employee_id in e.assignee_ids)
        ]

    @contextmanager
    def locked_cell(self, key: GroupKey, work_date: date):
        with self._guard:
            lock = self._cells[(key, work_date)]
        with lock:
            yield

    def all(self) -> list[TimeEntry]:
        return list(self._entries.values())


class InMemoryTimesheetRepository:
    def __init__(self):
        self._sheets: dict[tuple[int, date], WeeklyTimesheet] = {}
        self._id = 0
        self._guard = threading.Lock()
        self._weeks: defaultdict[tuple[int, date], threading.Lock] = defaultdict(threading.Lock)

    def get(self, employee_id: int, week_start: date) -> Optional[WeeklyTimesheet]:
        return self._sheets.get((employee_id, week_start))

    def upsert(self, *, employee_id: int, week_start: date, status: TimesheetStatus) -> WeeklyTimesheet:
        existing = self._sheets.get((employee_id, week_start))
        if existing is None:
            self._id += 1
            sheet = WeeklyTimesheet(employee_id=employee_id, week_start=week_start, status=status, timesheet_id=self._id)
        else:
            sheet = WeeklyTimesheet(employee_id=employee_id, week_start=week_start, status=status, timesheet_id=existing.timesheet_id)
        self._sheets[(employee_id, week_start)] = sheet
        return sheet

    def list_for_employee(self, employee_id: int):
        return sorted((s for s in self._sheets.values() if s.employee_id == employee_id), key=lambda s: s.week_start, reverse=True)

    def list_all(self):
        return sorted(self._sheets.values(), key=lambda s: (s.week_start, s.employee_id), reverse=True)

    @contextmanager
    def locked_week(self, employee_id: int, week_start: date):
        with self._guard:
            lock = self._weeks[(employee_id, week_start)]
        with lock:
            yield


@dataclass
class InMemoryDirectory:
    employees: dict[int, Employee] = field(default_factory=dict)
    projects: dict[int, Project] = field(default_factory=dict)

    def resolve_employee(self, employee_id: int) -> Optional[Employee]:
        return self.employees.get(employee_id)

    def resolve_project(self, project_id: int) -> Optional[Project]:
        return self.projects.get(project_id)


@pytest.fixture
def fixed_now() -> datetime:
    # Wednesday
    return datetime(2024, 3, 13, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def week_start() -> date:
    return date(2024, 3, 11)


@pytest.fixture
def directory() -> InMemoryDirectory:
    return InMemoryDirectory(
        employees={
            1: Employee(1, "Admin", "Demo", role="admin"),
            3: Employee(3, "Alex", "Nguyen"),
            5: Employee(5, "Sam", "Tran"),
        },
        projects={
            1: Project(1, "Website Redesign", code="PRJ-001", client_name="Acme Corp"),
            2: Project(2, "Internal Tools", code="PRJ-002"),
        },
    )


@pytest.fixture
def clock_repo() -> InMemoryClockRepository:
    return InMemoryClockRepository()


@pytest.fixture
def entries_repo() -> InMemoryTimeEntryRepository:
    return InMemoryTimeEntryRepository()


@pytest.fixture
def timesheets_repo() -> InMemoryTimesheetRepository:
    return InMemoryTimesheetRepository()


@pytest.fixture
def container(clock_repo, entries_repo, timesheets_repo, directory, fixed_now):
    return wire_container(
        clock_repo=clock_repo,
        entries_repo=entries_repo,
        timesheets_repo=timesheets_repo,
        directory=directory,
        now=lambda: fixed_now,
    )


@pytest.fixture
def clock_service(container):
    return container.clock_service


@pytest.fixture
def timesheet_service(container):
    return container.timesheet_service
