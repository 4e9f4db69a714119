from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from .clock.factory import ClockStateFactory
from .clock.mysql_clock_repository import MySQLClockRepository
from .clock.repository import ClockRepository
from .clock.service import ClockService
from .common.datetime_utils import utc_now
from .database.connection import DBConfig, DatabaseConnection
from .directory.mysql_directory import MySQLDirectory
from .directory.repository import Directory
from .time_entries.mysql_time_entry_repository import MySQLTimeEntryRepository
from .time_entries.repository import TimeEntryRepository
from .timesheets.lock import TimesheetLock
from .timesheets.mysql_timesheet_repository import MySQLTimesheetRepository
from .timesheets.repository import TimesheetRepository
from .timesheets.service import TimesheetService


@dataclass(frozen=True)
class Container:
    clock_repo: ClockRepository
    entries_repo: TimeEntryRepository
    timesheets_repo: TimesheetRepository
    directory: Directory

    clock_service: ClockService
    timesheet_lock: TimesheetLock
    timesheet_service: TimesheetService

    now: Callable[[], datetime] = field(default=utc_now)


def wire_container(
    *,
    clock_repo: ClockRepository,
    entries_repo: TimeEntryRepository,
    timesheets_repo: TimesheetRepository,
    directory: Directory,
    now: Callable[[], datetime] = utc_now,
) -> Container:
    """Assemble services over any repository implementations (MySQL or in-memory)."""

    clock_service = ClockService(clock_repo, state_factory=ClockStateFactory(), clock=now)
    timesheet_lock = TimesheetLock(timesheets_repo)
    timesheet_service = TimesheetService(entries_repo, timesheet_lock, directory, clock=now)

    return Container(
        clock_repo=clock_repo,
        entries_repo=entries_repo,
        timesheets_repo=timesheets_repo,
        directory=directory,
        clock_service=clock_service,
        timesheet_lock=timesheet_lock,
        timesheet_service=timesheet_service,
        now=now,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        clock_repo=MySQLClockRepository(conn),
        entries_repo=MySQLTimeEntryRepository(conn),
        timesheets_repo=MySQLTimesheetRepository(conn),
        directory=MySQLDirectory(conn),
    )
