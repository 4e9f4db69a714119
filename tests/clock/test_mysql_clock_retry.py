from datetime import date

import pytest
from mysql.connector import errorcode, errors

from src.timesheet_system.timesheet_system.clock.model import DailyTime
from src.timesheet_system.timesheet_system.clock.mysql_clock_repository import MySQLClockRepository
from src.timesheet_system.timesheet_system.core.enums import ClockStatus

DAY = date(2024, 3, 13)


def _scripted(repo: MySQLClockRepository, outcomes: list):
    calls = []

    def apply_once(employee_id, work_date, transition):
        calls.append((employee_id, work_date))
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    repo._apply_once = apply_once
    return calls


def _record() -> DailyTime:
    return DailyTime(7, DAY, ClockStatus.CLOCKED_IN, record_id=1)


def test_first_clock_in_deadlock_is_retried():
    repo = MySQLClockRepository(conn_factory=None)
    deadlock = errors.DatabaseError(msg="Deadlock found when trying to get lock", errno=errorcode.ER_LOCK_DEADLOCK)
    calls = _scripted(repo, [deadlock, _record()])

    record = repo.apply(7, DAY, lambda current: None)

    assert record.status == ClockStatus.CLOCKED_IN
    assert len(calls) == 2


def test_duplicate_key_race_is_retried():
    repo = MySQLClockRepository(conn_factory=None)
    duplicate = errors.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
    calls = _scripted(repo, [duplicate, _record()])

    assert repo.apply(7, DAY, lambda current: None).record_id == 1
    assert len(calls) == 2


def test_retries_are_bounded():
    repo = MySQLClockRepository(conn_factory=None)
    deadlocks = [errors.DatabaseError(msg="Deadlock", errno=errorcode.ER_LOCK_DEADLOCK) for _ in range(5)]
    calls = _scripted(repo, deadlocks)

    with pytest.raises(errors.DatabaseError):
        repo.apply(7, DAY, lambda current: None)
    assert len(calls) == 3


def test_other_database_errors_propagate_immediately():
    repo = MySQLClockRepository(conn_factory=None)
    missing_employee = errors.IntegrityError(msg="Cannot add or update a child row", errno=errorcode.ER_NO_REFERENCED_ROW_2)
    calls = _scripted(repo, [missing_employee, _record()])

    with pytest.raises(errors.IntegrityError):
        repo.apply(7, DAY, lambda current: None)
    assert len(calls) == 1
