import threading
from datetime import timedelta

import pytest

from src.timesheet_system.timesheet_system.core.enums import TimesheetStatus
from src.timesheet_system.timesheet_system.core.exceptions import LockedWeek
from src.timesheet_system.timesheet_system.timesheets.lock import TimesheetLock


@pytest.fixture
def lock(timesheets_repo):
    return TimesheetLock(timesheets_repo)


def test_unsubmitted_week_defaults_to_open(lock, week_start):
    sheet = lock.get(3, week_start + timedelta(days=2))

    assert sheet.status == TimesheetStatus.NOT_SUBMITTED
    assert sheet.week_start == week_start
    assert sheet.timesheet_id is None
    assert not lock.is_locked(3, week_start)


def test_submit_normalizes_to_monday_and_locks_whole_week(lock, week_start):
    sheet = lock.submit(3, week_start + timedelta(days=5))

    assert sheet.week_start == week_start
    assert sheet.is_submitted
    for offset in range(7):
        assert lock.is_locked(3, week_start + timedelta(days=offset))
    assert not lock.is_locked(3, week_start - timedelta(days=1))
    assert not lock.is_locked(5, week_start)


def test_submit_twice_keeps_one_record(lock, timesheets_repo, week_start):
    first = lock.submit(3, week_start)
    second = lock.submit(3, week_start)

    assert first.timesheet_id == second.timesheet_id
    assert len(timesheets_repo.list_all()) == 1


def test_ensure_unlocked_checks_every_employee(lock, week_start):
    lock.submit(5, week_start)

    lock.ensure_unlocked(3, week_start)
    lock.ensure_unlocked([3, 7], week_start + timedelta(days=3))
    with pytest.raises(LockedWeek) as exc:
        lock.ensure_unlocked((3, 5), week_start + timedelta(days=3))

    assert exc.value.employee_id == 5
    assert "2024-03-11" in str(exc.value)


def test_list_timesheets(lock, week_start):
    lock.submit(3, week_start)
    lock.submit(3, week_start + timedelta(days=7))
    lock.submit(5, week_start)

    assert [s.week_start for s in lock.list_timesheets(3)] == [week_start + timedelta(days=7), week_start]
    assert len(lock.list_timesheets()) == 3


def test_submit_waits_for_guarded_change(lock, week_start):
    submitted = threading.Event()

    def submit():
        lock.submit(3, week_start)
        submitted.set()

    with lock.guarded([3], week_start + timedelta(days=2)):
        worker = threading.Thread(target=submit)
        worker.start()
        assert not submitted.wait(timeout=0.2)
        assert not lock.is_locked(3, week_start)
    worker.join()

    assert lock.is_locked(3, week_start)


def test_guarded_rejects_submitted_week_and_releases(lock, week_start):
    lock.submit(5, week_start)

    for _ in range(2):
        with pytest.raises(LockedWeek):
            with lock.guarded({5, 3}, week_start):
                pytest.fail("guarded body must not run for a submitted week")
