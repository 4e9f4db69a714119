from __future__ import annotations

import threading
from datetime import date, datetime, timedelta, timezone

import pytest

from src.timesheet_system.timesheet_system.core.enums import ClockStatus
from src.timesheet_system.timesheet_system.core.exceptions import InvalidTransition

DAY = date(2024, 3, 13)


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 3, 13, hour, minute, tzinfo=timezone.utc)


def test_full_day_commits_closed_intervals(clock_service):
    clock_service.clock_in(7, now=_at(9))
    paused = clock_service.pause(7, now=_at(11))
    assert paused.committed_seconds == 7200

    clock_service.clock_in(7, now=_at(11, 30))
    out = clock_service.clock_out(7, now=_at(16, 30))

    assert out.status == ClockStatus.CLOCKED_OUT
    assert out.committed_seconds == 25200

    stored = clock_service.get_daily_time(7, work_date=DAY)
    assert stored.status == ClockStatus.CLOCKED_OUT
    assert stored.committed_seconds == 25200
    assert stored.open_interval_start is None


def test_clock_in_after_clock_out_is_rejected_and_state_kept(clock_service):
    clock_service.clock_in(7, now=_at(9))
    clock_service.clock_out(7, now=_at(10))

    with pytest.raises(InvalidTransition):
        clock_service.clock_in(7, now=_at(11))

    stored = clock_service.get_daily_time(7, work_date=DAY)
    assert stored.status == ClockStatus.CLOCKED_OUT
    assert stored.committed_seconds == 3600


def test_repeated_clock_in_keeps_original_start(clock_service):
    first = clock_service.clock_in(7, now=_at(9))
    again = clock_service.clock_in(7, now=_at(9, 45))

    assert again.open_interval_start == first.open_interval_start == _at(9)
    assert again.status == ClockStatus.CLOCKED_IN


def test_pause_without_record_is_noop(clock_service, clock_repo):
    record = clock_service.pause(7, now=_at(9))

    assert record.status == ClockStatus.NOT_STARTED
    assert clock_repo.get_for_employee_and_date(7, DAY) is None


def test_repeated_pause_does_not_commit_twice(clock_service):
    clock_service.clock_in(7, now=_at(9))
    clock_service.pause(7, now=_at(10))
    again = clock_service.pause(7, now=_at(12))

    assert again.status == ClockStatus.PAUSED
    assert again.committed_seconds == 3600


def test_clock_out_without_clock_in_closes_day(clock_service):
    out = clock_service.clock_out(7, now=_at(17))

    assert out.status == ClockStatus.CLOCKED_OUT
    assert out.committed_seconds == 0
    assert clock_service.get_daily_time(7, work_date=DAY) is not None


def test_display_seconds_is_live_and_never_decreases(clock_service):
    assert clock_service.get_display_seconds(7, work_date=DAY, now=_at(8)) == 0

    clock_service.clock_in(7, now=_at(9))
    seen = [clock_service.get_display_seconds(7, work_date=DAY, now=_at(9) + timedelta(minutes=m)) for m in range(0, 120, 15)]
    assert seen == sorted(seen)
    assert seen[-1] == 105 * 60

    clock_service.pause(7, now=_at(11))
    assert clock_service.get_display_seconds(7, work_date=DAY, now=_at(15)) == 7200


def test_work_date_defaults_to_clock_day(clock_service, fixed_now):
    record = clock_service.clock_in(7)

    assert record.work_date == fixed_now.date()
    assert record.open_interval_start == fixed_now


def test_history_lists_days_in_range(clock_service):
    for offset in range(3):
        day = DAY + timedelta(days=offset)
        start = datetime.combine(day, datetime.min.time(), tzinfo=timezone.utc) + timedelta(hours=9)
        clock_service.clock_in(7, work_date=day, now=start)
        clock_service.clock_out(7, work_date=day, now=start + timedelta(hours=8))

    history = clock_service.get_history(7, start=DAY, end=DAY + timedelta(days=1))

    assert [r.work_date for r in history] == [DAY, DAY + timedelta(days=1)]
    assert all(r.committed_seconds == 8 * 3600 for r in history)


def test_concurrent_pauses_commit_interval_once(clock_service):
    clock_service.clock_in(7, now=_at(9))

    threads = [threading.Thread(target=clock_service.pause, args=(7,), kwargs={"now": _at(10)}) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    stored = clock_service.get_daily_time(7, work_date=DAY)
    assert stored.status == ClockStatus.PAUSED
    assert stored.committed_seconds == 3600


def test_employees_do_not_share_records(clock_service):
    clock_service.clock_in(7, now=_at(9))
    clock_service.clock_out(8, now=_at(9))

    assert clock_service.get_daily_time(7, work_date=DAY).status == ClockStatus.CLOCKED_IN
    assert clock_service.get_daily_time(8, work_date=DAY).status == ClockStatus.CLOCKED_OUT
