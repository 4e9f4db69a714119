from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.timesheet_system.timesheet_system.core.enums import BillingType, EntryStatus
from src.timesheet_system.timesheet_system.core.exceptions import ValidationError
from src.timesheet_system.timesheet_system.time_entries.model import GroupKey, TimeEntry
from src.timesheet_system.timesheet_system.timesheets import aggregation

MONDAY = date(2024, 3, 11)


def _entry(entry_id, day_offset, hours, *, project_id=1, task="Design", assignees=(3, 5), **extra):
    return TimeEntry(
        entry_id=entry_id,
        project_id=project_id,
        project_name="Website Redesign" if project_id == 1 else "Internal Tools",
        task_name=task,
        assignee_ids=assignees,
        work_date=MONDAY + timedelta(days=day_offset),
        worked_hours=hours,
        **extra,
    )


def test_matrix_has_seven_days_and_consistent_totals():
    entries = [
        _entry(1, 0, 2.0),
        _entry(2, 1, 3.5),
        _entry(3, 1, 1.0, task="Review"),
        _entry(4, 6, 0.25, project_id=2, assignees=(3,)),
    ]

    matrix = aggregation.build_weekly_matrix(entries, MONDAY)

    assert matrix.days == [MONDAY + timedelta(days=i) for i in range(7)]
    assert len(matrix.rows) == 3
    for row in matrix.rows:
        assert row.total == pytest.approx(sum(row.hours_by_date.values()))
    assert matrix.day_totals[MONDAY + timedelta(days=1)] == pytest.approx(4.5)
    assert matrix.grand_total == pytest.approx(6.75)
    assert matrix.grand_total == pytest.approx(sum(r.total for r in matrix.rows))


def test_matrix_sums_duplicates_in_one_cell():
    entries = [_entry(1, 2, 1.5, description="a"), _entry(2, 2, 2.0, description="b")]

    matrix = aggregation.build_weekly_matrix(entries, MONDAY)
    key = GroupKey.of(1, "Design", [3, 5])

    assert matrix.cell(key, MONDAY + timedelta(days=2)) == pytest.approx(3.5)
    assert matrix.row_for(key).descriptions[MONDAY + timedelta(days=2)] == "a\nb"


def test_assignee_order_never_splits_a_group():
    entries = [_entry(1, 0, 1.0, assignees=(5, 3)), _entry(2, 1, 2.0, assignees=[3, 5, 3])]

    matrix = aggregation.build_weekly_matrix(entries, MONDAY)

    assert len(matrix.rows) == 1
    assert matrix.rows[0].key.assignee_ids == (3, 5)
    assert matrix.rows[0].total == pytest.approx(3.0)


def test_matrix_ignores_entries_outside_the_week_and_normalizes_start():
    entries = [_entry(1, 0, 1.0), _entry(2, 7, 5.0), _entry(3, -1, 5.0)]

    matrix = aggregation.build_weekly_matrix(entries, MONDAY + timedelta(days=3))

    assert matrix.week_start == MONDAY
    assert matrix.grand_total == pytest.approx(1.0)


def test_matrix_rows_keep_first_seen_order():
    entries = [_entry(1, 0, 1.0, task="Zeta"), _entry(2, 0, 1.0, task="Alpha")]

    matrix = aggregation.build_weekly_matrix(entries, MONDAY)

    assert [r.key.task_name for r in matrix.rows] == ["Zeta", "Alpha"]


def test_summary_groups_over_range_and_keeps_holders():
    entries = [
        _entry(1, 0, 0.0, is_holder=True),
        _entry(2, 1, 2.0),
        _entry(3, 8, 4.0),
        _entry(4, 2, 0.0, task="Planning", is_holder=True),
    ]

    rows = aggregation.build_summary(entries, MONDAY, MONDAY + timedelta(days=13))

    by_task = {r.key.task_name: r for r in rows}
    assert by_task["Design"].total_hours == pytest.approx(6.0)
    assert by_task["Design"].entry_count == 3
    assert by_task["Planning"].total_hours == 0


def test_logs_exclude_zero_hours_and_sort():
    entries = [
        _entry(1, 2, 1.0, task="b"),
        _entry(2, 0, 0.0, is_holder=True),
        _entry(3, 1, 4.0, task="a"),
        _entry(4, 3, 2.0, task="c"),
    ]

    by_date = aggregation.build_logs(entries, MONDAY, MONDAY + timedelta(days=6))
    by_hours_desc = aggregation.build_logs(entries, MONDAY, MONDAY + timedelta(days=6), sort_by="hours", descending=True)
    by_task = aggregation.build_logs(entries, MONDAY, MONDAY + timedelta(days=6), sort_by="task")

    assert [e.entry_id for e in by_date] == [3, 1, 4]
    assert [e.entry_id for e in by_hours_desc] == [3, 4, 1]
    assert [e.task_name for e in by_task] == ["a", "b", "c"]


def test_logs_reject_unknown_sort_key():
    with pytest.raises(ValidationError):
        aggregation.build_logs([], MONDAY, MONDAY, sort_by="color")


def test_billing_totals_split_by_type():
    entries = [
        _entry(1, 0, 2.5),
        _entry(2, 1, 1.5, billing_type=BillingType.NON_BILLABLE),
        _entry(3, 2, 4.0, status=EntryStatus.IN_PROGRESS),
    ]

    totals = aggregation.billing_totals(entries)

    assert totals.total == pytest.approx(8.0)
    assert totals.billable == pytest.approx(6.5)
    assert totals.non_billable == pytest.approx(1.5)
    assert totals.billable + totals.non_billable == pytest.approx(totals.total)


def test_fractional_hours_sum_without_drift():
    entries = [_entry(i, 0, 0.1) for i in range(1, 11)]

    assert aggregation.total_hours(entries) == 1.0
