from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import TimesheetStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, named_lock
from .model import WeeklyTimesheet
from .repository import TimesheetRepository


def _to_timesheet(r: dict[str, Any]) -> WeeklyTimesheet:
    return WeeklyTimesheet(
        timesheet_id=int(r["timesheet_id"]),
        employee_id=int(r["employee_id"]),
        week_start=r["week_start"],
        status=TimesheetStatus(r.get("status") or TimesheetStatus.NOT_SUBMITTED.value),
    )


class MySQLTimesheetRepository(TimesheetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employee_id: int, week_start: date) -> Optional[WeeklyTimesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT timesheet_id, employee_id, week_start, status FROM timesheets WHERE employee_id=%s AND week_start=%s",
                (int(employee_id), week_start),
            )
            r = fetchone(cur)
            return _to_timesheet(r) if r else None

    def upsert(self, *, employee_id: int, week_start: date, status: TimesheetStatus) -> WeeklyTimesheet:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO timesheets(employee_id, week_start, status)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status), updated_at=CURRENT_TIMESTAMP
                """,
                (int(employee_id), week_start, status.value),
            )
            cur.execute(
                "SELECT timesheet_id, employee_id, week_start, status FROM timesheets WHERE employee_id=%s AND week_start=%s",
                (int(employee_id), week_start),
            )
            return _to_timesheet(fetchone(cur))

    def list_for_employee(self, employee_id: int) -> Sequence[WeeklyTimesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT timesheet_id, employee_id, week_start, status
                FROM timesheets
                WHERE employee_id=%s
                ORDER BY week_start DESC
                """,
                (int(employee_id),),
            )
            return [_to_timesheet(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[WeeklyTimesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT timesheet_id, employee_id, week_start, status FROM timesheets ORDER BY week_start DESC, employee_id ASC"
            )
            return [_to_timesheet(r) for r in fetchall(cur)]

    def locked_week(self, employee_id: int, week_start: date) -> AbstractContextManager:
        return named_lock(self._conn_factory, f"ts_week:{int(employee_id)}:{week_start.isoformat()}")
