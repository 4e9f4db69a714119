from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import ClockStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import DailyTime
from .repository import ClockRepository, ClockTransition

logger = logging.getLogger(__name__)

_COLUMNS = "daily_time_id, employee_id, work_date, status, committed_seconds, open_interval_start, updated_at"

# Two concurrent first clock-ins on a missing row either hit the unique key or deadlock on
# the gap locks taken by SELECT ... FOR UPDATE; the loser retries against the new row.
_APPLY_ATTEMPTS = 3
_RETRYABLE_ERRNOS = frozenset({errorcode.ER_DUP_ENTRY, errorcode.ER_LOCK_DEADLOCK, errorcode.ER_LOCK_WAIT_TIMEOUT})


def _to_db(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _from_db(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)


def _row_to_record(r: dict[str, Any]) -> DailyTime:
    return DailyTime(
        record_id=int(r["daily_time_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        status=ClockStatus(r["status"]),
        committed_seconds=int(r["committed_seconds"] or 0),
        open_interval_start=_from_db(r.get("open_interval_start")),
        updated_at=_from_db(r.get("updated_at")),
    )


class MySQLClockRepository(ClockRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[DailyTime]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM daily_time WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def list_for_employee(self, employee_id: int, *, start: date, end: date) -> Sequence[DailyTime]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM daily_time
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (int(employee_id), start, end),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def apply(self, employee_id: int, work_date: date, transition: ClockTransition) -> DailyTime:
        attempt = 1
        while True:
            try:
                return self._apply_once(int(employee_id), work_date, transition)
            except mysql.connector.DatabaseError as e:
                if e.errno not in _RETRYABLE_ERRNOS or attempt >= _APPLY_ATTEMPTS:
                    raise
                attempt += 1
                logger.debug(
                    "Retrying clock transition after errno=%s employee=%s date=%s",
                    e.errno,
                    employee_id,
                    work_date,
                )

    def _apply_once(self, employee_id: int, work_date: date, transition: ClockTransition) -> DailyTime:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM daily_time WHERE employee_id=%s AND work_date=%s FOR UPDATE",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            current = _row_to_record(r) if r else DailyTime.not_started(employee_id, work_date)

            decision = transition(current)
            if not decision.changed:
                return current

            record = decision.record
            if current.is_persisted:
                cur.execute(
                    """
                    UPDATE daily_time
                    SET status=%s, committed_seconds=%s, open_interval_start=%s, updated_at=UTC_TIMESTAMP()
                    WHERE daily_time_id=%s
                    """,
                    (record.status.value, int(record.committed_seconds), _to_db(record.open_interval_start), current.record_id),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO daily_time(employee_id, work_date, status, committed_seconds, open_interval_start, updated_at)
                    VALUES(%s,%s,%s,%s,%s,UTC_TIMESTAMP())
                    """,
                    (employee_id, work_date, record.status.value, int(record.committed_seconds), _to_db(record.open_interval_start)),
                )

            cur.execute(f"SELECT {_COLUMNS} FROM daily_time WHERE employee_id=%s AND work_date=%s", (employee_id, work_date))
            return _row_to_record(fetchone(cur))
