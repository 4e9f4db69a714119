from __future__ import annotations

import hashlib
from contextlib import AbstractContextManager
from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import BillingType, EntryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, named_lock, placeholders
from .model import GroupKey, TimeEntry
from .repository import TimeEntryRepository

_SELECT = """
    SELECT
        te.time_entry_id, te.project_id, te.project_name, te.task_name, te.work_date,
        te.worked_hours, te.status, te.billing_type, te.description, te.is_holder,
        te.due_date, te.reported_to
    FROM time_entries te
"""


def _cell_lock_name(key: GroupKey, work_date: date) -> str:
    # GET_LOCK names are capped at 64 characters.
    raw = f"{key.project_id}|{key.task_name}|{','.join(map(str, key.assignee_ids))}|{work_date.isoformat()}"
    return "ts_cell:" + hashlib.sha1(raw.encode("utf-8")).hexdigest()


class MySQLTimeEntryRepository(TimeEntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _load_assignees(cur, entry_ids: Sequence[int]) -> dict[int, list[int]]:
        if not entry_ids:
            return {}
        cur.execute(
            f"SELECT time_entry_id, employee_id FROM time_entry_assignees WHERE time_entry_id IN ({placeholders(entry_ids)})",
            tuple(entry_ids),
        )
        out: dict[int, list[int]] = {}
        for r in fetchall(cur):
            out.setdefault(int(r["time_entry_id"]), []).append(int(r["employee_id"]))
        return out

    @staticmethod
    def _to_entry(r: dict[str, Any], assignees: list[int]) -> TimeEntry:
        return TimeEntry(
            entry_id=int(r["time_entry_id"]),
            project_id=int(r["project_id"]),
            project_name=r.get("project_name") or "",
            task_name=r["task_name"],
            assignee_ids=tuple(assignees),
            work_date=r["work_date"],
            worked_hours=float(r["worked_hours"] or 0),
            status=EntryStatus(r["status"]),
            billing_type=BillingType(r["billing_type"]),
            description=r.get("description"),
            is_holder=bool(r.get("is_holder")),
            due_date=r.get("due_date"),
            reported_to=r.get("reported_to"),
        )

    def _hydrate(self, cur, rows: list[dict[str, Any]]) -> list[TimeEntry]:
        assignees = self._load_assignees(cur, [int(r["time_entry_id"]) for r in rows])
        return [self._to_entry(r, assignees.get(int(r["time_entry_id"]), [])) for r in rows]

    @staticmethod
    def _write_assignees(cur, entry_id: int, assignee_ids: Sequence[int]) -> None:
        cur.execute("DELETE FROM time_entry_assignees WHERE time_entry_id=%s", (entry_id,))
        for employee_id in assignee_ids:
            cur.execute(
                "INSERT INTO time_entry_assignees(time_entry_id, employee_id) VALUES(%s,%s)",
                (entry_id, int(employee_id)),
            )

    def get(self, entry_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE te.time_entry_id=%s", (int(entry_id),))
            r = fetchone(cur)
            if not r:
                return None
            return self._hydrate(cur, [r])[0]

    def create(self, entry: TimeEntry) -> TimeEntry:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_entries(
                    project_id, project_name, task_name, work_date, worked_hours,
                    status, billing_type, description, is_holder, due_date, reported_to
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.project_id,
                    entry.project_name,
                    entry.task_name,
                    entry.work_date,
                    float(entry.worked_hours),
                    entry.status.value,
                    entry.billing_type.value,
                    entry.description,
                    int(entry.is_holder),
                    entry.due_date,
                    entry.reported_to,
                ),
            )
            entry_id = int(cur.lastrowid)
            self._write_assignees(cur, entry_id, entry.assignee_ids)
            return entry.evolve(entry_id=entry_id)

    def update(self, entry: TimeEntry) -> TimeEntry:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET project_id=%s, project_name=%s, task_name=%s, work_date=%s, worked_hours=%s,
                    status=%s, billing_type=%s, description=%s, is_holder=%s, due_date=%s, reported_to=%s
                WHERE time_entry_id=%s
                """,
                (
                    entry.project_id,
                    entry.project_name,
                    entry.task_name,
                    entry.work_date,
                    float(entry.worked_hours),
                    entry.status.value,
                    entry.billing_type.value,
                    entry.description,
                    int(entry.is_holder),
                    entry.due_date,
                    entry.reported_to,
                    int(entry.entry_id),
                ),
            )
            self._write_assignees(cur, int(entry.entry_id), entry.assignee_ids)
            return entry

    def upsert(self, entry: TimeEntry) -> TimeEntry:
        if entry.entry_id is None:
            return self.create(entry)
        return self.update(entry)

    def delete(self, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM time_entry_assignees WHERE time_entry_id=%s", (int(entry_id),))
            cur.execute("DELETE FROM time_entries WHERE time_entry_id=%s", (int(entry_id),))
            return cur.rowcount > 0

    def list_by_employee(self, employee_id: int) -> Sequence[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + """
                JOIN time_entry_assignees a ON a.time_entry_id = te.time_entry_id
                WHERE a.employee_id=%s
                ORDER BY te.work_date ASC, te.time_entry_id ASC
                """,
                (int(employee_id),),
            )
            return self._hydrate(cur, fetchall(cur))

    def list_by_date_range(
        self,
        start: date,
        end: date,
        *,
        project_id: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[TimeEntry]:
        clauses = ["te.work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]

        if project_id is not None:
            clauses.append("te.project_id=%s")
            params.append(int(project_id))
        if employee_id is not None:
            clauses.append(
                "EXISTS (SELECT 1 FROM time_entry_assignees a WHERE a.time_entry_id = te.time_entry_id AND a.employee_id=%s)"
            )
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {where} ORDER BY te.work_date ASC, te.time_entry_id ASC",
                tuple(params),
            )
            return self._hydrate(cur, fetchall(cur))

    def locked_cell(self, key: GroupKey, work_date: date) -> AbstractContextManager:
        return named_lock(self._conn_factory, _cell_lock_name(key, work_date))
