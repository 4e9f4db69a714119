from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee, Project
from .repository import Directory


class MySQLDirectory(Directory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def resolve_employee(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT employee_id, first_name, last_name, email, role FROM employees WHERE employee_id=%s",
                (int(employee_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Employee(
                employee_id=int(r["employee_id"]),
                first_name=r["first_name"],
                last_name=r["last_name"],
                email=r.get("email"),
                role=r.get("role") or "employee",
            )

    def resolve_project(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT project_id, name, code, client_name, status FROM projects WHERE project_id=%s",
                (int(project_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Project(
                project_id=int(r["project_id"]),
                name=r["name"],
                code=r.get("code"),
                client_name=r.get("client_name"),
                status=r.get("status") or "Active",
            )
