from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee, Project


class Directory(Protocol):
    """Read-only lookups into the employee/project directories."""

    def resolve_employee(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def resolve_project(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError


def employee_name(directory: Directory, employee_id: int) -> str:
    employee = directory.resolve_employee(employee_id)
    return employee.display_name if employee else f"#{employee_id}"


def project_name(directory: Directory, project_id: int, fallback: str = "") -> str:
    project = directory.resolve_project(project_id)
    if project:
        return project.name
    return fallback or f"#{project_id}"
