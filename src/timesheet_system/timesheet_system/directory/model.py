from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    employee_id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    role: str = "employee"

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Project:
    project_id: int
    name: str
    code: Optional[str] = None
    client_name: Optional[str] = None
    status: str = "Active"
