from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable, Optional

from ..core.enums import BillingType, EntryStatus


@dataclass(frozen=True, order=True)
class GroupKey:
    """Identity of one matrix row: project, task name and the sorted assignee set.

    Equality and ordering are structural; assignees are normalized (sorted, de-duplicated)
    so the order they were entered in never splits a group.
    """

    project_id: int
    task_name: str
    assignee_ids: tuple[int, ...]

    @classmethod
    def of(cls, project_id: int, task_name: str, assignee_ids: Iterable[int]) -> "GroupKey":
        return cls(int(project_id), str(task_name), tuple(sorted({int(a) for a in assignee_ids})))

    def includes(self, employee_id: int) -> bool:
        return int(employee_id) in self.assignee_ids

    def to_dict(self) -> dict:
        return {
            "project_id": self.project_id,
            "task_name": self.task_name,
            "assignee_ids": list(self.assignee_ids),
        }


@dataclass(frozen=True)
class TimeEntry:
    """Domain entity: one dated work-log row."""

    entry_id: Optional[int]
    project_id: int
    project_name: str
    task_name: str
    assignee_ids: tuple[int, ...]
    work_date: date
    worked_hours: float
    status: EntryStatus = EntryStatus.COMPLETED
    billing_type: BillingType = BillingType.BILLABLE
    description: Optional[str] = None
    is_holder: bool = False
    due_date: Optional[date] = None
    reported_to: Optional[str] = None
    group_key: GroupKey = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        assignees = tuple(sorted({int(a) for a in self.assignee_ids}))
        object.__setattr__(self, "assignee_ids", assignees)
        object.__setattr__(self, "group_key", GroupKey(int(self.project_id), self.task_name, assignees))

    def evolve(self, **changes) -> "TimeEntry":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "project_id": self.project_id,
            "project_name": self.project_name,
            "task_name": self.task_name,
            "assignee_ids": list(self.assignee_ids),
            "date": self.work_date.isoformat(),
            "worked_hours": self.worked_hours,
            "status": self.status.value,
            "billing_type": self.billing_type.value,
            "description": self.description,
            "is_holder": self.is_holder,
        }
