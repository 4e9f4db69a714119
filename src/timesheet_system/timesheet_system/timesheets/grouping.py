from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..time_entries.model import GroupKey, TimeEntry


def group_key(entry: TimeEntry) -> GroupKey:
    return GroupKey.of(entry.project_id, entry.task_name, entry.assignee_ids)


def group_entries(entries: Iterable[TimeEntry]) -> dict[GroupKey, list[TimeEntry]]:
    """Bucket entries by group key, keeping the order each group was first seen."""

    groups: dict[GroupKey, list[TimeEntry]] = {}
    for entry in entries:
        groups.setdefault(group_key(entry), []).append(entry)
    return groups


def matching(entries: Iterable[TimeEntry], key: GroupKey, day: date) -> list[TimeEntry]:
    return [e for e in entries if group_key(e) == key and e.work_date == day]


def representative(entries: Sequence[TimeEntry], key: GroupKey) -> Optional[TimeEntry]:
    for entry in entries:
        if group_key(entry) == key:
            return entry
    return None
