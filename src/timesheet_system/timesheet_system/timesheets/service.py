from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Sequence, Union

from ..common.datetime_utils import utc_now, week_end_for, week_start_for
from ..common.validators import clean_description, require_assignees, require_hours, require_id, require_non_empty
from ..core.constants import DEFAULT_LOG_SORT, DEFAULT_TASK_NAME, HOURS_PRECISION
from ..core.enums import BillingType, CellAction, EntryStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..directory.repository import Directory, employee_name, project_name
from ..time_entries.model import GroupKey, TimeEntry
from ..time_entries.repository import TimeEntryRepository
from . import aggregation
from .grouping import matching, representative
from .lock import TimesheetLock
from .model import BillingTotals, CellResult, EntryFilters, SummaryRow, WeeklyMatrix, WeeklyTimesheet

logger = logging.getLogger(__name__)

CellTarget = Union[GroupKey, TimeEntry]


class TimesheetService:
    """Weekly matrices, summaries and logs over time entries, plus the guarded mutations.

    Every mutation checks the submission lock of the affected week first and fails closed
    with ``LockedWeek``. Cell writes run under the store's per-(group, date) lock.
    """

    def __init__(
        self,
        entries: TimeEntryRepository,
        lock: TimesheetLock,
        directory: Directory,
        *,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._entries = entries
        self._lock = lock
        self._directory = directory
        self._clock = clock

    # ----- read side -----

    def _load(self, start: date, end: date, filters: Optional[EntryFilters]) -> list[TimeEntry]:
        filters = filters or EntryFilters()
        rows = self._entries.list_by_date_range(
            start,
            end,
            project_id=filters.project_id,
            employee_id=filters.employee_id,
        )
        return [e for e in rows if filters.matches(e)]

    def build_weekly_matrix(
        self,
        employee_id: Optional[int],
        week_start: date,
        filters: Optional[EntryFilters] = None,
    ) -> WeeklyMatrix:
        """Matrix for one employee, or for everybody when ``employee_id`` is None."""

        filters = filters or EntryFilters()
        if employee_id is not None:
            filters = EntryFilters(project_id=filters.project_id, employee_id=int(employee_id), on_date=filters.on_date)
        monday = week_start_for(week_start)
        return aggregation.build_weekly_matrix(self._load(monday, week_end_for(monday), filters), monday)

    def build_summary(self, start: date, end: date, filters: Optional[EntryFilters] = None) -> list[SummaryRow]:
        self._check_range(start, end)
        return aggregation.build_summary(self._load(start, end, filters), start, end)

    def build_logs(
        self,
        start: date,
        end: date,
        filters: Optional[EntryFilters] = None,
        *,
        sort_by: str = DEFAULT_LOG_SORT,
        descending: bool = False,
    ) -> list[TimeEntry]:
        self._check_range(start, end)
        return aggregation.build_logs(self._load(start, end, filters), start, end, sort_by=sort_by, descending=descending)

    def billing_totals(self, start: date, end: date, filters: Optional[EntryFilters] = None) -> BillingTotals:
        self._check_range(start, end)
        return aggregation.billing_totals(self._load(start, end, filters))

    def hours_today(self, employee_id: int, *, today: Optional[date] = None) -> float:
        today = today or self._clock().date()
        return aggregation.hours_on(self._load(today, today, EntryFilters(employee_id=int(employee_id))), today)

    def is_locked(self, employee_id: int, week_start: date) -> bool:
        return self._lock.is_locked(employee_id, week_start)

    def list_timesheets(self, employee_id: Optional[int] = None) -> Sequence[WeeklyTimesheet]:
        return self._lock.list_timesheets(employee_id)

    @staticmethod
    def _check_range(start: date, end: date) -> None:
        if end < start:
            raise ValidationError("End date must be on or after start date")

    # ----- mutations -----

    def submit_week(self, employee_id: int, week_start: date) -> WeeklyTimesheet:
        return self._lock.submit(employee_id, week_start)

    def _guarded(self, employee_id: Optional[int], key: GroupKey, day: date) -> AbstractContextManager:
        """Week locks of the acting employee and every assignee, with the submitted check done under them."""

        ids = set(key.assignee_ids)
        if employee_id is not None:
            ids.add(int(employee_id))
        return self._lock.guarded(ids, day)

    def _cell_entries(self, key: GroupKey, day: date) -> list[TimeEntry]:
        return matching(self._entries.list_by_date_range(day, day, project_id=key.project_id), key, day)

    def _template_for(self, key: GroupKey) -> TimeEntry:
        for employee_id in key.assignee_ids:
            found = representative(self._entries.list_by_employee(employee_id), key)
            if found:
                return found

        project = self._directory.resolve_project(key.project_id)
        if project is None:
            raise ValidationError(f"Project #{key.project_id} not found")
        return TimeEntry(
            entry_id=None,
            project_id=key.project_id,
            project_name=project.name,
            task_name=require_non_empty(key.task_name, "Task name"),
            assignee_ids=require_assignees(key.assignee_ids),
            work_date=date.min,
            worked_hours=0.0,
        )

    def upsert_cell(
        self,
        target: CellTarget,
        work_date: date,
        hours: object,
        description: Optional[str] = None,
        *,
        employee_id: Optional[int] = None,
    ) -> CellResult:
        """Apply one matrix cell edit.

        No entry and zero hours is a no-op; no entry and positive hours clones the group's
        representative onto ``work_date``; zero hours deletes the existing entry; positive
        hours updates it in place. Re-applying the same edit leaves the store unchanged.
        """

        new_hours = require_hours(hours)
        note = clean_description(description)
        key = target.group_key if isinstance(target, TimeEntry) else target
        require_assignees(key.assignee_ids)

        with self._guarded(employee_id, key, work_date), self._entries.locked_cell(key, work_date):
            existing = self._cell_entries(key, work_date)

            if not existing:
                if new_hours == 0:
                    return CellResult(CellAction.UNCHANGED)
                template = target if isinstance(target, TimeEntry) else self._template_for(key)
                created = self._entries.create(
                    template.evolve(
                        entry_id=None,
                        work_date=work_date,
                        worked_hours=new_hours,
                        description=note,
                        is_holder=False,
                    )
                )
                logger.info("Cell created entry=%s key=%s date=%s hours=%s", created.entry_id, key, work_date, new_hours)
                return CellResult(CellAction.CREATED, created)

            current = existing[0]
            if new_hours == 0:
                self._entries.delete(int(current.entry_id))
                logger.info("Cell cleared entry=%s key=%s date=%s", current.entry_id, key, work_date)
                return CellResult(CellAction.DELETED, current)

            if current.worked_hours == new_hours and current.description == note and not current.is_holder:
                return CellResult(CellAction.UNCHANGED, current)

            updated = self._entries.update(current.evolve(worked_hours=new_hours, description=note, is_holder=False))
            logger.info("Cell updated entry=%s key=%s date=%s hours=%s", updated.entry_id, key, work_date, new_hours)
            return CellResult(CellAction.UPDATED, updated)

    def add_task_row(
        self,
        employee_id: int,
        week_start: date,
        project_id: int,
        task_name: Optional[str] = None,
        assignee_ids: Optional[Iterable[int]] = None,
        *,
        billing_type: BillingType = BillingType.BILLABLE,
        status: EntryStatus = EntryStatus.COMPLETED,
    ) -> TimeEntry:
        """Make a task row visible in a week by storing one zero-hour holder on its Monday.

        When the group already has entries that week the first one is returned and nothing
        is written.
        """

        employee_id = require_id(employee_id, "Employee")
        project_id = require_id(project_id, "Project")
        name = require_non_empty(task_name or DEFAULT_TASK_NAME, "Task name")
        assignees = require_assignees(assignee_ids or [employee_id])
        key = GroupKey.of(project_id, name, assignees)
        monday = week_start_for(week_start)

        with self._guarded(employee_id, key, monday), self._entries.locked_cell(key, monday):
            project = self._directory.resolve_project(project_id)
            if project is None:
                raise ValidationError(f"Project #{project_id} not found")

            in_week = self._entries.list_by_date_range(monday, week_end_for(monday), project_id=project_id)
            found = representative(in_week, key)
            if found:
                logger.debug("Task row already present key=%s week=%s", key, monday)
                return found

            holder = self._entries.create(
                TimeEntry(
                    entry_id=None,
                    project_id=project_id,
                    project_name=project.name,
                    task_name=name,
                    assignee_ids=assignees,
                    work_date=monday,
                    worked_hours=0.0,
                    status=status,
                    billing_type=billing_type,
                    description=None,
                    is_holder=True,
                )
            )
        logger.info("Task row added entry=%s key=%s week=%s", holder.entry_id, key, monday)
        return holder

    def delete_group(self, key: GroupKey, week_start: date, *, employee_id: Optional[int] = None) -> int:
        """Remove a whole matrix row for one week. Returns the number of entries deleted."""

        monday = week_start_for(week_start)
        removed = 0
        with self._guarded(employee_id, key, monday):
            in_week = self._entries.list_by_date_range(monday, week_end_for(monday), project_id=key.project_id)
            for entry in in_week:
                if entry.group_key != key:
                    continue
                with self._entries.locked_cell(key, entry.work_date):
                    if self._entries.delete(int(entry.entry_id)):
                        removed += 1
        logger.info("Task row deleted key=%s week=%s entries=%s", key, monday, removed)
        return removed

    def _get_entry(self, entry_id: int) -> TimeEntry:
        entry = self._entries.get(int(entry_id))
        if entry is None:
            raise NotFoundError(f"Time entry #{entry_id} not found")
        return entry

    def edit_entry(
        self,
        entry_id: int,
        *,
        worked_hours: object = None,
        description: Optional[str] = None,
        status: Optional[EntryStatus] = None,
        billing_type: Optional[BillingType] = None,
        employee_id: Optional[int] = None,
    ) -> CellResult:
        """Single-entry edit; hours set to zero removes the entry like a cleared cell."""

        changes: dict = {}
        if worked_hours is not None:
            changes["worked_hours"] = require_hours(worked_hours)
        if description is not None:
            changes["description"] = clean_description(description)
        if status is not None:
            changes["status"] = EntryStatus(status)
        if billing_type is not None:
            changes["billing_type"] = BillingType(billing_type)

        entry = self._get_entry(entry_id)
        with self._guarded(employee_id, entry.group_key, entry.work_date), self._entries.locked_cell(
            entry.group_key, entry.work_date
        ):
            entry = self._get_entry(entry_id)
            if changes.get("worked_hours") == 0:
                self._entries.delete(int(entry.entry_id))
                logger.info("Entry cleared entry=%s", entry.entry_id)
                return CellResult(CellAction.DELETED, entry)
            if not changes:
                return CellResult(CellAction.UNCHANGED, entry)

            if changes.get("worked_hours"):
                changes["is_holder"] = False
            updated = self._entries.update(entry.evolve(**changes))
        logger.info("Entry updated entry=%s fields=%s", updated.entry_id, sorted(changes))
        return CellResult(CellAction.UPDATED, updated)

    def delete_entry(self, entry_id: int, *, employee_id: Optional[int] = None) -> CellResult:
        entry = self._get_entry(entry_id)
        with self._guarded(employee_id, entry.group_key, entry.work_date), self._entries.locked_cell(
            entry.group_key, entry.work_date
        ):
            entry = self._get_entry(entry_id)
            self._entries.delete(int(entry.entry_id))
        logger.info("Entry deleted entry=%s", entry.entry_id)
        return CellResult(CellAction.DELETED, entry)

    # ----- presentation helpers -----

    def _key_view(self, key: GroupKey, rep: TimeEntry) -> dict:
        return {
            "key": key.to_dict(),
            "project_name": project_name(self._directory, key.project_id, rep.project_name),
            "task_name": key.task_name,
            "assignees": [employee_name(self._directory, a) for a in key.assignee_ids],
            "status": rep.status.value,
            "billing_type": rep.billing_type.value,
            "representative_id": rep.entry_id,
        }

    def describe_matrix(self, matrix: WeeklyMatrix) -> dict:
        rows = []
        for row in matrix.rows:
            view = self._key_view(row.key, row.representative)
            view["hours"] = {d.isoformat(): round(h, HOURS_PRECISION) for d, h in row.hours_by_date.items()}
            view["descriptions"] = {d.isoformat(): text for d, text in row.descriptions.items()}
            view["total"] = round(row.total, HOURS_PRECISION)
            rows.append(view)
        return {
            "week_start": matrix.week_start.isoformat(),
            "days": [d.isoformat() for d in matrix.days],
            "rows": rows,
            "day_totals": {d.isoformat(): round(h, HOURS_PRECISION) for d, h in matrix.day_totals.items()},
            "grand_total": round(matrix.grand_total, HOURS_PRECISION),
        }

    def describe_summary(self, rows: Sequence[SummaryRow]) -> list[dict]:
        out = []
        for row in rows:
            view = self._key_view(row.key, row.representative)
            view["total_hours"] = round(row.total_hours, HOURS_PRECISION)
            view["entry_count"] = row.entry_count
            out.append(view)
        return out

    def describe_logs(self, entries: Sequence[TimeEntry]) -> list[dict]:
        out = []
        for e in entries:
            view = e.to_dict()
            view["project_name"] = project_name(self._directory, e.project_id, e.project_name)
            view["assignees"] = [employee_name(self._directory, a) for a in e.assignee_ids]
            out.append(view)
        return out
