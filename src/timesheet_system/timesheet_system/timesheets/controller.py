from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, resolve_range, week_start_for
from ..common.validators import require_assignees, require_id
from ..core.constants import DEFAULT_LOG_SORT
from ..core.enums import BillingType, EntryStatus
from ..core.exceptions import LockedWeek, NotFoundError, ValidationError
from ..container import Container
from ..time_entries.model import GroupKey
from .model import EntryFilters

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    timesheets = container.timesheet_service

    def json_api(view):
        """Map domain errors to JSON responses the way the UI expects them."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"success": False, "message": str(e)}), 400
            except NotFoundError as e:
                return jsonify({"success": False, "message": str(e)}), 404
            except LockedWeek as e:
                return jsonify({"success": False, "message": str(e), "week_start": e.week_start.isoformat()}), 409
            except Exception:
                logger.exception("Timesheet request failed: %s %s", request.method, request.path)
                return jsonify({"success": False, "message": "Internal error while processing the timesheet"}), 500

        return wrapper

    def _params() -> dict:
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        merged = dict(request.args)
        merged.update(data)
        return merged

    def _optional_id(params: dict, name: str) -> Optional[int]:
        value = params.get(name)
        if value in (None, "", "all"):
            return None
        return require_id(value, name)

    def _enum(cls, value):
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Unsupported value: {value}")

    def _filters(params: dict) -> EntryFilters:
        on_date = params.get("on_date")
        return EntryFilters(
            project_id=_optional_id(params, "project_id"),
            employee_id=_optional_id(params, "employee_id"),
            on_date=parse_iso_date(on_date) if on_date else None,
        )

    def _range(params: dict):
        today = container.now().date()
        anchor = params.get("week_start")
        start = params.get("start")
        end = params.get("end")
        return resolve_range(
            str(params.get("range") or ("custom" if start and end else "this_week")),
            today=today,
            anchor=parse_iso_date(anchor) if anchor else None,
            custom_start=parse_iso_date(start) if start else None,
            custom_end=parse_iso_date(end) if end else None,
        )

    def _week_start(params: dict):
        value = params.get("week_start")
        return week_start_for(parse_iso_date(value) if value else container.now().date())

    def _group_key(params: dict) -> GroupKey:
        key = params.get("key") or params
        if not isinstance(key, dict):
            raise ValidationError("Row key must be an object with project_id, task_name and assignee_ids")
        assignees = key.get("assignee_ids") or []
        if isinstance(assignees, str):
            assignees = [a for a in assignees.split(",") if a.strip()]
        return GroupKey.of(
            require_id(key.get("project_id"), "Project"),
            str(key.get("task_name") or "").strip(),
            require_assignees(assignees),
        )

    @app.route("/api/timesheets/week", methods=["GET"], endpoint="timesheet_week")
    @json_api
    def timesheet_week():
        params = _params()
        employee_id = _optional_id(params, "employee_id")
        week_start = _week_start(params)
        matrix = timesheets.build_weekly_matrix(employee_id, week_start, _filters(params))
        body = timesheets.describe_matrix(matrix)
        if employee_id is not None:
            body["status"] = "Submitted" if timesheets.is_locked(employee_id, week_start) else "Not Submitted"
            body["hours_today"] = timesheets.hours_today(employee_id, today=container.now().date())
        return jsonify({"success": True, "matrix": body}), 200

    @app.route("/api/timesheets/summary", methods=["GET"], endpoint="timesheet_summary")
    @json_api
    def timesheet_summary():
        params = _params()
        start, end = _range(params)
        filters = _filters(params)
        rows = timesheets.build_summary(start, end, filters)
        return jsonify(
            {
                "success": True,
                "start": start.isoformat(),
                "end": end.isoformat(),
                "rows": timesheets.describe_summary(rows),
                "totals": timesheets.billing_totals(start, end, filters).to_dict(),
            }
        ), 200

    @app.route("/api/timesheets/logs", methods=["GET"], endpoint="timesheet_logs")
    @json_api
    def timesheet_logs():
        params = _params()
        start, end = _range(params)
        entries = timesheets.build_logs(
            start,
            end,
            _filters(params),
            sort_by=str(params.get("sort_by") or DEFAULT_LOG_SORT),
            descending=str(params.get("order") or "asc").lower() == "desc",
        )
        return jsonify({"success": True, "start": start.isoformat(), "end": end.isoformat(), "entries": timesheets.describe_logs(entries)}), 200

    @app.route("/api/timesheets/cell", methods=["PUT"], endpoint="timesheet_cell")
    @json_api
    def timesheet_cell():
        params = _params()
        result = timesheets.upsert_cell(
            _group_key(params),
            parse_iso_date(params.get("date")),
            params.get("hours", 0),
            params.get("description"),
            employee_id=_optional_id(params, "employee_id"),
        )
        return jsonify({"success": True, "result": result.to_dict()}), 200

    @app.route("/api/timesheets/rows", methods=["POST"], endpoint="timesheet_add_row")
    @json_api
    def timesheet_add_row():
        params = _params()
        holder = timesheets.add_task_row(
            require_id(params.get("employee_id"), "Employee"),
            _week_start(params),
            require_id(params.get("project_id"), "Project"),
            params.get("task_name"),
            params.get("assignee_ids"),
            billing_type=_enum(BillingType, params.get("billing_type")) or BillingType.BILLABLE,
            status=_enum(EntryStatus, params.get("status")) or EntryStatus.COMPLETED,
        )
        return jsonify({"success": True, "entry": holder.to_dict()}), 201

    @app.route("/api/timesheets/rows", methods=["DELETE"], endpoint="timesheet_delete_row")
    @json_api
    def timesheet_delete_row():
        params = _params()
        removed = timesheets.delete_group(
            _group_key(params),
            _week_start(params),
            employee_id=_optional_id(params, "employee_id"),
        )
        return jsonify({"success": True, "deleted": removed}), 200

    @app.route("/api/timesheets/entries/<int:entry_id>", methods=["PATCH"], endpoint="timesheet_edit_entry")
    @json_api
    def timesheet_edit_entry(entry_id: int):
        params = _params()
        result = timesheets.edit_entry(
            entry_id,
            worked_hours=params.get("worked_hours"),
            description=params.get("description"),
            status=_enum(EntryStatus, params.get("status")),
            billing_type=_enum(BillingType, params.get("billing_type")),
            employee_id=_optional_id(params, "employee_id"),
        )
        return jsonify({"success": True, "result": result.to_dict()}), 200

    @app.route("/api/timesheets/entries/<int:entry_id>", methods=["DELETE"], endpoint="timesheet_delete_entry")
    @json_api
    def timesheet_delete_entry(entry_id: int):
        params = _params()
        result = timesheets.delete_entry(entry_id, employee_id=_optional_id(params, "employee_id"))
        return jsonify({"success": True, "result": result.to_dict()}), 200

    @app.route("/api/timesheets/submit", methods=["POST"], endpoint="timesheet_submit")
    @json_api
    def timesheet_submit():
        params = _params()
        sheet = timesheets.submit_week(require_id(params.get("employee_id"), "Employee"), _week_start(params))
        return jsonify({"success": True, "timesheet": sheet.to_dict()}), 200

    @app.route("/api/timesheets/lock", methods=["GET"], endpoint="timesheet_lock")
    @json_api
    def timesheet_lock():
        params = _params()
        employee_id = require_id(params.get("employee_id"), "Employee")
        week_start = _week_start(params)
        return jsonify(
            {
                "success": True,
                "employee_id": employee_id,
                "week_start": week_start.isoformat(),
                "locked": timesheets.is_locked(employee_id, week_start),
            }
        ), 200

    @app.route("/api/timesheets", methods=["GET"], endpoint="timesheet_list")
    @json_api
    def timesheet_list():
        params = _params()
        sheets = timesheets.list_timesheets(_optional_id(params, "employee_id"))
        return jsonify({"success": True, "timesheets": [s.to_dict() for s in sheets]}), 200
