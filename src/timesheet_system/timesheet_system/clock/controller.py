from __future__ import annotations

import logging
from datetime import date

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_id
from ..core.exceptions import InvalidTransition, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    clock = container.clock_service

    def _params() -> dict:
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        merged = dict(request.args)
        merged.update(data)
        return merged

    def _work_date(params: dict) -> date | None:
        value = params.get("date")
        return parse_iso_date(value) if value else None

    def _respond(record, *, now=None):
        body = record.to_dict()
        body["display_seconds"] = record.display_seconds(now or container.now())
        return jsonify({"success": True, "daily_time": body}), 200

    def _clock_action(action: str):
        try:
            params = _params()
            employee_id = require_id(params.get("employee_id"), "Employee")
            now = container.now()
            record = getattr(clock, action)(employee_id, work_date=_work_date(params), now=now)
            return _respond(record, now=now)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except InvalidTransition as e:
            return jsonify({"success": False, "message": str(e)}), 409
        except Exception:
            logger.exception("Clock action %s failed", action)
            return jsonify({"success": False, "message": "Internal error while updating the clock"}), 500

    @app.route("/api/clock/in", methods=["POST"], endpoint="clock_in")
    def clock_in():
        return _clock_action("clock_in")

    @app.route("/api/clock/pause", methods=["POST"], endpoint="clock_pause")
    def clock_pause():
        return _clock_action("pause")

    @app.route("/api/clock/out", methods=["POST"], endpoint="clock_out")
    def clock_out():
        return _clock_action("clock_out")

    @app.route("/api/clock/today", methods=["GET"], endpoint="clock_today")
    def clock_today():
        try:
            params = _params()
            employee_id = require_id(params.get("employee_id"), "Employee")
            now = container.now()
            work_date = _work_date(params) or now.date()
            record = clock.get_daily_time(employee_id, work_date=work_date)
            if record is None:
                return jsonify({"success": True, "daily_time": None}), 200
            return _respond(record, now=now)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            logger.exception("Clock lookup failed")
            return jsonify({"success": False, "message": "Internal error while reading the clock"}), 500
