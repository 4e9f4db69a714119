from __future__ import annotations

import math
from typing import Iterable, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_hours(value: object) -> float:
    try:
        hours = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError("Worked hours must be a number")
    if not math.isfinite(hours):
        raise ValidationError("Worked hours must be a finite number")
    if hours < 0:
        raise ValidationError("Worked hours cannot be negative")
    return hours


def require_assignees(values: Optional[Iterable[object]]) -> tuple[int, ...]:
    try:
        ids = sorted({int(v) for v in (values or [])})  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError("Assignee ids must be integers")
    if not ids:
        raise ValidationError("At least one assignee is required")
    return tuple(ids)


def require_id(value: object, field_name: str) -> int:
    try:
        parsed = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is required")
    if parsed <= 0:
        raise ValidationError(f"{field_name} is required")
    return parsed


def clean_description(value: Optional[str]) -> Optional[str]:
    text = (value or "").strip()
    return text or None
