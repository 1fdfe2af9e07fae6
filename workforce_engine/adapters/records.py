"""Field-level parsing shared by the CSV and JSON adapters."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from workforce_engine.schema import (
    COMPLEXITY_LEVELS,
    TASK_STATUSES,
    Employee,
    ProductivityScoreRecord,
    Task,
)

_EMPLOYEE_FIELDS = ("employee_id", "organization_id", "name", "role")
_TASK_FIELDS = ("task_id", "organization_id", "assigned_to", "status", "complexity", "created_at")
_SCORE_FIELDS = ("organization_id", "employee_id", "score", "calculated_at")
_TRUE_VALUES = {"1", "true", "yes", "y", "t"}
_FALSE_VALUES = {"0", "false", "no", "n", "f"}


def _require(item: dict, fields: tuple[str, ...], where: str) -> None:
    missing = [field for field in fields if item.get(field) in (None, "")]
    if missing:
        raise ValueError(f"{where}: missing required fields {missing}")


def parse_timestamp(raw: Any, where: str, field: str) -> Optional[datetime]:
    """Parse an ISO timestamp; aware values are normalised to naive UTC."""

    if raw in (None, ""):
        return None
    try:
        value = datetime.fromisoformat(str(raw).strip().replace("Z", "+00:00"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"{where}: malformed {field}") from exc
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_float(raw: Any, where: str, field: str, default: float = 0.0) -> float:
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"{where}: invalid {field}") from exc


def parse_bool(raw: Any, where: str, field: str, default: bool = True) -> bool:
    if raw in (None, ""):
        return default
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"{where}: invalid {field} '{raw}'")


def parse_skills(raw: Any, where: str) -> tuple[str, ...]:
    """Skills arrive as a list (JSON) or a ``;``-separated string (CSV)."""

    if raw in (None, ""):
        return ()
    if isinstance(raw, str):
        parts = raw.split(";")
    elif isinstance(raw, (list, tuple)):
        parts = raw
    else:
        raise ValueError(f"{where}: skills must be a list or ';'-separated string")
    return tuple(str(part).strip() for part in parts if str(part).strip())


def parse_employee(item: dict, where: str) -> Employee:
    _require(item, _EMPLOYEE_FIELDS, where)
    return Employee(
        employee_id=str(item["employee_id"]).strip(),
        organization_id=str(item["organization_id"]).strip(),
        name=str(item["name"]).strip(),
        role=str(item["role"]).strip(),
        department=str(item.get("department") or "").strip(),
        skills=parse_skills(item.get("skills"), where),
        email=str(item.get("email") or "").strip(),
        is_active=parse_bool(item.get("is_active"), where, "is_active"),
    )


def parse_task(item: dict, where: str) -> Task:
    _require(item, _TASK_FIELDS, where)

    status = str(item["status"]).strip()
    if status not in TASK_STATUSES:
        raise ValueError(f"{where}: invalid status '{status}'")
    complexity = str(item["complexity"]).strip()
    if complexity not in COMPLEXITY_LEVELS:
        raise ValueError(f"{where}: invalid complexity '{complexity}'")

    created_at = parse_timestamp(item["created_at"], where, "created_at")
    completed_at = parse_timestamp(item.get("completed_at"), where, "completed_at")
    if completed_at is not None and status != "completed":
        raise ValueError(f"{where}: completed_at set on a task with status '{status}'")

    return Task(
        task_id=str(item["task_id"]).strip(),
        organization_id=str(item["organization_id"]).strip(),
        assigned_to=str(item["assigned_to"]).strip(),
        status=status,
        complexity=complexity,
        created_at=created_at,
        completed_at=completed_at,
    )


def parse_score(item: dict, where: str) -> ProductivityScoreRecord:
    _require(item, _SCORE_FIELDS, where)
    score = parse_float(item["score"], where, "score")
    if not 0 <= score <= 100:
        raise ValueError(f"{where}: score {score} outside [0, 100]")
    return ProductivityScoreRecord(
        organization_id=str(item["organization_id"]).strip(),
        employee_id=str(item["employee_id"]).strip(),
        score=score,
        completion_rate=parse_float(item.get("completion_rate"), where, "completion_rate"),
        avg_completion_time_hours=parse_float(item.get("avg_completion_time_hours"), where, "avg_completion_time_hours"),
        avg_complexity_handled=parse_float(item.get("avg_complexity_handled"), where, "avg_complexity_handled"),
        calculated_at=parse_timestamp(item["calculated_at"], where, "calculated_at"),
    )
