"""Conversion from raw collaborator rows to domain models.

Task sources hand over plain mappings, either database rows (snake_case)
or API payloads (camelCase). Label noise is tolerated; structural problems
(a row that is not a mapping, a missing id, an unparseable timestamp) raise
ValidationError so they cannot silently skew a ranking.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any, Iterable, Mapping, Optional

from .aliases import parse_energy, parse_priority
from .errors import ValidationError
from .models import SkipRecord, Task, TaskId, UserState


def _pick(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in row and row[key] is not None:
            return row[key]
    return None


def _require_mapping(row: Any, label: str) -> Mapping[str, Any]:
    if not isinstance(row, Mapping):
        raise ValidationError(f"{label} must be a mapping", got=type(row).__name__)
    return row


def parse_timestamp(value: Any, field_name: str = "timestamp") -> Optional[datetime]:
    """Parse ISO-8601 strings (``Z`` suffix allowed), dates and datetimes."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as exc:
            raise ValidationError(f"Invalid {field_name}: {value!r}") from exc
    raise ValidationError(f"Invalid {field_name}: {value!r}")


def _optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field_name} must be an integer, got {value!r}") from exc


def _optional_minutes(value: Any, field_name: str) -> Optional[int]:
    """Estimates of zero mean "not estimated" and fall back to the default."""
    minutes = _optional_int(value, field_name)
    return minutes or None


def task_from_dict(row: Mapping[str, Any]) -> Task:
    row = _require_mapping(row, "Task row")
    raw_id = _pick(row, "id", "task_id", "taskId")
    if raw_id is None:
        raise ValidationError("Task row is missing an id")

    return Task(
        id=TaskId(str(raw_id)),
        title=str(_pick(row, "title", "name") or ""),
        energy_level=parse_energy(_pick(row, "energy_level", "energyLevel", "energy")),
        priority=parse_priority(_pick(row, "priority")),
        estimated_minutes=_optional_minutes(
            _pick(row, "estimated_minutes", "estimatedMinutes", "etaMinutes"),
            "estimated_minutes",
        ),
        deadline=parse_timestamp(_pick(row, "deadline", "due_date", "dueDate"), "deadline"),
        expires_at=parse_timestamp(_pick(row, "expires_at", "expiresAt"), "expires_at"),
        completed=bool(_pick(row, "completed") or False),
        skipped=bool(_pick(row, "skipped") or False),
        skipped_count=_optional_int(
            _pick(row, "skipped_count", "skippedCount"), "skipped_count"
        ) or 0,
        created_at=parse_timestamp(_pick(row, "created_at", "createdAt"), "created_at"),
    )


def tasks_from_rows(rows: Iterable[Mapping[str, Any]]) -> list[Task]:
    if isinstance(rows, (str, bytes, Mapping)) or rows is None:
        raise ValidationError("Task rows must be a list of mappings")
    return [task_from_dict(row) for row in rows]


def skip_record_from_dict(
    row: Mapping[str, Any],
    task_id: Optional[TaskId] = None,
) -> SkipRecord:
    """Build a SkipRecord; *task_id* fills in rows that omit their own id."""
    row = _require_mapping(row, "Skip record")
    raw_id = _pick(row, "task_id", "taskId")
    if raw_id is not None:
        record_task = TaskId(str(raw_id))
    elif task_id is not None:
        record_task = task_id
    else:
        raise ValidationError("Skip record is missing a task_id")

    skipped_at = parse_timestamp(_pick(row, "skipped_at", "skippedAt"), "skipped_at")
    if skipped_at is None:
        raise ValidationError("Skip record is missing skipped_at", task_id=record_task.value)

    reason = _pick(row, "reason")
    return SkipRecord(
        task_id=record_task,
        skipped_at=skipped_at,
        reason=str(reason) if reason else None,
    )


def user_state_from_dict(data: Optional[Mapping[str, Any]]) -> UserState:
    """Build a UserState, defaulting every missing field."""
    if data is None:
        return UserState()
    data = _require_mapping(data, "User state")

    blocked = _pick(data, "blocked_task_ids", "blockedTaskIds") or ()
    if isinstance(blocked, (str, bytes)) or not isinstance(blocked, (list, tuple)):
        raise ValidationError("blocked_task_ids must be a list")
    focused = _pick(data, "focused_task_id", "focusedTaskId")

    return UserState(
        current_energy=parse_energy(_pick(data, "current_energy", "currentEnergy")),
        tasks_completed_today=_optional_int(
            _pick(data, "tasks_completed_today", "tasksCompletedToday"),
            "tasks_completed_today",
        ) or 0,
        current_streak=_optional_int(
            _pick(data, "current_streak", "currentStreak"), "current_streak"
        ) or 0,
        last_task_completed_at=parse_timestamp(
            _pick(data, "last_task_completed_at", "lastTaskCompletedAt"),
            "last_task_completed_at",
        ),
        focusing_since=parse_timestamp(
            _pick(data, "focusing_since", "focusingSince"), "focusing_since"
        ),
        focused_task_id=TaskId(str(focused)) if focused is not None else None,
        blocked_task_ids=tuple(TaskId(str(value)) for value in blocked),
    )
