"""Domain models for the NextMove core."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from .errors import ValidationError


class EnergyLevel(str, Enum):
    PEAK = "peak"
    MEDIUM = "medium"
    LOW = "low"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SuggestionCategory(str, Enum):
    BREAK = "break_reminder"
    TIME_SENSITIVE = "time_sensitive"
    QUICK_WIN = "quick_win"
    ENERGY_MATCH = "energy_match"
    BREAK_DOWN = "break_down"
    STREAK = "streak"
    PATTERN_INSIGHT = "pattern_insight"


class UiContext(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    STUCK = "stuck"
    COMPLETING = "completing"


@dataclass(frozen=True)
class TaskId:
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValidationError("TaskId cannot be empty")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Task:
    """Ranking-relevant view of a persisted task.

    Missing labels and estimates are legal; the scoring models default them.
    """

    id: TaskId
    title: str
    energy_level: Optional[EnergyLevel] = None
    priority: Optional[Priority] = None
    estimated_minutes: Optional[int] = None
    deadline: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    completed: bool = False
    skipped: bool = False
    skipped_count: int = 0
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, TaskId):
            raise ValidationError("Task id must be a TaskId", task_id=repr(self.id))
        if not isinstance(self.title, str):
            raise ValidationError("Task title must be a string", task_id=self.id.value)
        if self.estimated_minutes is not None and self.estimated_minutes <= 0:
            raise ValidationError(
                "Task estimated_minutes must be positive", task_id=self.id.value
            )
        if self.skipped_count < 0:
            raise ValidationError(
                "Task skipped_count cannot be negative", task_id=self.id.value
            )
        for name in ("deadline", "expires_at", "created_at"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, datetime):
                raise ValidationError(
                    f"Task {name} must be a datetime", task_id=self.id.value
                )

    @property
    def is_pending(self) -> bool:
        return not self.completed and not self.skipped


@dataclass(frozen=True)
class SortContext:
    """Caller-supplied ranking context. Unset fields are derived from the clock."""

    user_energy: Optional[EnergyLevel] = None
    current_hour: Optional[int] = None
    is_weekend: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.current_hour is not None and not 0 <= self.current_hour <= 23:
            raise ValidationError("SortContext current_hour must be within 0..23")


@dataclass(frozen=True)
class ResolvedContext:
    user_energy: EnergyLevel
    current_hour: int
    is_weekend: bool


@dataclass(frozen=True)
class UserState:
    """Live behavioural snapshot consumed by the suggestion selector."""

    current_energy: Optional[EnergyLevel] = None
    tasks_completed_today: int = 0
    current_streak: int = 0
    last_task_completed_at: Optional[datetime] = None
    focusing_since: Optional[datetime] = None
    focused_task_id: Optional[TaskId] = None
    blocked_task_ids: Sequence[TaskId] = ()

    def __post_init__(self) -> None:
        if self.tasks_completed_today < 0:
            raise ValidationError("UserState tasks_completed_today cannot be negative")
        if self.current_streak < 0:
            raise ValidationError("UserState current_streak cannot be negative")
        if isinstance(self.blocked_task_ids, (str, bytes)):
            raise ValidationError("UserState blocked_task_ids must be a sequence of TaskId")
        for task_id in self.blocked_task_ids:
            if not isinstance(task_id, TaskId):
                raise ValidationError("UserState blocked_task_ids must contain TaskId")


@dataclass(frozen=True)
class SkipRecord:
    """One user "skip" action. History is append-only."""

    task_id: TaskId
    skipped_at: datetime
    reason: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.task_id, TaskId):
            raise ValidationError("SkipRecord task_id must be a TaskId")
        if not isinstance(self.skipped_at, datetime):
            raise ValidationError(
                "SkipRecord skipped_at must be a datetime", task_id=self.task_id.value
            )


@dataclass(frozen=True)
class StuckTask:
    task_id: TaskId
    skip_count: int
    last_skipped_at: datetime
    last_skip_reason: Optional[str] = None


@dataclass(frozen=True)
class Suggestion:
    """A transient nudge. Regenerated on every call, never stored."""

    id: str
    text: str
    action_label: str
    category: SuggestionCategory
    priority: int = 0
    title: str = ""
    task_id: Optional[TaskId] = None

    def __post_init__(self) -> None:
        if not self.id.strip():
            raise ValidationError("Suggestion id cannot be empty")
        if not self.text.strip():
            raise ValidationError("Suggestion text cannot be empty")
