"""Stuck-task detection from skip history.

A task becomes "stuck" once it has collected STUCK_THRESHOLD skip records.
The evidence is the history itself, not a counter on the task, so it stays
auditable and the threshold can change without rewriting stored data.
Records are only ever appended by a collaborator; nothing here removes them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Mapping, Optional, Sequence

from .config import DEFAULT_CONFIG, NextMoveConfig
from .errors import ValidationError
from .models import SkipRecord, StuckTask, TaskId
from .urgency import as_aware

logger = logging.getLogger(__name__)


class StuckState(str, Enum):
    UNKNOWN = "unknown"  # no history has been observed for the task
    NORMAL = "normal"
    STUCK = "stuck"


@dataclass(frozen=True)
class StuckStatus:
    """Stuck-detector verdict for a single task."""

    task_id: TaskId
    state: StuckState
    skip_count: int = 0
    last_skip_reason: Optional[str] = None
    last_skipped_at: Optional[datetime] = None

    @property
    def is_stuck(self) -> bool:
        return self.state == StuckState.STUCK

    def as_stuck_task(self) -> Optional[StuckTask]:
        if not self.is_stuck or self.last_skipped_at is None:
            return None
        return StuckTask(
            task_id=self.task_id,
            skip_count=self.skip_count,
            last_skipped_at=self.last_skipped_at,
            last_skip_reason=self.last_skip_reason,
        )


def _check_history(task_id: TaskId, history: Sequence[SkipRecord]) -> None:
    if not isinstance(history, (list, tuple)):
        raise ValidationError(
            "Skip history must be a list or tuple of SkipRecord",
            task_id=task_id.value,
            got=type(history).__name__,
        )
    for record in history:
        if not isinstance(record, SkipRecord):
            raise ValidationError(
                "Skip history contains a non-SkipRecord entry",
                task_id=task_id.value,
                got=type(record).__name__,
            )
        if record.task_id != task_id:
            raise ValidationError(
                "Skip history contains a record for another task",
                task_id=task_id.value,
                record_task_id=record.task_id.value,
            )


def _most_recent(history: Sequence[SkipRecord]) -> SkipRecord:
    # History normally arrives newest first; ties keep the earlier entry.
    latest = history[0]
    for record in history[1:]:
        if as_aware(record.skipped_at) > as_aware(latest.skipped_at):
            latest = record
    return latest


class StuckDetector:
    """Maps a task's skip history to unknown / normal / stuck."""

    def __init__(
        self,
        threshold: Optional[int] = None,
        config: Optional[NextMoveConfig] = None,
    ) -> None:
        cfg = config or DEFAULT_CONFIG
        self.threshold = threshold if threshold is not None else cfg.stuck_threshold
        if self.threshold < 1:
            raise ValidationError("Stuck threshold must be at least 1")

    def evaluate(
        self,
        task_id: TaskId,
        history: Optional[Sequence[SkipRecord]],
    ) -> StuckStatus:
        """Classify *task_id* given its full skip history.

        ``None`` means the history was never loaded and yields UNKNOWN,
        which callers treat the same as NORMAL.
        """
        if not isinstance(task_id, TaskId):
            raise ValidationError("evaluate() requires a TaskId")
        if history is None:
            return StuckStatus(task_id=task_id, state=StuckState.UNKNOWN)

        _check_history(task_id, history)
        count = len(history)
        if count < self.threshold:
            return StuckStatus(task_id=task_id, state=StuckState.NORMAL, skip_count=count)

        latest = _most_recent(history)
        return StuckStatus(
            task_id=task_id,
            state=StuckState.STUCK,
            skip_count=count,
            last_skip_reason=latest.reason,
            last_skipped_at=latest.skipped_at,
        )

    def evaluate_all(
        self,
        histories: Mapping[TaskId, Sequence[SkipRecord]],
    ) -> dict[TaskId, StuckStatus]:
        if not isinstance(histories, Mapping):
            raise ValidationError("Skip histories must be a mapping keyed by TaskId")
        return {
            task_id: self.evaluate(task_id, history)
            for task_id, history in histories.items()
        }


def detect_stuck(
    histories: Mapping[TaskId, Sequence[SkipRecord]],
    config: Optional[NextMoveConfig] = None,
) -> dict[TaskId, StuckTask]:
    """Return only the stuck tasks among *histories*, keyed by task id."""
    statuses = StuckDetector(config=config).evaluate_all(histories)
    stuck = {
        task_id: status.as_stuck_task()
        for task_id, status in statuses.items()
        if status.is_stuck
    }
    if stuck:
        logger.debug("Stuck tasks: %s", [task_id.value for task_id in stuck])
    return stuck
