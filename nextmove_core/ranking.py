"""Task ranker: weighted multi-signal scoring and the home-screen surface.

Score per pending task:

    energy_match * 3 + urgency * 2 + priority * 5 + quick_win + alignment

Sorting is stable, so equal totals keep their input order and the output is
reproducible for identical inputs and an identical ``now``. Rank 0 is the
primary recommendation, ranks 1-2 the secondary candidates.

Stuck status is carried on each ScoredTask for display; it does not change
the score.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional, Sequence, Union

from .aliases import resolve_energy, resolve_priority
from .alignment import alignment_of
from .config import DEFAULT_CONFIG, NextMoveConfig
from .energy import infer_energy, match_score
from .errors import ValidationError
from .models import (
    EnergyLevel,
    Priority,
    ResolvedContext,
    SortContext,
    StuckTask,
    Task,
    TaskId,
)
from .stuck import StuckStatus
from .urgency import as_aware, urgency_of, wall_clock

logger = logging.getLogger(__name__)

PRIORITY_SCORES: dict[Priority, int] = {
    Priority.HIGH: 10,
    Priority.MEDIUM: 6,
    Priority.LOW: 3,
}

StuckSignal = Mapping[TaskId, Union[StuckStatus, StuckTask]]


# ---------------------------------------------------------------------------
# Output schema
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TaskScore:
    """Per-signal breakdown behind a task's total."""

    energy_match: int
    urgency: float
    priority: int
    quick_win: int
    time_alignment: int
    total: float


@dataclass(frozen=True)
class ScoredTask:
    task: Task
    score: TaskScore
    rank: int
    is_stuck: bool = False


@dataclass(frozen=True)
class HomeSurface:
    """What the home screen shows: the next move plus what else is pressing."""

    ranked: tuple[ScoredTask, ...]
    primary: Optional[ScoredTask]
    secondary: tuple[ScoredTask, ...]
    expiring_today: tuple[Task, ...] = ()
    expiring_soon: tuple[Task, ...] = ()
    already_expired: tuple[Task, ...] = ()
    context: Optional[ResolvedContext] = None

    @property
    def surfaced_ids(self) -> frozenset[TaskId]:
        ids = {s.task.id for s in self.secondary}
        if self.primary is not None:
            ids.add(self.primary.task.id)
        return frozenset(ids)

    @property
    def stuck_task_ids(self) -> tuple[TaskId, ...]:
        return tuple(s.task.id for s in self.ranked if s.is_stuck)


# ---------------------------------------------------------------------------
# Signals
# ---------------------------------------------------------------------------

def priority_score(priority: Union[Priority, str, None]) -> int:
    return PRIORITY_SCORES[resolve_priority(priority)]


def estimated_minutes(task: Task, config: Optional[NextMoveConfig] = None) -> int:
    cfg = config or DEFAULT_CONFIG
    return task.estimated_minutes or cfg.default_estimated_minutes


def is_quick_win(task: Task, config: Optional[NextMoveConfig] = None) -> bool:
    cfg = config or DEFAULT_CONFIG
    return estimated_minutes(task, cfg) <= cfg.quick_win_max_minutes


def quick_win_bonus(
    task: Task,
    user_energy: EnergyLevel,
    config: Optional[NextMoveConfig] = None,
) -> int:
    """Bonus for short tasks, withheld while the user is at peak energy.

    Peak energy should go to harder work, so quick wins only get a lift
    when the user is at medium or low energy.
    """
    cfg = config or DEFAULT_CONFIG
    if is_quick_win(task, cfg) and resolve_energy(user_energy) != EnergyLevel.PEAK:
        return cfg.quick_win_bonus
    return 0


def resolve_context(
    context: Optional[SortContext] = None,
    now: Optional[datetime] = None,
) -> ResolvedContext:
    """Fill unset context fields from *now* (local wall clock when omitted)."""
    context = context or SortContext()
    now = now or wall_clock()

    hour = context.current_hour if context.current_hour is not None else now.hour
    energy = (
        resolve_energy(context.user_energy)
        if context.user_energy is not None
        else infer_energy(hour)
    )
    is_weekend = (
        context.is_weekend if context.is_weekend is not None else now.weekday() >= 5
    )
    return ResolvedContext(user_energy=energy, current_hour=hour, is_weekend=is_weekend)


def score_task(
    task: Task,
    context: ResolvedContext,
    now: datetime,
    config: Optional[NextMoveConfig] = None,
) -> TaskScore:
    cfg = config or DEFAULT_CONFIG

    energy = match_score(task.energy_level, context.user_energy, cfg)
    urgency = urgency_of(task.deadline, now, cfg)
    priority = priority_score(task.priority)
    quick_win = quick_win_bonus(task, context.user_energy, cfg)
    alignment = alignment_of(task, context.current_hour)

    total = (
        energy * cfg.energy_weight
        + urgency * cfg.urgency_weight
        + priority * cfg.priority_weight
        + quick_win
        + alignment
    )
    return TaskScore(
        energy_match=energy,
        urgency=urgency,
        priority=priority,
        quick_win=quick_win,
        time_alignment=alignment,
        total=total,
    )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def check_tasks(tasks: Sequence[Task]) -> None:
    """Fail fast on a task snapshot that is not a list/tuple of Task."""
    if not isinstance(tasks, (list, tuple)):
        raise ValidationError(
            "Tasks must be a list or tuple of Task", got=type(tasks).__name__
        )
    for task in tasks:
        if not isinstance(task, Task):
            raise ValidationError(
                "Tasks contain a non-Task entry", got=type(task).__name__
            )


def is_stuck_signal(task_id: TaskId, stuck: Optional[StuckSignal]) -> bool:
    if not stuck:
        return False
    entry = stuck.get(task_id)
    if isinstance(entry, StuckStatus):
        return entry.is_stuck
    return isinstance(entry, StuckTask)


def rank(
    tasks: Sequence[Task],
    context: Optional[SortContext] = None,
    *,
    now: Optional[datetime] = None,
    stuck: Optional[StuckSignal] = None,
    config: Optional[NextMoveConfig] = None,
) -> tuple[ScoredTask, ...]:
    """Score every pending task and return them best first.

    Completed and skipped tasks are dropped. Ties keep input order.
    """
    check_tasks(tasks)
    cfg = config or DEFAULT_CONFIG
    now = now or wall_clock()
    resolved = resolve_context(context, now)

    scored = [
        (task, score_task(task, resolved, now, cfg))
        for task in tasks
        if task.is_pending
    ]
    scored.sort(key=lambda pair: -pair[1].total)

    ranked = tuple(
        ScoredTask(task=task, score=score, rank=index, is_stuck=is_stuck_signal(task.id, stuck))
        for index, (task, score) in enumerate(scored)
    )
    logger.debug(
        "Ranked %d of %d tasks (energy=%s, hour=%d)",
        len(ranked),
        len(tasks),
        resolved.user_energy.value,
        resolved.current_hour,
    )
    return ranked


def build_home_surface(
    tasks: Sequence[Task],
    context: Optional[SortContext] = None,
    *,
    now: Optional[datetime] = None,
    stuck: Optional[StuckSignal] = None,
    config: Optional[NextMoveConfig] = None,
) -> HomeSurface:
    """Rank *tasks* and split them into the sections the home screen shows.

    Expiring lists never repeat the primary or secondary tasks.
    """
    cfg = config or DEFAULT_CONFIG
    now = now or wall_clock()
    resolved = resolve_context(context, now)
    ranked = rank(tasks, resolved_to_sort(resolved), now=now, stuck=stuck, config=cfg)

    primary = ranked[0] if ranked else None
    secondary = ranked[1 : 1 + cfg.secondary_count]

    surfaced = {s.task.id for s in ranked[: 1 + cfg.secondary_count]}
    now_aware = as_aware(now)
    today = now_aware.date()

    expiring_today: list[Task] = []
    expiring_soon: list[Task] = []
    already_expired: list[Task] = []
    for entry in ranked:
        task = entry.task
        if task.id in surfaced or task.expires_at is None:
            continue
        expires = as_aware(task.expires_at).astimezone(now_aware.tzinfo)
        if expires.date() == today:
            expiring_today.append(task)
        elif expires > now_aware:
            expiring_soon.append(task)
        else:
            already_expired.append(task)

    return HomeSurface(
        ranked=ranked,
        primary=primary,
        secondary=secondary,
        expiring_today=tuple(expiring_today),
        expiring_soon=tuple(expiring_soon),
        already_expired=tuple(already_expired),
        context=resolved,
    )


def resolved_to_sort(resolved: ResolvedContext) -> SortContext:
    return SortContext(
        user_energy=resolved.user_energy,
        current_hour=resolved.current_hour,
        is_weekend=resolved.is_weekend,
    )
