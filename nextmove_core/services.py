"""Services that pull data through ports and feed the pure scoring core."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Sequence

from .config import NextMoveConfig
from .errors import ValidationError
from .explain import reason_for
from .models import SkipRecord, SortContext, Suggestion, TaskId, UserState
from .ports import SkipHistoryRepository, TaskSource
from .ranking import HomeSurface, build_home_surface
from .stuck import StuckDetector, StuckStatus
from .suggestions import generate
from .urgency import utcnow, wall_clock

logger = logging.getLogger(__name__)


class SkipTracker:
    """Records skips and re-evaluates stuck status after each one."""

    def __init__(
        self,
        history: SkipHistoryRepository,
        config: Optional[NextMoveConfig] = None,
    ) -> None:
        self._history = history
        self._detector = StuckDetector(config=config)

    async def check(self, task_id: TaskId) -> StuckStatus:
        records = await self._history.list_for_task(task_id)
        return self._detector.evaluate(task_id, list(records))

    async def check_many(self, task_ids: Sequence[TaskId]) -> dict[TaskId, StuckStatus]:
        return {task_id: await self.check(task_id) for task_id in task_ids}

    async def record_skip(
        self,
        task_id: TaskId,
        reason: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> StuckStatus:
        """Append a skip record and return the task's updated status."""
        if not isinstance(task_id, TaskId):
            raise ValidationError("record_skip() requires a TaskId")
        record = SkipRecord(
            task_id=task_id,
            skipped_at=now or utcnow(),
            reason=(reason or "").strip() or None,
        )
        await self._history.append(record)

        status = await self.check(task_id)
        if status.is_stuck:
            logger.info(
                "Task %s is stuck after %d skips (last reason: %s)",
                task_id.value,
                status.skip_count,
                status.last_skip_reason,
            )
        return status


@dataclass(frozen=True)
class Briefing:
    """Everything the home screen needs for one refresh."""

    surface: HomeSurface
    suggestions: tuple[Suggestion, ...]
    reasons: dict[TaskId, tuple[str, ...]] = field(default_factory=dict)
    stuck: dict[TaskId, StuckStatus] = field(default_factory=dict)


class NextMoveOrchestrator:
    """Coordinator for the "what should I do next" flow."""

    def __init__(
        self,
        tasks: TaskSource,
        skip_history: Optional[SkipHistoryRepository] = None,
        config: Optional[NextMoveConfig] = None,
    ) -> None:
        self.tasks = tasks
        self.config = config or NextMoveConfig()
        self.skips = SkipTracker(skip_history, self.config) if skip_history else None

    async def briefing(
        self,
        state: Optional[UserState] = None,
        context: Optional[SortContext] = None,
        *,
        now: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> Briefing:
        """Rank pending tasks, explain the top picks, and pick suggestions.

        Energy comes from *context*, then *state*, then the hour of day, and
        the same value drives both ranking and suggestions. Without skip
        history, stuck statuses are left empty rather than guessed from
        task rows.
        """
        now = now or wall_clock()
        state = state or UserState()
        if context is None:
            context = SortContext(user_energy=state.current_energy)
        elif context.user_energy is None and state.current_energy is not None:
            context = replace(context, user_energy=state.current_energy)

        tasks = list(await self.tasks.list_pending())
        stuck: dict[TaskId, StuckStatus] = {}
        if self.skips is not None:
            stuck = await self.skips.check_many([t.id for t in tasks])

        surface = build_home_surface(
            tasks, context, now=now, stuck=stuck, config=self.config
        )
        user_energy = surface.context.user_energy if surface.context else None
        if user_energy is not None and state.current_energy != user_energy:
            state = replace(state, current_energy=user_energy)

        top = ([surface.primary] if surface.primary else []) + list(surface.secondary)
        reasons = {
            s.task.id: reason_for(s.task, user_energy, now=now, config=self.config)
            for s in top
        }
        suggestions = generate(
            [s.task for s in surface.ranked],
            state,
            limit,
            now=now,
            stuck=stuck,
            config=self.config,
        )
        logger.debug(
            "Briefing: primary=%s, %d ranked, %d suggestion(s)",
            surface.primary.task.id.value if surface.primary else None,
            len(surface.ranked),
            len(suggestions),
        )
        return Briefing(
            surface=surface,
            suggestions=suggestions,
            reasons=reasons,
            stuck={task_id: s for task_id, s in stuck.items() if s.is_stuck},
        )
