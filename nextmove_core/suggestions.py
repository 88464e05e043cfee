"""Suggestion selector: small, bounded sets of nudges beside the ranked list.

Each call builds suggestions from scratch, at most one per category, sorted
by suggestion priority and cut to ``limit``. Blocked, completed and skipped
tasks are never the subject of a suggestion. After a long focus stretch the
selector only proposes wrapping up, not starting something new.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence, Union

from .aliases import resolve_energy
from .config import DEFAULT_CONFIG, NextMoveConfig
from .energy import infer_energy, match_score
from .errors import ValidationError
from .explain import ENERGY_MATCH_TAG_MIN
from .models import (
    EnergyLevel,
    Suggestion,
    SuggestionCategory,
    Task,
    TaskId,
    UiContext,
    UserState,
)
from .ranking import StuckSignal, check_tasks, estimated_minutes, is_quick_win, is_stuck_signal
from .urgency import DUE_TODAY_URGENCY, OVERDUE_BASE, as_aware, urgency_of, wall_clock

logger = logging.getLogger(__name__)

CATEGORY_PRIORITIES: dict[SuggestionCategory, int] = {
    SuggestionCategory.TIME_SENSITIVE: 95,
    SuggestionCategory.BREAK: 90,
    SuggestionCategory.QUICK_WIN: 80,
    SuggestionCategory.ENERGY_MATCH: 75,
    SuggestionCategory.BREAK_DOWN: 70,
    SuggestionCategory.STREAK: 60,
}


def _suggest(
    category: SuggestionCategory,
    suggestion_id: str,
    title: str,
    text: str,
    action_label: str,
    task_id: Optional[TaskId] = None,
) -> Suggestion:
    return Suggestion(
        id=suggestion_id,
        text=text,
        action_label=action_label,
        category=category,
        priority=CATEGORY_PRIORITIES[category],
        title=title,
        task_id=task_id,
    )


# ---------------------------------------------------------------------------
# Per-category rules. Each returns at most one suggestion.
# ---------------------------------------------------------------------------

def _focus_minutes(state: UserState, now: datetime) -> float:
    if state.focusing_since is None:
        return 0.0
    return (as_aware(now) - as_aware(state.focusing_since)).total_seconds() / 60


def _wrap_up(state: UserState, now: datetime, cfg: NextMoveConfig) -> Optional[Suggestion]:
    minutes = _focus_minutes(state, now)
    if minutes <= cfg.focus_break_minutes:
        return None
    subject = state.focused_task_id
    if subject is not None and subject in state.blocked_task_ids:
        subject = None
    return _suggest(
        SuggestionCategory.BREAK,
        f"break-{int(as_aware(now).timestamp())}",
        "Time for a break",
        f"You've been focused for {round(minutes)} minutes. Wrap up and take a short break.",
        "Take 5 min break",
        task_id=subject,
    )


def _time_sensitive(candidates: Sequence[Task], now: datetime, cfg: NextMoveConfig) -> Optional[Suggestion]:
    best: Optional[Task] = None
    best_urgency = 0.0
    for task in candidates:
        urgency = urgency_of(task.deadline, now, cfg)
        if urgency >= DUE_TODAY_URGENCY and urgency > best_urgency:
            best, best_urgency = task, urgency
    if best is None:
        return None
    if best_urgency >= OVERDUE_BASE:
        text = f'"{best.title}" is overdue. Clear it before it grows.'
    else:
        text = f'"{best.title}" is due within {cfg.due_today_hours} hours.'
    return _suggest(
        SuggestionCategory.TIME_SENSITIVE,
        f"urgent-{best.id}",
        "Due soon",
        text,
        "Prioritize this",
        task_id=best.id,
    )


def _quick_win(candidates: Sequence[Task], energy: EnergyLevel, cfg: NextMoveConfig) -> Optional[Suggestion]:
    if energy == EnergyLevel.PEAK:
        return None
    quick = sorted(
        (t for t in candidates if is_quick_win(t, cfg)),
        key=lambda t: estimated_minutes(t, cfg),
    )
    if not quick:
        return None
    task = quick[0]
    return _suggest(
        SuggestionCategory.QUICK_WIN,
        f"quickwin-{task.id}",
        "Quick win available",
        f'"{task.title}" takes about {estimated_minutes(task, cfg)} min. Small wins build momentum.',
        "Start this task",
        task_id=task.id,
    )


def _energy_match(candidates: Sequence[Task], energy: EnergyLevel, cfg: NextMoveConfig) -> Optional[Suggestion]:
    matched = [
        t for t in candidates
        if match_score(t.energy_level, energy, cfg) >= ENERGY_MATCH_TAG_MIN
    ]
    if not matched:
        return None
    # Short tasks first when drained, the meatiest first otherwise.
    if energy == EnergyLevel.LOW:
        matched.sort(key=lambda t: estimated_minutes(t, cfg))
    else:
        matched.sort(key=lambda t: -estimated_minutes(t, cfg))
    task = matched[0]
    return _suggest(
        SuggestionCategory.ENERGY_MATCH,
        f"energy-{task.id}",
        "Good fit for your energy",
        f'"{task.title}" matches your current {energy.value} energy.',
        "Work on this",
        task_id=task.id,
    )


def _break_down(
    candidates: Sequence[Task],
    stuck: Optional[StuckSignal],
    cfg: NextMoveConfig,
) -> Optional[Suggestion]:
    avoided = [
        t for t in candidates
        if t.skipped_count >= cfg.stuck_threshold or is_stuck_signal(t.id, stuck)
    ]
    if not avoided:
        return None
    task = max(avoided, key=lambda t: t.skipped_count)
    if task.skipped_count:
        text = f'"{task.title}" has been skipped {task.skipped_count} times. Want to break it into smaller steps?'
    else:
        text = f'"{task.title}" keeps getting skipped. Want to break it into smaller steps?'
    return _suggest(
        SuggestionCategory.BREAK_DOWN,
        f"breakdown-{task.id}",
        "Feeling stuck?",
        text,
        "Break it down",
        task_id=task.id,
    )


def _streak(state: UserState, cfg: NextMoveConfig) -> Optional[Suggestion]:
    if state.current_streak >= cfg.streak_min_days:
        return _suggest(
            SuggestionCategory.STREAK,
            f"streak-{state.current_streak}",
            "You're on a streak",
            f"{state.current_streak} days in a row. Keep it going with one more task.",
            "Keep going",
        )
    if state.tasks_completed_today > 0:
        return _suggest(
            SuggestionCategory.STREAK,
            f"momentum-{state.tasks_completed_today}",
            f"{state.tasks_completed_today} done today",
            "Good momentum. Another quick task keeps it rolling.",
            "Continue streak",
        )
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate(
    tasks: Sequence[Task],
    state: UserState,
    limit: Optional[int] = None,
    *,
    now: Optional[datetime] = None,
    stuck: Optional[StuckSignal] = None,
    config: Optional[NextMoveConfig] = None,
) -> tuple[Suggestion, ...]:
    """Build at most *limit* suggestions (default from config, normally 3).

    *tasks* should be in ranked order; earlier tasks win ties.
    """
    check_tasks(tasks)
    if not isinstance(state, UserState):
        raise ValidationError("generate() requires a UserState", got=type(state).__name__)
    cfg = config or DEFAULT_CONFIG
    if limit is None:
        limit = cfg.suggestion_limit
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise ValidationError(f"Suggestion limit must be a non-negative integer, got {limit!r}")
    now = now or wall_clock()
    energy = (
        resolve_energy(state.current_energy)
        if state.current_energy is not None
        else infer_energy(now.hour)
    )

    blocked = set(state.blocked_task_ids)
    candidates = [t for t in tasks if t.is_pending and t.id not in blocked]

    rules: list[Callable[[Sequence[Task]], Optional[Suggestion]]] = []
    wrap_up = _wrap_up(state, now, cfg)
    if wrap_up is None:
        if state.focused_task_id is not None:
            candidates = [t for t in candidates if t.id != state.focused_task_id]
        rules = [
            lambda pool: _time_sensitive(pool, now, cfg),
            lambda pool: _quick_win(pool, energy, cfg),
            lambda pool: _energy_match(pool, energy, cfg),
            lambda pool: _break_down(pool, stuck, cfg),
        ]

    suggestions: list[Suggestion] = [wrap_up] if wrap_up is not None else []
    used: set[TaskId] = set()
    for rule in rules:
        # One task is the subject of one suggestion at most.
        suggestion = rule([t for t in candidates if t.id not in used])
        if suggestion is not None:
            suggestions.append(suggestion)
            if suggestion.task_id is not None:
                used.add(suggestion.task_id)

    streak = _streak(state, cfg)
    if streak is not None:
        suggestions.append(streak)

    seen: set[SuggestionCategory] = set()
    unique = []
    for suggestion in suggestions:
        if suggestion.category not in seen:
            seen.add(suggestion.category)
            unique.append(suggestion)

    unique.sort(key=lambda s: -s.priority)
    result = tuple(unique[:limit])
    logger.debug(
        "Generated %d suggestion(s) from %d candidate task(s): %s",
        len(result),
        len(candidates),
        [s.category.value for s in result],
    )
    return result


_CONTEXT_SUGGESTIONS: dict[UiContext, tuple[SuggestionCategory, str, str, str]] = {
    UiContext.MORNING: (
        SuggestionCategory.PATTERN_INSIGHT,
        "Good morning!",
        "Start with your most important task while your energy is fresh.",
        "Plan my day",
    ),
    UiContext.AFTERNOON: (
        SuggestionCategory.ENERGY_MATCH,
        "Afternoon focus",
        "Try a quick task to keep momentum through the afternoon.",
        "Find quick wins",
    ),
    UiContext.EVENING: (
        SuggestionCategory.PATTERN_INSIGHT,
        "Wrapping up",
        "Pick tomorrow's top 3 tasks before you finish today.",
        "Plan tomorrow",
    ),
    UiContext.STUCK: (
        SuggestionCategory.BREAK_DOWN,
        "Feeling stuck?",
        "Let's break your current task into smaller steps.",
        "Break it down",
    ),
    UiContext.COMPLETING: (
        SuggestionCategory.STREAK,
        "{count} tasks done!",
        "Great momentum! Keep it going with another quick win.",
        "Continue streak",
    ),
}

_CONTEXT_PRIORITIES: dict[UiContext, int] = {
    UiContext.MORNING: 85,
    UiContext.AFTERNOON: 70,
    UiContext.EVENING: 75,
    UiContext.STUCK: 90,
    UiContext.COMPLETING: 80,
}


def resolve_ui_context(raw: Union[UiContext, str, None]) -> UiContext:
    """Unknown or missing contexts fall back to morning."""
    if isinstance(raw, UiContext):
        return raw
    try:
        return UiContext(str(raw).strip().lower())
    except ValueError:
        return UiContext.MORNING


def context_suggestion(
    ui_context: Union[UiContext, str, None],
    tasks_completed_today: int = 0,
) -> Suggestion:
    """Single canned suggestion for a UI moment. No ranking involved."""
    if tasks_completed_today < 0:
        raise ValidationError("tasks_completed_today cannot be negative")
    context = resolve_ui_context(ui_context)
    category, title, text, action_label = _CONTEXT_SUGGESTIONS[context]
    return Suggestion(
        id=f"context-{context.value}",
        text=text,
        action_label=action_label,
        category=category,
        priority=_CONTEXT_PRIORITIES[context],
        title=title.format(count=tasks_completed_today),
    )
