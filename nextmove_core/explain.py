"""Explanations for ranked tasks.

``reason_for`` produces the short tags shown next to a ranked task. It reads
the same urgency, energy and quick-win signals the ranker scores, so a tag
never contradicts the position it explains.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .aliases import resolve_energy, resolve_priority
from .config import DEFAULT_CONFIG, NextMoveConfig
from .energy import infer_energy, match_score
from .models import EnergyLevel, Priority, ResolvedContext, SortContext, Task
from .ranking import quick_win_bonus, resolve_context
from .urgency import (
    DUE_SOON_URGENCY,
    DUE_TODAY_URGENCY,
    OVERDUE_BASE,
    hours_until,
    urgency_of,
    wall_clock,
)

ENERGY_MATCH_TAG_MIN = 80
ENERGY_MISMATCH_TAG_MAX = 30
MAX_TAGS = 2
FALLBACK_TAG = "Next in queue"

TIME_SENSITIVE_KEYWORDS = ("call", "respond", "reply", "urgent", "asap", "today", "submit", "send")


@dataclass(frozen=True)
class Reasoning:
    energy_match: int
    priority_reason: str
    context_note: str


def reason_for(
    task: Task,
    user_energy: Optional[EnergyLevel] = None,
    *,
    now: Optional[datetime] = None,
    config: Optional[NextMoveConfig] = None,
) -> tuple[str, ...]:
    """Up to two tags explaining why *task* ranks where it does.

    Checked in order: deadline, energy fit, quick win, high priority.
    Without *user_energy* the energy is inferred from the hour of *now*.
    """
    cfg = config or DEFAULT_CONFIG
    now = now or wall_clock()
    energy = resolve_energy(user_energy) if user_energy is not None else infer_energy(now.hour)
    tags: list[str] = []

    urgency = urgency_of(task.deadline, now, cfg)
    if urgency >= OVERDUE_BASE:
        tags.append("Overdue")
    elif urgency >= DUE_TODAY_URGENCY:
        tags.append("Due today")
    elif urgency >= DUE_SOON_URGENCY:
        tags.append("Due soon")

    match = match_score(task.energy_level, energy, cfg)
    if match >= ENERGY_MATCH_TAG_MIN:
        tags.append("Energy match")
    elif match <= ENERGY_MISMATCH_TAG_MAX:
        tags.append("Energy mismatch")

    if quick_win_bonus(task, energy, cfg) > 0:
        tags.append("Quick win")

    if resolve_priority(task.priority) == Priority.HIGH:
        tags.append("High priority")

    return tuple(tags[:MAX_TAGS]) if tags else (FALLBACK_TAG,)


def build_reasoning(
    task: Task,
    context: Optional[SortContext] = None,
    *,
    now: Optional[datetime] = None,
    config: Optional[NextMoveConfig] = None,
) -> Reasoning:
    """Full-sentence reasoning for the task detail view."""
    cfg = config or DEFAULT_CONFIG
    now = now or wall_clock()
    resolved = resolve_context(context, now)
    return Reasoning(
        energy_match=match_score(task.energy_level, resolved.user_energy, cfg),
        priority_reason=_priority_reason(task, now, cfg),
        context_note=_context_note(task, resolved),
    )


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _priority_reason(task: Task, now: datetime, cfg: NextMoveConfig) -> str:
    reasons: list[str] = []

    if task.deadline is not None:
        hours = hours_until(task.deadline, now)
        if hours < 0:
            reasons.append(f"overdue by {_plural(math.ceil(-hours / 24), 'day')}")
        elif hours < cfg.due_today_hours:
            reasons.append("due today")
        elif hours < cfg.due_soon_hours:
            reasons.append(f"due in {_plural(math.ceil(hours / 24), 'day')}")

    if resolve_priority(task.priority) == Priority.HIGH:
        reasons.append("marked as high priority")

    if task.estimated_minutes is not None and task.estimated_minutes <= cfg.quick_win_max_minutes:
        reasons.append("quick win opportunity")

    title = task.title.lower()
    if any(keyword in title for keyword in TIME_SENSITIVE_KEYWORDS):
        reasons.append("appears time-sensitive")

    if not reasons:
        return "Next in your prioritized queue based on context and timing."
    combined = ", ".join(reasons)
    return combined[0].upper() + combined[1:] + "."


def _context_note(task: Task, context: ResolvedContext) -> str:
    hour = context.current_hour
    title = task.title.lower()
    morning = 6 <= hour < 12
    afternoon = 12 <= hour < 17
    evening = 17 <= hour < 21
    workday = not context.is_weekend

    if "call" in title or "phone" in title:
        if morning and workday:
            return "Morning calls tend to connect. Good timing."
        if afternoon and workday:
            return "Afternoon is typically good for business calls."
        if evening or context.is_weekend:
            return "Consider whether this call can wait for business hours."

    if any(word in title for word in ("email", "respond", "reply")):
        if morning:
            return "Clearing email in the morning frees space for deep work."
        return "Batch email tasks to protect focus time."

    if any(word in title for word in ("schedule", "appointment", "book")):
        return "Admin tasks fit best in the gaps between focus blocks."

    energy = resolve_energy(task.energy_level)
    if task.energy_level is not None and energy == EnergyLevel.PEAK and 9 <= hour <= 11:
        return "Your peak energy window lines up with this task's demands."
    if task.energy_level is not None and energy == EnergyLevel.LOW and (evening or hour < 9):
        return "Low-energy tasks fit well in wind-down or warm-up periods."

    minutes = task.estimated_minutes
    if minutes is not None and minutes <= 5:
        return "Two-minute rule: if it's this quick, do it now."
    if minutes is not None and minutes >= 45:
        if morning and workday:
            return "Morning focus blocks suit deep work like this."
        return "Block uninterrupted time for this longer task."

    if morning:
        return "Morning clarity makes this a good time to start."
    if afternoon:
        return "Afternoon execution window. Carry the morning's momentum."
    if evening:
        return "Evening wind-down. Decide if this needs tonight or can wait."
    return "Positioned from your task queue and current context."
