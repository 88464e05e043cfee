"""Deadline urgency model.

A step function for upcoming deadlines and a capped ramp for overdue ones.
The jump from 40 (due today) to 50+ (overdue) keeps any overdue task ahead
of every task that is merely due today.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from .config import DEFAULT_CONFIG, NextMoveConfig

OVERDUE_BASE = 50
OVERDUE_POINTS_PER_DAY = 10
OVERDUE_MAX_EXTRA = 50
DUE_TODAY_URGENCY = 40
DUE_SOON_URGENCY = 20


def as_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def wall_clock() -> datetime:
    """Aware local time; hour-of-day defaults are read from this."""
    return datetime.now().astimezone()


def hours_until(deadline: datetime, now: datetime) -> float:
    """Signed hours from *now* to *deadline*; negative when overdue."""
    return (as_aware(deadline) - as_aware(now)).total_seconds() / 3600


def urgency_of(
    deadline: Optional[datetime],
    now: Optional[datetime] = None,
    config: Optional[NextMoveConfig] = None,
) -> float:
    """Urgency contribution of a deadline, 0..100. No deadline scores 0."""
    if deadline is None:
        return 0
    cfg = config or DEFAULT_CONFIG
    hours = hours_until(deadline, now or utcnow())

    if hours < 0:
        overdue_days = abs(hours) / 24
        return OVERDUE_BASE + min(OVERDUE_MAX_EXTRA, overdue_days * OVERDUE_POINTS_PER_DAY)
    if hours < cfg.due_today_hours:
        return DUE_TODAY_URGENCY
    if hours < cfg.due_soon_hours:
        return DUE_SOON_URGENCY
    return 0
