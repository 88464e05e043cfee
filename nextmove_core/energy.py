"""Energy model: label scores, task/user energy fit, and hour-based inference."""

from __future__ import annotations

from typing import Optional, Union

from .aliases import resolve_energy
from .config import DEFAULT_CONFIG, ENERGY_MATCH_CEILING, NextMoveConfig
from .errors import ValidationError
from .models import EnergyLevel

ENERGY_SCORES: dict[EnergyLevel, int] = {
    EnergyLevel.PEAK: 10,
    EnergyLevel.MEDIUM: 6,
    EnergyLevel.LOW: 3,
}

PEAK_HOURS = ((9, 11), (14, 16))

EnergyLabel = Union[EnergyLevel, str, None]


def score_of(label: EnergyLabel) -> int:
    """Numeric capacity for an energy label. Unknown labels score as medium."""
    return ENERGY_SCORES[resolve_energy(label)]


def match_score(
    task_energy: EnergyLabel,
    user_energy: EnergyLabel,
    config: Optional[NextMoveConfig] = None,
) -> int:
    """How well a task's energy demand fits the user's energy, 0..100.

    100 only on an exact match; symmetric in its arguments and
    non-increasing as the score gap widens (max gap 7 → 9).
    """
    cfg = config or DEFAULT_CONFIG
    delta = abs(score_of(task_energy) - score_of(user_energy))
    return int(round((ENERGY_MATCH_CEILING - delta) ** cfg.energy_match_exponent))


def _in_ranges(hour: int, ranges: tuple[tuple[int, int], ...]) -> bool:
    return any(start <= hour <= end for start, end in ranges)


def infer_energy(hour: int) -> EnergyLevel:
    """Guess the user's energy from the hour of day.

    9-11 and 14-16 are peak; 8, 12-13 and 17-18 are medium; the rest is low.
    """
    if not isinstance(hour, int) or not 0 <= hour <= 23:
        raise ValidationError(f"hour must be within 0..23, got {hour!r}")
    if _in_ranges(hour, PEAK_HOURS):
        return EnergyLevel.PEAK
    if hour == 8 or 11 < hour < 14 or 16 < hour <= 18:
        return EnergyLevel.MEDIUM
    return EnergyLevel.LOW
