"""Time-of-day alignment bonus.

Rules are checked in a fixed order and a later matching rule replaces the
earlier bonus instead of adding to it. A peak-energy "call" at 10:00 scores
10, not 20. Reordering the rules changes rankings.
"""

from __future__ import annotations

from .aliases import resolve_energy
from .models import EnergyLevel, Task

MEETING_KEYWORDS = ("call", "meeting")
MORNING_WINDOW = (9, 11)
AFTERNOON_WINDOW = (14, 16)
EVENING_START = 17

MORNING_MEETING_BONUS = 10
AFTERNOON_MEETING_BONUS = 5
PEAK_MORNING_BONUS = 10
LOW_EVENING_BONUS = 8


def _within(hour: int, window: tuple[int, int]) -> bool:
    return window[0] <= hour <= window[1]


def is_meeting_like(title: str) -> bool:
    lowered = (title or "").lower()
    return any(keyword in lowered for keyword in MEETING_KEYWORDS)


def alignment_of(task: Task, current_hour: int) -> int:
    """Bonus for doing *task* at *current_hour*."""
    bonus = 0

    if is_meeting_like(task.title):
        if _within(current_hour, MORNING_WINDOW):
            bonus = MORNING_MEETING_BONUS
        elif _within(current_hour, AFTERNOON_WINDOW):
            bonus = AFTERNOON_MEETING_BONUS

    # Energy rules overwrite; they do not stack on the meeting bonus.
    if task.energy_level is not None:
        energy = resolve_energy(task.energy_level)
        if energy == EnergyLevel.PEAK and _within(current_hour, MORNING_WINDOW):
            bonus = PEAK_MORNING_BONUS
        if energy == EnergyLevel.LOW and current_hour >= EVENING_START:
            bonus = LOW_EVENING_BONUS

    return bonus
