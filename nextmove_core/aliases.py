"""Energy and priority label resolution.

Maps user-facing and legacy labels to canonical enum values. Unlike status
lookups elsewhere, these never raise: anything unrecognised is medium.
"""

from __future__ import annotations

from typing import Optional, Union

from .models import EnergyLevel, Priority

ENERGY_ALIASES: dict[str, EnergyLevel] = {
    "high": EnergyLevel.PEAK,
    "hi": EnergyLevel.PEAK,
    "green": EnergyLevel.PEAK,
    "mid": EnergyLevel.MEDIUM,
    "med": EnergyLevel.MEDIUM,
    "normal": EnergyLevel.MEDIUM,
    "yellow": EnergyLevel.MEDIUM,
    "lo": EnergyLevel.LOW,
    "red": EnergyLevel.LOW,
    "tired": EnergyLevel.LOW,
}

PRIORITY_ALIASES: dict[str, Priority] = {
    "urgent": Priority.HIGH,
    "hi": Priority.HIGH,
    "p1": Priority.HIGH,
    "mid": Priority.MEDIUM,
    "med": Priority.MEDIUM,
    "normal": Priority.MEDIUM,
    "p2": Priority.MEDIUM,
    "lo": Priority.LOW,
    "p3": Priority.LOW,
}


def resolve_energy(raw: Union[EnergyLevel, str, None]) -> EnergyLevel:
    """Resolve a raw energy label; unknown or missing labels are medium."""
    if isinstance(raw, EnergyLevel):
        return raw
    if not raw or not isinstance(raw, str):
        return EnergyLevel.MEDIUM
    key = raw.strip().lower()
    try:
        return EnergyLevel(key)
    except ValueError:
        pass
    return ENERGY_ALIASES.get(key, EnergyLevel.MEDIUM)


def resolve_priority(raw: Union[Priority, str, None]) -> Priority:
    """Resolve a raw priority label; unknown or missing labels are medium."""
    if isinstance(raw, Priority):
        return raw
    if not raw or not isinstance(raw, str):
        return Priority.MEDIUM
    key = raw.strip().lower()
    try:
        return Priority(key)
    except ValueError:
        pass
    return PRIORITY_ALIASES.get(key, Priority.MEDIUM)


def parse_energy(raw: Optional[str]) -> Optional[EnergyLevel]:
    """Like resolve_energy, but keeps an absent label absent."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    return resolve_energy(raw)


def parse_priority(raw: Optional[str]) -> Optional[Priority]:
    """Like resolve_priority, but keeps an absent label absent."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    return resolve_priority(raw)
