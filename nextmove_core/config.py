"""Centralized configuration with validation and defaults.

Every scoring weight and policy threshold lives here as a named constant.
Changing any of them changes observable ranking; treat edits as behaviour
changes. Adapters read their credentials through NextMoveConfig instead of
touching os.environ directly.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Union

import yaml

from .errors import ConfigError

# Ranker weights
ENERGY_WEIGHT = 3
URGENCY_WEIGHT = 2
PRIORITY_WEIGHT = 5
QUICK_WIN_BONUS = 15
QUICK_WIN_MAX_MINUTES = 10
DEFAULT_ESTIMATED_MINUTES = 25

# Energy model
ENERGY_MATCH_CEILING = 10
ENERGY_MATCH_EXPONENT = 2

# Urgency breakpoints (hours until deadline)
DUE_TODAY_HOURS = 24
DUE_SOON_HOURS = 72

# Policies
STUCK_THRESHOLD = 3
SUGGESTION_LIMIT = 3
FOCUS_BREAK_MINUTES = 45
STREAK_MIN_DAYS = 3
SECONDARY_COUNT = 2

# Matches 32 hex chars (no dashes) or 8-4-4-4-12 UUID format
_NOTION_ID_RE = re.compile(
    r"^[0-9a-f]{32}$|^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def _validate_notion_id(value: str, label: str) -> None:
    if not value:
        raise ConfigError(f"{label} is required (set the corresponding env var)")
    if not _NOTION_ID_RE.match(value):
        raise ConfigError(f"{label} is not a valid Notion ID: {value!r}")


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class NextMoveConfig:
    """Validated configuration for the NextMove engine and its adapters."""

    # Ranker
    energy_weight: int = ENERGY_WEIGHT
    urgency_weight: int = URGENCY_WEIGHT
    priority_weight: int = PRIORITY_WEIGHT
    quick_win_bonus: int = QUICK_WIN_BONUS
    quick_win_max_minutes: int = QUICK_WIN_MAX_MINUTES
    default_estimated_minutes: int = DEFAULT_ESTIMATED_MINUTES
    energy_match_exponent: int = ENERGY_MATCH_EXPONENT

    # Urgency
    due_today_hours: int = DUE_TODAY_HOURS
    due_soon_hours: int = DUE_SOON_HOURS

    # Stuck detection and suggestions
    stuck_threshold: int = STUCK_THRESHOLD
    suggestion_limit: int = SUGGESTION_LIMIT
    focus_break_minutes: int = FOCUS_BREAK_MINUTES
    streak_min_days: int = STREAK_MIN_DAYS
    secondary_count: int = SECONDARY_COUNT

    # Notion
    notion_token: str = ""
    tasks_database_id: str = ""
    skip_history_database_id: str = ""

    @classmethod
    def from_env(cls) -> NextMoveConfig:
        """Load config from NEXTMOVE_* environment variables over the defaults."""
        defaults = cls()
        token = os.environ.get("NOTION_TOKEN") or os.environ.get("NOTION_API_KEY", "")

        return cls(
            energy_weight=_env_int("NEXTMOVE_ENERGY_WEIGHT", defaults.energy_weight),
            urgency_weight=_env_int("NEXTMOVE_URGENCY_WEIGHT", defaults.urgency_weight),
            priority_weight=_env_int(
                "NEXTMOVE_PRIORITY_WEIGHT", defaults.priority_weight
            ),
            quick_win_bonus=_env_int(
                "NEXTMOVE_QUICK_WIN_BONUS", defaults.quick_win_bonus
            ),
            quick_win_max_minutes=_env_int(
                "NEXTMOVE_QUICK_WIN_MAX_MINUTES", defaults.quick_win_max_minutes
            ),
            default_estimated_minutes=_env_int(
                "NEXTMOVE_DEFAULT_ESTIMATED_MINUTES", defaults.default_estimated_minutes
            ),
            energy_match_exponent=_env_int(
                "NEXTMOVE_ENERGY_MATCH_EXPONENT", defaults.energy_match_exponent
            ),
            due_today_hours=_env_int(
                "NEXTMOVE_DUE_TODAY_HOURS", defaults.due_today_hours
            ),
            due_soon_hours=_env_int("NEXTMOVE_DUE_SOON_HOURS", defaults.due_soon_hours),
            stuck_threshold=_env_int(
                "NEXTMOVE_STUCK_THRESHOLD", defaults.stuck_threshold
            ),
            suggestion_limit=_env_int(
                "NEXTMOVE_SUGGESTION_LIMIT", defaults.suggestion_limit
            ),
            focus_break_minutes=_env_int(
                "NEXTMOVE_FOCUS_BREAK_MINUTES", defaults.focus_break_minutes
            ),
            streak_min_days=_env_int(
                "NEXTMOVE_STREAK_MIN_DAYS", defaults.streak_min_days
            ),
            secondary_count=_env_int(
                "NEXTMOVE_SECONDARY_COUNT", defaults.secondary_count
            ),
            notion_token=token,
            tasks_database_id=os.environ.get(
                "NEXTMOVE_TASKS_DB", defaults.tasks_database_id
            ),
            skip_history_database_id=os.environ.get(
                "NEXTMOVE_SKIP_HISTORY_DB", defaults.skip_history_database_id
            ),
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> NextMoveConfig:
        """Load config overrides from a YAML mapping.

        Keys are the field names of this class. An empty file yields defaults.
        """
        with open(path) as f:
            data: Any = yaml.safe_load(f)

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {str(path)!r} must contain a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}", path=str(path))

        return cls(**data)

    def validate(self) -> None:
        """Raise ConfigError if tuning values are out of range."""
        for name in ("energy_weight", "urgency_weight", "priority_weight", "quick_win_bonus"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")

        for name in (
            "quick_win_max_minutes",
            "default_estimated_minutes",
            "energy_match_exponent",
            "due_today_hours",
            "due_soon_hours",
            "stuck_threshold",
            "focus_break_minutes",
            "streak_min_days",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")

        if self.due_today_hours >= self.due_soon_hours:
            raise ConfigError("due_today_hours must be less than due_soon_hours")
        if not isinstance(self.suggestion_limit, int) or self.suggestion_limit < 0:
            raise ConfigError("suggestion_limit cannot be negative")
        if not isinstance(self.secondary_count, int) or self.secondary_count < 0:
            raise ConfigError("secondary_count cannot be negative")

    def validate_notion(self) -> None:
        """Raise ConfigError if the Notion adapters cannot be built from this config."""
        if not self.notion_token:
            raise ConfigError(
                "NOTION_TOKEN or NOTION_API_KEY environment variable is required"
            )
        _validate_notion_id(self.tasks_database_id, "NEXTMOVE_TASKS_DB")
        _validate_notion_id(self.skip_history_database_id, "NEXTMOVE_SKIP_HISTORY_DB")


DEFAULT_CONFIG = NextMoveConfig()
