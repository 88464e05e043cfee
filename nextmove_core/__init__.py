"""Core decision logic for NextMove.

Ranks a user's pending tasks into a single next move, explains the pick,
detects tasks the user keeps avoiding, and proposes a few suggestions.
Adapters (Notion, CLI, APIs) should call into this package instead of
implementing scoring directly.
"""

from .aliases import (
    ENERGY_ALIASES,
    PRIORITY_ALIASES,
    parse_energy,
    parse_priority,
    resolve_energy,
    resolve_priority,
)
from .alignment import alignment_of
from .config import DEFAULT_CONFIG, NextMoveConfig
from .energy import infer_energy, match_score
from .errors import ConfigError, DependencyError, NextMoveCoreError, ValidationError
from .explain import Reasoning, build_reasoning, reason_for
from .models import (
    EnergyLevel,
    Priority,
    ResolvedContext,
    SkipRecord,
    SortContext,
    StuckTask,
    Suggestion,
    SuggestionCategory,
    Task,
    TaskId,
    UiContext,
    UserState,
)
from .ports import SkipHistoryRepository, TaskSource
from .ranking import (
    HomeSurface,
    ScoredTask,
    TaskScore,
    build_home_surface,
    rank,
    resolve_context,
    score_task,
)
from .records import (
    skip_record_from_dict,
    task_from_dict,
    tasks_from_rows,
    user_state_from_dict,
)
from .services import Briefing, NextMoveOrchestrator, SkipTracker
from .stuck import StuckDetector, StuckState, StuckStatus, detect_stuck
from .suggestions import context_suggestion, generate, resolve_ui_context
from .urgency import urgency_of

__all__ = [
    "Briefing",
    "ConfigError",
    "DEFAULT_CONFIG",
    "DependencyError",
    "ENERGY_ALIASES",
    "EnergyLevel",
    "HomeSurface",
    "NextMoveConfig",
    "NextMoveCoreError",
    "NextMoveOrchestrator",
    "PRIORITY_ALIASES",
    "Priority",
    "Reasoning",
    "ResolvedContext",
    "ScoredTask",
    "SkipHistoryRepository",
    "SkipRecord",
    "SkipTracker",
    "SortContext",
    "StuckDetector",
    "StuckState",
    "StuckStatus",
    "StuckTask",
    "Suggestion",
    "SuggestionCategory",
    "Task",
    "TaskId",
    "TaskScore",
    "TaskSource",
    "UiContext",
    "UserState",
    "ValidationError",
    "alignment_of",
    "build_home_surface",
    "build_reasoning",
    "context_suggestion",
    "detect_stuck",
    "generate",
    "infer_energy",
    "match_score",
    "parse_energy",
    "parse_priority",
    "rank",
    "reason_for",
    "resolve_context",
    "resolve_energy",
    "resolve_priority",
    "resolve_ui_context",
    "score_task",
    "skip_record_from_dict",
    "task_from_dict",
    "tasks_from_rows",
    "urgency_of",
    "user_state_from_dict",
]
