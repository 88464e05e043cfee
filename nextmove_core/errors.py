"""Exceptions raised by the NextMove core.

Each error logs itself once when raised. Bad task rows and out-of-range
inputs are routine while ranking a large list, so ValidationError logs at
DEBUG. Configuration errors stop the run and log at ERROR.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .telemetry import ErrorEvent

logger = logging.getLogger(__name__)


class NextMoveCoreError(Exception):
    """Base exception for nextmove_core."""

    log_level = logging.DEBUG

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context = context
        logger.log(self.log_level, "%s: %s %s", type(self).__name__, message, context or "")


class ValidationError(NextMoveCoreError):
    """Raised when a task row, skip record or argument breaks a data contract."""

    @property
    def task_id(self) -> Optional[str]:
        return self.context.get("task_id")


class DependencyError(NextMoveCoreError):
    """Raised when a Notion call fails. The failure is logged by telemetry."""

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        operation: Optional[str] = None,
        retryable: bool = False,
        **context: Any,
    ) -> None:
        self.source = source
        self.operation = operation
        self.retryable = retryable
        super().__init__(message, source=source, operation=operation, **context)

    @classmethod
    def from_event(cls, event: "ErrorEvent") -> "DependencyError":
        context = {"task_id": event.task_id} if event.task_id else {}
        return cls(
            f"{event.source.value}.{event.operation.value} failed: {event.message}",
            source=event.source.value,
            operation=event.operation.value,
            retryable=event.retryable,
            **context,
        )


class ConfigError(NextMoveCoreError):
    """Raised when tuning values or Notion settings are invalid or missing."""

    log_level = logging.ERROR
