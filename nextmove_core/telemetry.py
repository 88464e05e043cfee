"""Failure reporting for the Notion collaborators.

The adapters report every failed Notion call here before raising
DependencyError. Timeouts and rate-limit or server responses are marked
retryable and logged at WARNING. Anything else, such as a bad token or a
missing database, is logged at ERROR. Host applications can
register extra handlers, e.g. to forward events to Sentry.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from notion_client.errors import RequestTimeoutError

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


class Collaborator(str, Enum):
    """Notion databases the core talks to."""

    NOTION_TASKS = "notion_tasks"
    NOTION_SKIP_HISTORY = "notion_skip_history"


class Operation(str, Enum):
    LIST_PENDING = "list_pending"
    LIST_FOR_TASK = "list_for_task"
    APPEND = "append"


ErrorHandler = Callable[["ErrorEvent"], None]

_handlers: list[ErrorHandler] = []


@dataclass(frozen=True)
class ErrorEvent:
    """A failed Notion call, optionally tied to one task."""

    error: Exception
    source: Collaborator
    operation: Operation
    task_id: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    @property
    def error_type(self) -> str:
        return type(self.error).__name__

    @property
    def message(self) -> str:
        return str(self.error)

    @property
    def status(self) -> Optional[int]:
        """HTTP status of the Notion response, if there was one."""
        return getattr(self.error, "status", None)

    @property
    def retryable(self) -> bool:
        if isinstance(self.error, RequestTimeoutError):
            return True
        return self.status in RETRYABLE_STATUSES

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.error_type,
            "message": self.message,
            "source": self.source.value,
            "operation": self.operation.value,
            "task_id": self.task_id,
            "status": self.status,
            "retryable": self.retryable,
            "timestamp": self.timestamp,
        }


def register_handler(handler: ErrorHandler) -> None:
    _handlers.append(handler)


def clear_handlers() -> None:
    _handlers.clear()


def capture_error(
    error: Exception,
    *,
    source: Collaborator,
    operation: Operation,
    task_id: Optional[str] = None,
) -> ErrorEvent:
    """Log a failed Notion call and hand it to every registered handler."""
    event = ErrorEvent(
        error=error,
        source=Collaborator(source),
        operation=Operation(operation),
        task_id=task_id,
    )

    logger.log(
        logging.WARNING if event.retryable else logging.ERROR,
        "%s.%s failed%s: %s: %s",
        event.source.value,
        event.operation.value,
        f" for task {task_id}" if task_id else "",
        event.error_type,
        event.message,
        extra={"telemetry": event.to_dict()},
    )

    for handler in _handlers:
        try:
            handler(event)
        except Exception:
            logger.debug("Telemetry handler failed", exc_info=True)

    return event
