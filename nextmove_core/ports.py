"""Interfaces for external collaborators (task store, skip history).

Adapters (Notion, an HTTP API, a test double) implement these protocols.
Services depend only on these abstractions; the scoring core depends on
none of them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from .models import SkipRecord, Task, TaskId


class TaskSource(ABC):
    """Read access to the current user's non-archived, non-deleted tasks."""

    @abstractmethod
    async def list_pending(self) -> Sequence[Task]:
        """Return tasks that are neither completed nor skipped."""


class SkipHistoryRepository(ABC):
    """Append-only store of skip records, keyed by task id."""

    @abstractmethod
    async def list_for_task(self, task_id: TaskId) -> Sequence[SkipRecord]:
        """Return every skip record for *task_id*, newest first."""

    @abstractmethod
    async def append(self, record: SkipRecord) -> SkipRecord:
        """Persist a new skip record. Existing records are never modified."""
