"""Adapter implementations for nextmove_core ports."""

from .notion_repo import NotionSkipHistoryRepository, NotionTaskSource

__all__ = ["NotionSkipHistoryRepository", "NotionTaskSource"]
