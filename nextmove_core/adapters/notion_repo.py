"""Notion-backed task source and skip history for NextMove."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from notion_client import Client

from ..aliases import parse_energy, parse_priority
from ..config import NextMoveConfig
from ..errors import DependencyError
from ..models import SkipRecord, Task, TaskId
from ..ports import SkipHistoryRepository, TaskSource
from ..records import parse_timestamp
from ..telemetry import Collaborator, Operation, capture_error


class NotionTaskSource(TaskSource):
    """Pending tasks read from the NextMove Notion tasks database."""

    source_name = Collaborator.NOTION_TASKS

    def __init__(self, client: Client, database_id: str) -> None:
        self._client = client
        self._database_id = database_id

    @classmethod
    def from_env(cls, database_id: Optional[str] = None) -> "NotionTaskSource":
        config = NextMoveConfig.from_env()
        config.validate_notion()
        return cls(Client(auth=config.notion_token), database_id or config.tasks_database_id)

    async def list_pending(self) -> Sequence[Task]:
        filter_obj = {
            "and": [
                {"property": "Completed", "checkbox": {"equals": False}},
                {"property": "Skipped", "checkbox": {"equals": False}},
            ]
        }
        pages = await _query_all(
            self._client,
            self._database_id,
            source=self.source_name,
            operation=Operation.LIST_PENDING,
            filter=filter_obj,
        )
        return [_task_from_page(page) for page in pages]


class NotionSkipHistoryRepository(SkipHistoryRepository):
    """Append-only skip log stored as one Notion page per skip."""

    source_name = Collaborator.NOTION_SKIP_HISTORY

    def __init__(self, client: Client, database_id: str) -> None:
        self._client = client
        self._database_id = database_id

    @classmethod
    def from_env(cls, database_id: Optional[str] = None) -> "NotionSkipHistoryRepository":
        config = NextMoveConfig.from_env()
        config.validate_notion()
        return cls(
            Client(auth=config.notion_token),
            database_id or config.skip_history_database_id,
        )

    async def list_for_task(self, task_id: TaskId) -> Sequence[SkipRecord]:
        pages = await _query_all(
            self._client,
            self._database_id,
            source=self.source_name,
            operation=Operation.LIST_FOR_TASK,
            task_id=task_id.value,
            filter={"property": "Task", "rich_text": {"equals": task_id.value}},
            sorts=[{"property": "Skipped At", "direction": "descending"}],
        )
        return [_skip_record_from_page(page, task_id) for page in pages]

    async def append(self, record: SkipRecord) -> SkipRecord:
        properties = _properties_from_skip(record)

        def _run_create() -> dict:
            return self._client.pages.create(
                parent={"database_id": self._database_id},
                properties=properties,
            )

        await _call(
            _run_create,
            source=self.source_name,
            operation=Operation.APPEND,
            task_id=record.task_id.value,
        )
        return record


async def _call(
    fn: Callable[[], dict],
    *,
    source: Collaborator,
    operation: Operation,
    task_id: Optional[str] = None,
) -> dict:
    try:
        return await asyncio.to_thread(fn)
    except Exception as exc:
        event = capture_error(exc, source=source, operation=operation, task_id=task_id)
        raise DependencyError.from_event(event) from exc


async def _query_all(
    client: Client,
    database_id: str,
    *,
    source: Collaborator,
    operation: Operation,
    task_id: Optional[str] = None,
    **query: Any,
) -> list[dict]:
    """Run a database query and follow pagination cursors to the end."""
    pages: list[dict] = []
    cursor: Optional[str] = None
    while True:
        args = {"database_id": database_id, **query}
        if cursor:
            args["start_cursor"] = cursor

        def _run_query(args: dict = args) -> dict:
            return client.databases.query(**args)

        response = await _call(_run_query, source=source, operation=operation, task_id=task_id)
        pages.extend(response.get("results", []))
        cursor = response.get("next_cursor")
        if not response.get("has_more") or not cursor:
            return pages


def _task_from_page(page: dict) -> Task:
    props = page.get("properties", {})
    return Task(
        id=TaskId(page.get("id", "")),
        title=_extract_title(props),
        energy_level=parse_energy(_extract_select(props, "Energy") or None),
        priority=parse_priority(_extract_select(props, "Priority") or None),
        estimated_minutes=_extract_number(props, "Estimate") or None,
        deadline=_extract_date(props, "Deadline"),
        expires_at=_extract_date(props, "Expires"),
        completed=_extract_checkbox(props, "Completed"),
        skipped=_extract_checkbox(props, "Skipped"),
        skipped_count=_extract_number(props, "Skipped Count") or 0,
        created_at=parse_timestamp(page.get("created_time"), "created_time"),
    )


def _skip_record_from_page(page: dict, task_id: TaskId) -> SkipRecord:
    props = page.get("properties", {})
    skipped_at = _extract_date(props, "Skipped At") or parse_timestamp(
        page.get("created_time"), "created_time"
    )
    return SkipRecord(
        task_id=task_id,
        skipped_at=skipped_at,
        reason=_extract_text(props, "Reason") or None,
    )


def _properties_from_skip(record: SkipRecord) -> dict:
    properties = {
        "Name": {"title": [{"text": {"content": f"Skip {record.task_id.value}"}}]},
        "Task": {"rich_text": [{"text": {"content": record.task_id.value}}]},
        "Skipped At": {"date": {"start": record.skipped_at.isoformat()}},
    }
    if record.reason:
        properties["Reason"] = {"rich_text": [{"text": {"content": record.reason[:2000]}}]}
    return properties


def _extract_title(props: dict) -> str:
    for value in props.values():
        if value.get("type") == "title":
            return "".join(t.get("plain_text", "") for t in value.get("title", []))
    return "Untitled"


def _extract_select(props: dict, prop_name: str) -> str:
    select = props.get(prop_name, {}).get("select")
    return select.get("name", "") if select else ""


def _extract_number(props: dict, prop_name: str) -> Optional[int]:
    value = props.get(prop_name, {}).get("number")
    return int(value) if value is not None else None


def _extract_checkbox(props: dict, prop_name: str) -> bool:
    return bool(props.get(prop_name, {}).get("checkbox", False))


def _extract_text(props: dict, prop_name: str) -> str:
    rich_text = props.get(prop_name, {}).get("rich_text", [])
    return "".join(t.get("plain_text", "") for t in rich_text)


def _extract_date(props: dict, prop_name: str) -> Optional[datetime]:
    date = props.get(prop_name, {}).get("date")
    if not date:
        return None
    return parse_timestamp(date.get("start"), prop_name)
