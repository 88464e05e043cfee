#!/usr/bin/env python3
"""
Print the current next move, its reasons, and suggestions.

Reads tasks either from a YAML snapshot or live from the Notion databases
named by NEXTMOVE_TASKS_DB / NEXTMOVE_SKIP_HISTORY_DB.

Usage:
    python next_move.py snapshot.yaml                  # Rank a local snapshot
    python next_move.py snapshot.yaml --energy low     # Override current energy
    python next_move.py --notion                       # Read live from Notion
    python next_move.py snapshot.yaml --config tuning.yaml --limit 2

Snapshot layout:
    tasks:         list of task rows (id, title, energy_level, priority, ...)
    skip_history:  mapping of task id -> list of {skipped_at, reason}
    user_state:    optional user state mapping
    context:       optional {user_energy, current_hour, is_weekend}
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

import yaml

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from nextmove_core import (  # noqa: E402
    NextMoveConfig,
    NextMoveCoreError,
    NextMoveOrchestrator,
    SkipHistoryRepository,
    SortContext,
    TaskId,
    TaskSource,
    parse_energy,
    skip_record_from_dict,
    tasks_from_rows,
    user_state_from_dict,
)

logger = logging.getLogger("next_move")


class SnapshotTaskSource(TaskSource):
    def __init__(self, tasks):
        self._tasks = [t for t in tasks if t.is_pending]

    async def list_pending(self):
        return list(self._tasks)


class SnapshotSkipHistory(SkipHistoryRepository):
    def __init__(self, records):
        self._records = records

    async def list_for_task(self, task_id):
        return sorted(
            self._records.get(task_id, []), key=lambda r: r.skipped_at, reverse=True
        )

    async def append(self, record):
        self._records.setdefault(record.task_id, []).append(record)
        return record


def load_snapshot(path):
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise SystemExit(f"Snapshot {path} must contain a mapping")

    tasks = tasks_from_rows(data.get("tasks") or [])
    records = {}
    for raw_id, rows in (data.get("skip_history") or {}).items():
        task_id = TaskId(str(raw_id))
        records[task_id] = [skip_record_from_dict(row, task_id) for row in rows or []]

    context = data.get("context") or {}
    sort_context = SortContext(
        user_energy=parse_energy(context.get("user_energy")),
        current_hour=context.get("current_hour"),
        is_weekend=context.get("is_weekend"),
    )
    return tasks, records, user_state_from_dict(data.get("user_state")), sort_context


def build_orchestrator(args, config):
    if args.notion:
        from nextmove_core.adapters import NotionSkipHistoryRepository, NotionTaskSource

        return (
            NextMoveOrchestrator(
                NotionTaskSource.from_env(config.tasks_database_id),
                NotionSkipHistoryRepository.from_env(config.skip_history_database_id),
                config,
            ),
            user_state_from_dict(None),
            SortContext(),
        )

    tasks, records, state, context = load_snapshot(args.snapshot)
    return (
        NextMoveOrchestrator(SnapshotTaskSource(tasks), SnapshotSkipHistory(records), config),
        state,
        context,
    )


def print_briefing(briefing):
    surface = briefing.surface
    if surface.primary is None:
        print("Nothing pending. Enjoy the break.")
        return

    ctx = surface.context
    print(f"Energy: {ctx.user_energy.value}  Hour: {ctx.current_hour:02d}:00\n")

    print("NEXT MOVE")
    _print_task(surface.primary, briefing)
    if surface.secondary:
        print("\nALSO CONSIDER")
        for entry in surface.secondary:
            _print_task(entry, briefing)

    for label, items in (
        ("EXPIRING TODAY", surface.expiring_today),
        ("EXPIRING SOON", surface.expiring_soon),
        ("ALREADY EXPIRED", surface.already_expired),
    ):
        if items:
            print(f"\n{label}")
            for task in items:
                print(f"  - {task.title}")

    if briefing.stuck:
        print("\nSTUCK")
        for status in briefing.stuck.values():
            reason = f" ({status.last_skip_reason})" if status.last_skip_reason else ""
            print(f"  - {status.task_id} skipped {status.skip_count}x{reason}")

    if briefing.suggestions:
        print("\nSUGGESTIONS")
        for suggestion in briefing.suggestions:
            print(f"  [{suggestion.category.value}] {suggestion.title}: {suggestion.text}")


def _print_task(entry, briefing):
    tags = ", ".join(briefing.reasons.get(entry.task.id, ()))
    stuck = " [stuck]" if entry.is_stuck else ""
    print(f"  {entry.rank + 1}. {entry.task.title}{stuck}  ({entry.score.total:.1f})  {tags}")


def main():
    parser = argparse.ArgumentParser(description="Show the next move for a task list")
    parser.add_argument("snapshot", nargs="?", help="YAML snapshot of tasks and skip history")
    parser.add_argument("--notion", action="store_true", help="Read tasks live from Notion")
    parser.add_argument("--config", help="YAML file with tuning overrides")
    parser.add_argument("--energy", help="Override the current energy (peak/medium/low)")
    parser.add_argument("--limit", type=int, help="Maximum number of suggestions")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not args.notion and not args.snapshot:
        parser.error("provide a snapshot file or --notion")

    try:
        config = NextMoveConfig.from_yaml(args.config) if args.config else NextMoveConfig.from_env()
        config.validate()
        orchestrator, state, context = build_orchestrator(args, config)
        if args.energy:
            energy = parse_energy(args.energy)
            context = replace(context, user_energy=energy)
            state = replace(state, current_energy=energy)
        briefing = asyncio.run(orchestrator.briefing(state, context, limit=args.limit))
    except NextMoveCoreError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    print_briefing(briefing)


if __name__ == "__main__":
    main()
