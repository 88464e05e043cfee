"""Tests for nextmove_core.ranking: scoring, ordering, and the home surface."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from nextmove_core import (
    EnergyLevel,
    Priority,
    SortContext,
    Task,
    TaskId,
    ValidationError,
    build_home_surface,
    rank,
    resolve_context,
)
from nextmove_core.config import NextMoveConfig
from nextmove_core.stuck import StuckState, StuckStatus

NOW = datetime(2026, 3, 10, 10, 0, tzinfo=timezone.utc)  # a Tuesday
MEDIUM_AT_TEN = SortContext(user_energy=EnergyLevel.MEDIUM, current_hour=10, is_weekend=False)


def _task(task_id, title=None, **kwargs):
    return Task(id=TaskId(task_id), title=title or task_id, **kwargs)


def _sample_tasks():
    a = _task(
        "A",
        "Finish report",
        priority=Priority.HIGH,
        deadline=NOW - timedelta(hours=2),
        energy_level=EnergyLevel.MEDIUM,
        estimated_minutes=30,
    )
    b = _task(
        "B",
        "Water plants",
        priority=Priority.LOW,
        energy_level=EnergyLevel.LOW,
        estimated_minutes=5,
    )
    c = _task(
        "C",
        "Draft proposal",
        priority=Priority.MEDIUM,
        deadline=NOW + timedelta(hours=96),
        energy_level=EnergyLevel.PEAK,
        estimated_minutes=45,
    )
    return a, b, c


def _ids(ranked):
    return [s.task.id.value for s in ranked]


class TestRank:
    def test_mixed_tasks_order(self):
        a, b, c = _sample_tasks()
        ranked = rank([c, b, a], MEDIUM_AT_TEN, now=NOW)
        assert _ids(ranked) == ["A", "B", "C"]
        assert [s.rank for s in ranked] == [0, 1, 2]

    def test_score_breakdown(self):
        a, b, c = _sample_tasks()
        by_id = {s.task.id.value: s.score for s in rank([a, b, c], MEDIUM_AT_TEN, now=NOW)}

        assert by_id["A"].energy_match == 100
        assert by_id["A"].urgency == pytest.approx(50 + 2 / 24 * 10)
        assert by_id["A"].total == pytest.approx(300 + 2 * (50 + 2 / 24 * 10) + 50)

        assert by_id["B"].quick_win == 15
        assert by_id["B"].total == pytest.approx(147 + 15 + 15)

        assert by_id["C"].time_alignment == 10
        assert by_id["C"].total == pytest.approx(108 + 30 + 10)

    def test_quick_win_withheld_at_peak_energy(self):
        _, b, _ = _sample_tasks()
        peak = SortContext(user_energy=EnergyLevel.PEAK, current_hour=10)
        low = SortContext(user_energy=EnergyLevel.LOW, current_hour=10)
        assert rank([b], peak, now=NOW)[0].score.quick_win == 0
        assert rank([b], low, now=NOW)[0].score.quick_win == 15

    def test_missing_estimate_is_not_a_quick_win(self):
        task = _task("X", estimated_minutes=None)
        assert rank([task], MEDIUM_AT_TEN, now=NOW)[0].score.quick_win == 0

    def test_unlabelled_task_defaults_to_medium(self):
        task = _task("X")
        score = rank([task], MEDIUM_AT_TEN, now=NOW)[0].score
        assert score.energy_match == 100
        assert score.priority == 6

    def test_ties_keep_input_order(self):
        tasks = [_task(f"t{i}", "Same") for i in range(5)]
        ranked = rank(tasks, MEDIUM_AT_TEN, now=NOW)
        assert _ids(ranked) == ["t0", "t1", "t2", "t3", "t4"]

    def test_deterministic(self):
        tasks = list(_sample_tasks())
        first = rank(tasks, MEDIUM_AT_TEN, now=NOW)
        second = rank(tasks, MEDIUM_AT_TEN, now=NOW)
        assert first == second

    def test_completed_and_skipped_excluded(self):
        a, b, c = _sample_tasks()
        done = _task("D", completed=True, priority=Priority.HIGH)
        skipped = _task("S", skipped=True, priority=Priority.HIGH)
        ranked = rank([done, a, skipped, b, c], MEDIUM_AT_TEN, now=NOW)
        assert _ids(ranked) == ["A", "B", "C"]

    def test_empty_input(self):
        assert rank([], MEDIUM_AT_TEN, now=NOW) == ()

    def test_rejects_non_list(self):
        a, _, _ = _sample_tasks()
        with pytest.raises(ValidationError):
            rank(iter([a]), MEDIUM_AT_TEN, now=NOW)
        with pytest.raises(ValidationError):
            rank([a, "not a task"], MEDIUM_AT_TEN, now=NOW)

    def test_stuck_flag_does_not_change_score(self):
        a, b, c = _sample_tasks()
        plain = rank([a, b, c], MEDIUM_AT_TEN, now=NOW)
        stuck = {b.id: StuckStatus(task_id=b.id, state=StuckState.STUCK, skip_count=3)}
        flagged = rank([a, b, c], MEDIUM_AT_TEN, now=NOW, stuck=stuck)

        assert _ids(flagged) == _ids(plain)
        assert [s.score for s in flagged] == [s.score for s in plain]
        assert [s.is_stuck for s in flagged] == [False, True, False]

    def test_weights_from_config(self):
        a, b, c = _sample_tasks()
        cfg = NextMoveConfig(priority_weight=0, urgency_weight=0, energy_weight=0)
        ranked = rank([a, b, c], MEDIUM_AT_TEN, now=NOW, config=cfg)
        assert _ids(ranked) == ["B", "C", "A"]


class TestResolveContext:
    def test_fills_from_now(self):
        saturday = datetime(2026, 3, 14, 10, 0, tzinfo=timezone.utc)
        resolved = resolve_context(SortContext(), saturday)
        assert resolved.current_hour == 10
        assert resolved.is_weekend is True
        assert resolved.user_energy == EnergyLevel.PEAK

    def test_energy_inferred_from_explicit_hour(self):
        resolved = resolve_context(SortContext(current_hour=20), NOW)
        assert resolved.user_energy == EnergyLevel.LOW
        assert resolved.is_weekend is False

    def test_explicit_values_win(self):
        ctx = SortContext(user_energy=EnergyLevel.LOW, current_hour=9, is_weekend=True)
        resolved = resolve_context(ctx, NOW)
        assert (resolved.user_energy, resolved.current_hour, resolved.is_weekend) == (
            EnergyLevel.LOW,
            9,
            True,
        )

    def test_invalid_hour_rejected(self):
        with pytest.raises(ValidationError):
            SortContext(current_hour=24)


class TestHomeSurface:
    def _filler(self, task_id, expires_at):
        return _task(
            task_id,
            priority=Priority.LOW,
            energy_level=EnergyLevel.PEAK,
            estimated_minutes=60,
            expires_at=expires_at,
        )

    def test_primary_and_secondary(self):
        a, b, c = _sample_tasks()
        extra = self._filler("D", None)
        surface = build_home_surface([extra, c, b, a], MEDIUM_AT_TEN, now=NOW)

        assert surface.primary.task.id.value == "A"
        assert _ids(surface.secondary) == ["B", "C"]
        assert _ids(surface.ranked) == ["A", "B", "C", "D"]
        assert surface.surfaced_ids == {TaskId("A"), TaskId("B"), TaskId("C")}

    def test_expiring_lists(self):
        a, b, c = _sample_tasks()
        a = replace(a, expires_at=NOW + timedelta(hours=3))
        today = self._filler("today", NOW + timedelta(hours=8))
        soon = self._filler("soon", NOW + timedelta(days=2))
        gone = self._filler("gone", NOW - timedelta(days=1))

        surface = build_home_surface([a, b, c, today, soon, gone], MEDIUM_AT_TEN, now=NOW)

        assert [t.id.value for t in surface.expiring_today] == ["today"]
        assert [t.id.value for t in surface.expiring_soon] == ["soon"]
        assert [t.id.value for t in surface.already_expired] == ["gone"]

    def test_secondary_count_from_config(self):
        tasks = list(_sample_tasks())
        surface = build_home_surface(
            tasks, MEDIUM_AT_TEN, now=NOW, config=NextMoveConfig(secondary_count=1)
        )
        assert _ids(surface.secondary) == ["B"]

    def test_empty(self):
        surface = build_home_surface([], MEDIUM_AT_TEN, now=NOW)
        assert surface.primary is None
        assert surface.secondary == ()
        assert surface.surfaced_ids == frozenset()

    def test_stuck_task_ids(self):
        a, b, c = _sample_tasks()
        stuck = {c.id: StuckStatus(task_id=c.id, state=StuckState.STUCK, skip_count=4)}
        surface = build_home_surface([a, b, c], MEDIUM_AT_TEN, now=NOW, stuck=stuck)
        assert surface.stuck_task_ids == (c.id,)

    def test_context_recorded(self):
        surface = build_home_surface(list(_sample_tasks()), MEDIUM_AT_TEN, now=NOW)
        assert surface.context.user_energy == EnergyLevel.MEDIUM
        assert surface.context.current_hour == 10
