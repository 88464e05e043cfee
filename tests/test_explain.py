"""Tests for ranked-task explanations."""

from datetime import datetime, timedelta, timezone

from nextmove_core import (
    EnergyLevel,
    Priority,
    SortContext,
    Task,
    TaskId,
    build_reasoning,
    reason_for,
)

NOW = datetime(2026, 3, 10, 10, 0, tzinfo=timezone.utc)  # Tuesday morning
MEDIUM = EnergyLevel.MEDIUM


def _task(title="Task", **kwargs):
    return Task(id=TaskId("t"), title=title, **kwargs)


class TestReasonFor:
    def test_overdue_high_priority_keeps_first_two(self):
        task = _task(
            "Finish report",
            priority=Priority.HIGH,
            deadline=NOW - timedelta(hours=2),
            energy_level=EnergyLevel.MEDIUM,
            estimated_minutes=30,
        )
        assert reason_for(task, MEDIUM, now=NOW) == ("Overdue", "Energy match")

    def test_quick_win_only(self):
        task = _task(energy_level=EnergyLevel.LOW, priority=Priority.LOW, estimated_minutes=5)
        assert reason_for(task, MEDIUM, now=NOW) == ("Quick win",)

    def test_quick_win_not_tagged_at_peak(self):
        task = _task(energy_level=EnergyLevel.PEAK, estimated_minutes=5)
        assert reason_for(task, EnergyLevel.PEAK, now=NOW) == ("Energy match",)

    def test_fallback(self):
        task = _task(
            energy_level=EnergyLevel.PEAK,
            priority=Priority.MEDIUM,
            deadline=NOW + timedelta(hours=96),
            estimated_minutes=45,
        )
        assert reason_for(task, MEDIUM, now=NOW) == ("Next in queue",)

    def test_energy_mismatch(self):
        task = _task(energy_level=EnergyLevel.PEAK, estimated_minutes=60)
        assert reason_for(task, EnergyLevel.LOW, now=NOW) == ("Energy mismatch",)

    def test_due_today_and_due_soon(self):
        today = _task(deadline=NOW + timedelta(hours=5), energy_level=EnergyLevel.PEAK)
        soon = _task(deadline=NOW + timedelta(hours=48), energy_level=EnergyLevel.PEAK)
        assert reason_for(today, MEDIUM, now=NOW) == ("Due today",)
        assert reason_for(soon, MEDIUM, now=NOW) == ("Due soon",)

    def test_high_priority(self):
        task = _task(priority=Priority.HIGH, energy_level=EnergyLevel.PEAK)
        assert reason_for(task, MEDIUM, now=NOW) == ("High priority",)

    def test_energy_inferred_from_hour(self):
        task = _task(energy_level=EnergyLevel.PEAK, estimated_minutes=60)
        assert reason_for(task, now=NOW) == ("Energy match",)
        evening = NOW.replace(hour=21)
        assert reason_for(task, now=evening) == ("Energy mismatch",)

    def test_never_more_than_two_tags(self):
        task = _task(
            priority=Priority.HIGH,
            deadline=NOW - timedelta(days=3),
            energy_level=EnergyLevel.LOW,
            estimated_minutes=5,
        )
        assert len(reason_for(task, EnergyLevel.LOW, now=NOW)) == 2


class TestBuildReasoning:
    CONTEXT = SortContext(user_energy=MEDIUM, current_hour=10, is_weekend=False)

    def test_overdue_high_priority(self):
        task = _task(
            "Finish report",
            priority=Priority.HIGH,
            deadline=NOW - timedelta(hours=2),
            energy_level=EnergyLevel.MEDIUM,
            estimated_minutes=30,
        )
        reasoning = build_reasoning(task, self.CONTEXT, now=NOW)
        assert reasoning.energy_match == 100
        assert reasoning.priority_reason == "Overdue by 1 day, marked as high priority."
        assert reasoning.context_note == "Morning clarity makes this a good time to start."

    def test_due_in_days(self):
        task = _task("Plan trip", deadline=NOW + timedelta(hours=50))
        reasoning = build_reasoning(task, self.CONTEXT, now=NOW)
        assert reasoning.priority_reason == "Due in 3 days."

    def test_fallback_reason(self):
        reasoning = build_reasoning(_task("Tidy desk"), self.CONTEXT, now=NOW)
        assert reasoning.priority_reason == (
            "Next in your prioritized queue based on context and timing."
        )

    def test_morning_call(self):
        reasoning = build_reasoning(_task("Call the bank"), self.CONTEXT, now=NOW)
        assert reasoning.context_note == "Morning calls tend to connect. Good timing."
        assert reasoning.priority_reason == "Appears time-sensitive."

    def test_weekend_call(self):
        ctx = SortContext(user_energy=MEDIUM, current_hour=10, is_weekend=True)
        reasoning = build_reasoning(_task("Call the bank"), ctx, now=NOW)
        assert reasoning.context_note == (
            "Consider whether this call can wait for business hours."
        )

    def test_quick_task_note(self):
        reasoning = build_reasoning(
            _task("Water plants", estimated_minutes=3), self.CONTEXT, now=NOW
        )
        assert reasoning.context_note == "Two-minute rule: if it's this quick, do it now."
        assert reasoning.priority_reason == "Quick win opportunity."
