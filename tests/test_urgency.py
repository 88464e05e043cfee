"""Tests for the deadline urgency model."""

from datetime import datetime, timedelta, timezone

import pytest

from nextmove_core import urgency_of
from nextmove_core.config import NextMoveConfig
from nextmove_core.urgency import hours_until

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_no_deadline_is_zero():
    assert urgency_of(None, NOW) == 0


def test_overdue_ramps_from_50():
    assert urgency_of(NOW - timedelta(hours=2), NOW) == pytest.approx(50 + 2 / 24 * 10)
    assert urgency_of(NOW - timedelta(days=1), NOW) == pytest.approx(60)


def test_overdue_caps_at_100():
    assert urgency_of(NOW - timedelta(days=10), NOW) == 100
    assert urgency_of(NOW - timedelta(days=400), NOW) == 100


def test_any_overdue_beats_due_today():
    barely_overdue = urgency_of(NOW - timedelta(minutes=1), NOW)
    due_now = urgency_of(NOW + timedelta(minutes=1), NOW)
    assert barely_overdue > due_now


@pytest.mark.parametrize(
    "hours, expected",
    [(0, 40), (1, 40), (23, 40), (24, 20), (71, 20), (72, 0), (96, 0)],
)
def test_upcoming_steps(hours, expected):
    assert urgency_of(NOW + timedelta(hours=hours), NOW) == expected


def test_naive_deadline_treated_as_utc():
    assert urgency_of(datetime(2026, 3, 10, 13, 0), NOW) == 40


def test_breakpoints_from_config():
    cfg = NextMoveConfig(due_today_hours=12, due_soon_hours=48)
    assert urgency_of(NOW + timedelta(hours=20), NOW, cfg) == 20
    assert urgency_of(NOW + timedelta(hours=50), NOW, cfg) == 0


def test_hours_until_is_signed():
    assert hours_until(NOW - timedelta(hours=3), NOW) == pytest.approx(-3)
    assert hours_until(NOW + timedelta(hours=5), NOW) == pytest.approx(5)
