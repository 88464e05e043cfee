"""Tests for nextmove_core.config."""

import pytest

from nextmove_core import ConfigError, NextMoveConfig
from nextmove_core.config import (
    DEFAULT_CONFIG,
    ENERGY_WEIGHT,
    QUICK_WIN_BONUS,
    STUCK_THRESHOLD,
    SUGGESTION_LIMIT,
)

NOTION_ID = "2ea35d23-b569-80cc-99be-e6d6a17b1548"

ENV_KEYS = (
    "NOTION_TOKEN",
    "NOTION_API_KEY",
    "NEXTMOVE_TASKS_DB",
    "NEXTMOVE_SKIP_HISTORY_DB",
    "NEXTMOVE_STUCK_THRESHOLD",
    "NEXTMOVE_SUGGESTION_LIMIT",
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults():
    cfg = NextMoveConfig()
    assert cfg.energy_weight == ENERGY_WEIGHT
    assert cfg.quick_win_bonus == QUICK_WIN_BONUS
    assert cfg.stuck_threshold == STUCK_THRESHOLD
    assert cfg.suggestion_limit == SUGGESTION_LIMIT
    assert DEFAULT_CONFIG == cfg
    cfg.validate()


class TestFromEnv:
    def test_overrides(self, clean_env):
        clean_env.setenv("NEXTMOVE_STUCK_THRESHOLD", "5")
        clean_env.setenv("NEXTMOVE_SUGGESTION_LIMIT", "2")
        clean_env.setenv("NOTION_API_KEY", "secret_abc")
        cfg = NextMoveConfig.from_env()
        assert cfg.stuck_threshold == 5
        assert cfg.suggestion_limit == 2
        assert cfg.notion_token == "secret_abc"
        assert cfg.energy_weight == ENERGY_WEIGHT

    def test_blank_value_uses_default(self, clean_env):
        clean_env.setenv("NEXTMOVE_STUCK_THRESHOLD", "  ")
        assert NextMoveConfig.from_env().stuck_threshold == STUCK_THRESHOLD

    def test_bad_integer(self, clean_env):
        clean_env.setenv("NEXTMOVE_STUCK_THRESHOLD", "three")
        with pytest.raises(ConfigError):
            NextMoveConfig.from_env()


class TestFromYaml:
    def test_overrides(self, tmp_path):
        path = tmp_path / "nextmove.yaml"
        path.write_text("quick_win_bonus: 20\nsecondary_count: 1\n")
        cfg = NextMoveConfig.from_yaml(path)
        assert cfg.quick_win_bonus == 20
        assert cfg.secondary_count == 1
        assert cfg.stuck_threshold == STUCK_THRESHOLD

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert NextMoveConfig.from_yaml(path) == NextMoveConfig()

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError):
            NextMoveConfig.from_yaml(path)

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "typo.yaml"
        path.write_text("quick_win_bonnus: 20\n")
        with pytest.raises(ConfigError, match="quick_win_bonnus"):
            NextMoveConfig.from_yaml(path)


class TestValidate:
    def test_negative_weight(self):
        with pytest.raises(ConfigError):
            NextMoveConfig(energy_weight=-1).validate()

    def test_zero_threshold(self):
        with pytest.raises(ConfigError):
            NextMoveConfig(stuck_threshold=0).validate()

    def test_breakpoint_order(self):
        with pytest.raises(ConfigError):
            NextMoveConfig(due_today_hours=72, due_soon_hours=24).validate()

    def test_zero_limit_allowed(self):
        NextMoveConfig(suggestion_limit=0, secondary_count=0).validate()


class TestValidateNotion:
    def test_missing_token(self):
        cfg = NextMoveConfig(tasks_database_id=NOTION_ID, skip_history_database_id=NOTION_ID)
        with pytest.raises(ConfigError):
            cfg.validate_notion()

    def test_bad_database_id(self):
        cfg = NextMoveConfig(
            notion_token="secret",
            tasks_database_id="not-an-id",
            skip_history_database_id=NOTION_ID,
        )
        with pytest.raises(ConfigError, match="NEXTMOVE_TASKS_DB"):
            cfg.validate_notion()

    def test_valid(self):
        NextMoveConfig(
            notion_token="secret",
            tasks_database_id=NOTION_ID,
            skip_history_database_id=NOTION_ID.replace("-", ""),
        ).validate_notion()
