"""Tests for environment-driven settings."""

from pathlib import Path

import pytest

from tictactoe.config import Settings


def test_defaults_when_environment_is_empty():
    settings = Settings.from_env({})
    assert settings == Settings()
    assert settings.port == 8000
    assert settings.ai_delay == pytest.approx(0.6)


def test_reads_prefixed_variables():
    settings = Settings.from_env(
        {
            "TICTACTOE_HOST": "127.0.0.1",
            "TICTACTOE_PORT": "9001",
            "TICTACTOE_LEADERBOARD_PATH": "/tmp/board.json",
            "TICTACTOE_AI_DELAY": "0",
            "TICTACTOE_LOG_LEVEL": "debug",
        }
    )
    assert settings.host == "127.0.0.1"
    assert settings.port == 9001
    assert settings.leaderboard_path == Path("/tmp/board.json")
    assert settings.ai_delay == 0.0
    assert settings.log_level == "DEBUG"


def test_blank_values_fall_back_to_defaults():
    settings = Settings.from_env({"TICTACTOE_HOST": "  ", "TICTACTOE_PORT": ""})
    assert settings.host == "0.0.0.0"
    assert settings.port == 8000


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("TICTACTOE_PORT", "8123")
    assert Settings.from_env().port == 8123


@pytest.mark.parametrize(
    "env",
    [
        {"TICTACTOE_PORT": "eighty"},
        {"TICTACTOE_PORT": "70000"},
        {"TICTACTOE_AI_DELAY": "soon"},
        {"TICTACTOE_AI_DELAY": "-1"},
    ],
)
def test_invalid_values_raise(env):
    with pytest.raises(ValueError, match="TICTACTOE_"):
        Settings.from_env(env)
