"""Tests for the JSON-backed leaderboard."""

import json
import logging

import pytest

from tictactoe.leaderboard import DEFAULT_PLAYER_NAME, Leaderboard, LeaderboardEntry


def test_missing_file_starts_empty(tmp_path):
    board = Leaderboard(tmp_path / "missing.json")
    assert board.entries() == []


def test_record_creates_and_persists_entry(tmp_path):
    path = tmp_path / "scores" / "leaderboard.json"
    board = Leaderboard(path)

    entry = board.record("Ada", "win")

    assert entry == LeaderboardEntry(name="Ada", wins=1)
    assert json.loads(path.read_text()) == [
        {"name": "Ada", "wins": 1, "draws": 0, "losses": 0}
    ]


def test_names_match_case_insensitively(tmp_path):
    board = Leaderboard(tmp_path / "lb.json")
    board.record("Ada", "win")
    board.record("ADA", "draw")
    entry = board.record(" ada ", "loss")

    assert entry.name == "Ada"
    assert (entry.wins, entry.draws, entry.losses) == (1, 1, 1)
    assert len(board.entries()) == 1


def test_blank_name_uses_default(tmp_path):
    board = Leaderboard(tmp_path / "lb.json")
    assert board.record("", "draw").name == DEFAULT_PLAYER_NAME
    assert board.get("  ").draws == 1


def test_entries_are_ranked(tmp_path):
    board = Leaderboard(tmp_path / "lb.json")
    board.record("bob", "draw")
    board.record("Cy", "win")
    board.record("al", "win")
    board.record("al", "loss")

    assert [e.name for e in board.entries()] == ["Cy", "al", "bob"]


def test_reload_from_disk(tmp_path):
    path = tmp_path / "lb.json"
    Leaderboard(path).record("Ada", "win")

    reloaded = Leaderboard(path)
    assert reloaded.get("ada").wins == 1


def test_corrupt_file_is_logged_and_ignored(tmp_path, caplog):
    path = tmp_path / "lb.json"
    path.write_text("{not json")
    board = Leaderboard(path)

    with caplog.at_level(logging.ERROR, logger="tictactoe.leaderboard"):
        assert board.entries() == []
    assert "Failed to load leaderboard" in caplog.text

    board.record("Ada", "win")
    assert json.loads(path.read_text())[0]["name"] == "Ada"


def test_unknown_result_is_rejected(tmp_path):
    board = Leaderboard(tmp_path / "lb.json")
    with pytest.raises(ValueError):
        board.record("Ada", "forfeit")


def test_save_leaves_no_temp_file(tmp_path):
    board = Leaderboard(tmp_path / "lb.json")
    board.record("Ada", "win")
    assert not (tmp_path / "lb.tmp").exists()


def test_failed_write_keeps_previous_counts(tmp_path):
    path = tmp_path / "lb.json"
    board = Leaderboard(path)
    board.record("Ada", "win")

    # A directory in place of the file makes the write fail.
    path.unlink()
    path.mkdir()
    with pytest.raises(OSError):
        board.record("Ada", "win")

    assert board.get("Ada").wins == 1
    assert not (tmp_path / "lb.tmp").exists()

    path.rmdir()
    assert board.record("Ada", "win").wins == 2
    assert json.loads(path.read_text())[0]["wins"] == 2
