"""Shared fixtures for the Tic Tac Toe test suite."""

from __future__ import annotations

from typing import Tuple

import pytest

from tictactoe.game import EMPTY


def parse_board(text: str) -> Tuple[str, ...]:
    """Build a board from a compact string such as ``"XO_ _X_ O__"``."""
    cells = [EMPTY if ch == "_" else ch for ch in text if ch in "XO_"]
    assert len(cells) == 9, text
    return tuple(cells)


@pytest.fixture
def board():
    return parse_board
