"""Tests for the Tic Tac Toe minimax AI."""

from functools import lru_cache
from typing import List, Tuple

import pytest

from tictactoe.ai import WIN_SCORE, MinimaxAI, find_best_move
from tictactoe.game import (
    EMPTY,
    EMPTY_BOARD,
    TicTacToeGame,
    evaluate,
    other_player,
    place,
)


def _side_to_move(cells: Tuple[str, ...]) -> str:
    return "X" if cells.count("X") == cells.count("O") else "O"


def _reachable_open_positions() -> List[Tuple[str, ...]]:
    seen = set()
    stack = [EMPTY_BOARD]
    while stack:
        cells = stack.pop()
        if cells in seen:
            continue
        seen.add(cells)
        if evaluate(cells).finished:
            continue
        mover = _side_to_move(cells)
        for idx, cell in enumerate(cells):
            if cell == EMPTY:
                stack.append(place(cells, idx, mover))
    return sorted(c for c in seen if not evaluate(c).finished)


@lru_cache(maxsize=None)
def _plain_minimax(cells: Tuple[str, ...], to_move: str, ai: str, depth: int) -> int:
    outcome = evaluate(cells)
    if outcome.winner == ai:
        return WIN_SCORE - depth
    if outcome.winner is not None:
        return depth - WIN_SCORE
    if outcome.drawn:
        return 0
    scores = [
        _plain_minimax(place(cells, idx, to_move), other_player(to_move), ai, depth + 1)
        for idx, cell in enumerate(cells)
        if cell == EMPTY
    ]
    return max(scores) if to_move == ai else min(scores)


def test_ai_takes_immediate_win(board):
    cells = board("XX_ OO_ X__")
    assert find_best_move(cells, "O", "X") == 5


def test_ai_blocks_immediate_threat(board):
    # O holds the centre, X threatens the left column.
    assert find_best_move(board("X__ XO_ ___"), "O", "X") == 6
    assert find_best_move(board("XX_ _O_ ___"), "O", "X") == 2


def test_ai_prefers_the_quickest_win(board):
    # Cell 3 also forces a win (double threat) but 8 wins on the spot.
    cells = board("OXX _O_ _X_")
    assert find_best_move(cells, "O", "X") == 8


def test_ai_never_modifies_the_board(board):
    cells = list(board("X__ _O_ __X"))
    before = list(cells)
    find_best_move(cells, "O", "X")
    assert cells == before


def test_full_board_has_no_move(board):
    assert find_best_move(board("XOX XOO OXX"), "O", "X") is None


def test_decided_board_has_no_move(board):
    assert find_best_move(board("XXX OO_ ___"), "O", "X") is None


def test_single_empty_cell_is_returned(board):
    assert find_best_move(board("XOX XOO OX_"), "X", "O") == 8


def test_ai_matches_plain_minimax_on_every_reachable_position():
    positions = _reachable_open_positions()
    assert positions

    for cells in positions:
        ai = _side_to_move(cells)
        human = other_player(ai)
        scores = {
            idx: _plain_minimax(place(cells, idx, ai), human, ai, 1)
            for idx, cell in enumerate(cells)
            if cell == EMPTY
        }
        best = max(scores.values())
        expected = min(idx for idx, score in scores.items() if score == best)

        chosen = find_best_move(cells, ai, human)

        assert chosen == expected, (cells, scores)


def test_perfect_play_from_empty_board_is_a_draw():
    game = TicTacToeGame()
    players = {"X": MinimaxAI(player="X"), "O": MinimaxAI(player="O")}

    while not game.finished:
        game.play_move(players[game.current_player].choose(game))

    assert game.drawn
    assert game.winner is None


def test_ai_never_loses_against_any_opening():
    for opening in range(9):
        game = TicTacToeGame()
        game.play_move(opening)
        ai = MinimaxAI(player="O")
        opponent = MinimaxAI(player="X")
        while not game.finished:
            mover = ai if game.current_player == "O" else opponent
            game.play_move(mover.choose(game))
        assert game.winner != "X"


def test_ai_refuses_to_move_out_of_turn():
    game = TicTacToeGame()
    with pytest.raises(ValueError):
        MinimaxAI(player="O").choose(game)


def test_ai_raises_when_no_move_available():
    game = TicTacToeGame()
    for cell in (0, 1, 2, 4, 3, 5, 7, 6, 8):
        game.play_move(cell)
    game.current_player = "O"
    with pytest.raises(RuntimeError):
        MinimaxAI(player="O").choose(game)


def test_opponent_is_derived_from_player():
    assert MinimaxAI(player="X").opponent == "O"
    assert MinimaxAI(player="O").opponent == "X"
