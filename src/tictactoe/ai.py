"""Exhaustive minimax with alpha-beta pruning for 3x3 Tic Tac Toe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import logging
import math

from .game import EMPTY, Player, TicTacToeGame, evaluate, other_player

logger = logging.getLogger(__name__)

# A win is worth WIN_SCORE minus the plies it took, a loss the plies minus
# WIN_SCORE, so quicker wins and slower losses rank higher.
WIN_SCORE = 10


def find_best_move(
    board: Sequence[str], ai_mark: Player, human_mark: Player
) -> Optional[int]:
    """Return the optimal cell for ``ai_mark`` or ``None`` when no move exists.

    Candidates are scanned in index order and the first strictly best score is
    kept, so ties go to the lowest index. ``board`` itself is never modified.
    """
    if evaluate(board).finished:
        return None

    scratch: List[str] = list(board)
    best_move: Optional[int] = None
    best_score = -math.inf

    for idx in range(len(scratch)):
        if scratch[idx] != EMPTY:
            continue
        scratch[idx] = ai_mark
        # A candidate cut off by alpha scores <= best_score and is never taken.
        score = _minimax(scratch, 1, best_score, math.inf, False, ai_mark, human_mark)
        scratch[idx] = EMPTY
        if score > best_score:
            best_score, best_move = score, idx

    logger.debug("Best move for %s is %s (score %s)", ai_mark, best_move, best_score)
    return best_move


def _minimax(
    cells: List[str],
    depth: int,
    alpha: float,
    beta: float,
    maximizing: bool,
    ai_mark: Player,
    human_mark: Player,
) -> float:
    outcome = evaluate(cells)
    if outcome.winner == ai_mark:
        return WIN_SCORE - depth
    if outcome.winner == human_mark:
        return depth - WIN_SCORE
    if outcome.drawn:
        return 0

    if maximizing:
        value = -math.inf
        for idx in range(len(cells)):
            if cells[idx] != EMPTY:
                continue
            cells[idx] = ai_mark
            value = max(
                value,
                _minimax(cells, depth + 1, alpha, beta, False, ai_mark, human_mark),
            )
            cells[idx] = EMPTY
            alpha = max(alpha, value)
            if alpha >= beta:
                break
        return value

    value = math.inf
    for idx in range(len(cells)):
        if cells[idx] != EMPTY:
            continue
        cells[idx] = human_mark
        value = min(
            value,
            _minimax(cells, depth + 1, alpha, beta, True, ai_mark, human_mark),
        )
        cells[idx] = EMPTY
        beta = min(beta, value)
        if alpha >= beta:
            break
    return value


@dataclass
class MinimaxAI:
    """AI player that always picks a game-theoretically optimal move.

    Public surface used by ui.py:
      - MinimaxAI(player="O")
      - choose(game) -> cell_index
    """

    player: Player
    opponent: Player = field(init=False)

    def __post_init__(self) -> None:
        self.opponent = other_player(self.player)

    def choose(self, game: TicTacToeGame) -> int:
        if game.current_player != self.player:
            raise ValueError("It is not this AI player's turn")
        move = find_best_move(game.board, self.player, self.opponent)
        if move is None:
            raise RuntimeError("No valid moves available")
        return move
