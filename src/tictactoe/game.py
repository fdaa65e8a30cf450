"""Core rules for classic 3x3 Tic Tac Toe."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

Player = str  # "X" or "O"
Line = Tuple[int, int, int]
Board = Tuple[str, ...]

EMPTY = " "
BOARD_SIZE = 9

# Rows, then columns, then diagonals. The order decides which line is
# reported when a board holds more than one.
WINNING_LINES: Tuple[Line, ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

EMPTY_BOARD: Board = (EMPTY,) * BOARD_SIZE


class GameMode(str, Enum):
    PVP = "PVP"
    PVAI = "PVAI"


def other_player(player: Player) -> Player:
    return "O" if player == "X" else "X"


def place(board: Sequence[str], index: int, player: Player) -> Board:
    """Return a new board with ``player`` placed at ``index``."""
    cells = list(board)
    cells[index] = player
    return tuple(cells)


# ---------- Outcome ----------


@dataclass(frozen=True)
class Outcome:
    winner: Optional[Player] = None
    line: Optional[Line] = None
    drawn: bool = False

    @property
    def finished(self) -> bool:
        return self.winner is not None or self.drawn


IN_PROGRESS = Outcome()


def evaluate(board: Sequence[str]) -> Outcome:
    """Classify ``board`` as won (by whom, via which line), drawn or in progress."""
    for line in WINNING_LINES:
        a, b, c = line
        v = board[a]
        if v != EMPTY and v == board[b] == board[c]:
            return Outcome(winner=v, line=line)
    if all(cell != EMPTY for cell in board):
        return Outcome(drawn=True)
    return IN_PROGRESS


# ---------- Game ----------


@dataclass
class TicTacToeGame:
    board: Board = EMPTY_BOARD
    current_player: Player = "X"
    winner: Optional[Player] = None
    winning_line: Optional[Line] = None
    drawn: bool = False
    history: List[int] = field(default_factory=list, repr=False)

    @property
    def finished(self) -> bool:
        return self.winner is not None or self.drawn

    def available_moves(self) -> List[int]:
        """Empty cell indices in board order; none once the game is over."""
        if self.finished:
            return []
        return [i for i, c in enumerate(self.board) if c == EMPTY]

    def play_move(self, cell: int) -> None:
        """Place the current player's mark, update the outcome and pass the turn."""
        if self.finished:
            raise ValueError("Game already finished")
        if not 0 <= cell < BOARD_SIZE:
            raise ValueError(f"Cell index {cell} is off the board")
        if self.board[cell] != EMPTY:
            raise ValueError("Cell already occupied")

        self.board = place(self.board, cell, self.current_player)
        self.history.append(cell)

        outcome = evaluate(self.board)
        self.winner = outcome.winner
        self.winning_line = outcome.line
        self.drawn = outcome.drawn

        self.current_player = other_player(self.current_player)

    def outcome(self) -> Outcome:
        return Outcome(winner=self.winner, line=self.winning_line, drawn=self.drawn)

    def clone(self) -> "TicTacToeGame":
        return TicTacToeGame(
            board=self.board,
            current_player=self.current_player,
            winner=self.winner,
            winning_line=self.winning_line,
            drawn=self.drawn,
            history=self.history.copy(),
        )

    def reset(self) -> None:
        self.board = EMPTY_BOARD
        self.current_player = "X"
        self.winner = None
        self.winning_line = None
        self.drawn = False
        self.history.clear()
