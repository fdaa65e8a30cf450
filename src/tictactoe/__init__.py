"""Tic Tac Toe package exposing game rules, the minimax AI, and the web application."""

from .ai import MinimaxAI, find_best_move
from .game import Outcome, TicTacToeGame, evaluate
from .ui import app

__all__ = ["MinimaxAI", "Outcome", "TicTacToeGame", "app", "evaluate", "find_best_move"]
