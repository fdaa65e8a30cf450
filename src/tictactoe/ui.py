"""FastAPI-powered web UI for playing Tic Tac Toe in the browser."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ai import MinimaxAI
from .config import Settings
from .game import EMPTY, GameMode, TicTacToeGame
from .leaderboard import Leaderboard, normalize_name

logger = logging.getLogger(__name__)

SETTINGS = Settings.from_env()

HUMAN_PLAYER = "X"
AI_PLAYER = "O"
MAX_NAME_LENGTH = 32
AI_THINK_DELAY: float = SETTINGS.ai_delay
LEADERBOARD = Leaderboard(SETTINGS.leaderboard_path)


def _new_scores() -> Dict[str, int]:
    return {"X": 0, "O": 0, "draws": 0}


@dataclass
class GameSession:
    """Container for an active game, its mode and its running tally."""

    game: TicTacToeGame
    mode: GameMode
    player_name: str
    ai: Optional[MinimaxAI] = None
    scores: Dict[str, int] = field(default_factory=_new_scores)
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    round_recorded: bool = False
    # Bumped on every reset so AI replies scheduled for an old round are dropped.
    round_id: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Tic Tac Toe", description="Classic tic-tac-toe played in the browser")


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    model_config = ConfigDict(populate_by_name=True)

    mode: GameMode = GameMode.PVAI
    player_name: str = Field(default="", alias="playerName")

    @field_validator("player_name")
    @classmethod
    def ensure_reasonable_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) > MAX_NAME_LENGTH:
            raise ValueError(
                f"Player name must be at most {MAX_NAME_LENGTH} characters."
            )
        return value


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


def _make_ai(mode: GameMode) -> Optional[MinimaxAI]:
    return MinimaxAI(player=AI_PLAYER) if mode is GameMode.PVAI else None


def _create_session(mode: GameMode, player_name: str) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    session = GameSession(
        game=TicTacToeGame(),
        mode=mode,
        player_name=normalize_name(player_name),
        ai=_make_ai(mode),
    )
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info(
        "Created %s game %s for %s", mode.value, session_id, session.player_name
    )
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _record_round(game_id: str, session: GameSession) -> None:
    """Tally a finished round once and store the player's result. Caller holds the lock."""

    game = session.game
    if not game.finished or session.round_recorded:
        return
    session.round_recorded = True

    if game.winner == HUMAN_PLAYER:
        session.scores["X"] += 1
        result = "win"
    elif game.winner == AI_PLAYER:
        session.scores["O"] += 1
        result = "loss"
    else:
        session.scores["draws"] += 1
        result = "draw"

    logger.info("Game %s finished: %s for %s", game_id, result, session.player_name)
    try:
        LEADERBOARD.record(session.player_name, result)
    except OSError:
        # The round stands; only the persisted leaderboard misses this result.
        logger.exception(
            "Failed to save leaderboard result for %s", session.player_name
        )


def _run_ai_turn(game_id: str, round_id: int) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, AI_THINK_DELAY))

    with session.lock:
        if session.round_id != round_id:
            return
        try:
            if not session.ai:
                return
            game = session.game
            if game.finished:
                return
            if game.current_player != session.ai.player:
                return
            cell_index = session.ai.choose(game)
            game.play_move(cell_index)
            session.move_log.append(
                {"player": session.ai.player, "cellIndex": cell_index}
            )
            _record_round(game_id, session)
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        state: Dict[str, object] = {
            "id": game_id,
            "mode": session.mode.value,
            "playerName": session.player_name,
            "board": [c if c != EMPTY else "" for c in game.board],
            "currentPlayer": game.current_player,
            "winner": game.winner,
            "winningLine": list(game.winning_line) if game.winning_line else None,
            "drawn": game.drawn,
            "finished": game.finished,
            "availableMoves": game.available_moves(),
            "scores": dict(session.scores),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        round_id = session.round_id
        game = session.game
        if game.finished:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        if session.ai and game.current_player == session.ai.player:
            raise HTTPException(status_code=400, detail="It is not your turn")

        player = game.current_player
        try:
            game.play_move(cell_index)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        session.move_log.append({"player": player, "cellIndex": cell_index})
        _record_round(game_id, session)

        should_schedule_ai = bool(
            session.ai
            and not game.finished
            and game.current_player == session.ai.player
        )
        if should_schedule_ai:
            session.ai_pending = True

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id, round_id)


def _start_round(session: GameSession) -> None:
    """Clear the board for a new round. Caller holds the lock."""

    session.game.reset()
    session.move_log.clear()
    session.ai_pending = False
    session.round_recorded = False
    session.round_id += 1


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.mode, request.player_name)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/reset")
def reset_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        _start_round(session)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/mode")
def toggle_mode(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        session.mode = GameMode.PVP if session.mode is GameMode.PVAI else GameMode.PVAI
        session.ai = _make_ai(session.mode)
        session.scores = _new_scores()
        _start_round(session)
    logger.info("Game %s switched to %s", game_id, session.mode.value)
    return _serialize_session(game_id, session)


@app.get("/api/leaderboard")
def get_leaderboard() -> List[Dict[str, object]]:
    return [entry.model_dump() for entry in LEADERBOARD.entries()]


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic Tac Toe</title>
    <link rel=\"preconnect\" href=\"https://fonts.googleapis.com\" />
    <link rel=\"preconnect\" href=\"https://fonts.gstatic.com\" crossorigin />
    <link
      href=\"https://fonts.googleapis.com/css2?family=Poppins:wght@400;500;600;700;900&display=swap\"
      rel=\"stylesheet\"
    />
    <style>
      :root {
        color-scheme: dark;
        font-family: 'Poppins', system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
        font-weight: 400;
        --cyan: #22d3ee;
        --fuchsia: #e879f9;
        --muted: #94a3b8;
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        min-height: 100vh;
        display: flex;
        justify-content: center;
        align-items: center;
        padding: 2rem 1rem 3rem;
        background: radial-gradient(circle at top, #1e293b, #0f172a 60%, #020617);
        color: #f8fafc;
      }
      main {
        width: min(440px, 100%);
        display: flex;
        flex-direction: column;
        gap: 1.5rem;
      }
      .glass {
        background: rgba(255, 255, 255, 0.05);
        border: 1px solid rgba(255, 255, 255, 0.1);
        backdrop-filter: blur(12px);
        border-radius: 1.5rem;
      }
      h1 {
        margin: 0;
        font-weight: 900;
        text-transform: uppercase;
        letter-spacing: -0.02em;
        background: linear-gradient(90deg, var(--cyan), var(--fuchsia));
        -webkit-background-clip: text;
        background-clip: text;
        color: transparent;
      }
      .menu {
        padding: 2.5rem;
        text-align: center;
        display: grid;
        gap: 1.25rem;
      }
      .menu h1 {
        font-size: 2.8rem;
      }
      label {
        display: block;
        text-align: left;
        font-size: 0.65rem;
        font-weight: 700;
        letter-spacing: 0.15em;
        text-transform: uppercase;
        color: var(--muted);
        margin: 0 0 0.4rem 0.25rem;
      }
      input[type='text'] {
        width: 100%;
        padding: 0.9rem 1.25rem;
        border-radius: 1rem;
        border: 1px solid rgba(255, 255, 255, 0.1);
        background: rgba(15, 23, 42, 0.5);
        color: white;
        font: inherit;
      }
      button {
        font: inherit;
        font-weight: 700;
        color: #cbd5e1;
        cursor: pointer;
        border: 1px solid rgba(255, 255, 255, 0.1);
        background: rgba(255, 255, 255, 0.05);
        border-radius: 1rem;
        padding: 0.85rem 1.25rem;
        transition: transform 0.1s ease, background 0.2s ease;
      }
      button:hover {
        color: white;
        background: rgba(255, 255, 255, 0.1);
      }
      button:active {
        transform: scale(0.97);
      }
      button:disabled {
        cursor: default;
        opacity: 0.6;
        transform: none;
      }
      .primary {
        color: white;
        text-transform: uppercase;
        letter-spacing: 0.15em;
        border: none;
        background: linear-gradient(90deg, #06b6d4, #c026d3);
      }
      .mode-choice {
        display: flex;
        gap: 0.5rem;
      }
      .mode-choice button {
        flex: 1;
      }
      .mode-choice button.selected {
        border-color: var(--cyan);
        color: white;
      }
      .toolbar {
        display: flex;
        justify-content: space-between;
        align-items: center;
        gap: 0.75rem;
      }
      .toolbar h1 {
        font-size: 1.5rem;
        flex: 1;
      }
      .pill {
        border-radius: 999px;
        padding: 0.35rem 1rem;
        font-size: 0.65rem;
        text-transform: uppercase;
        letter-spacing: 0.1em;
      }
      .scores {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 1rem;
      }
      .score {
        padding: 0.75rem;
        text-align: center;
      }
      .score .name {
        font-size: 0.65rem;
        font-weight: 700;
        letter-spacing: 0.12em;
        text-transform: uppercase;
        color: var(--muted);
        overflow: hidden;
        text-overflow: ellipsis;
        white-space: nowrap;
      }
      .score .value {
        font-size: 1.6rem;
        font-weight: 900;
      }
      .x {
        color: var(--cyan);
      }
      .o {
        color: var(--fuchsia);
      }
      #status {
        text-align: center;
        min-height: 2rem;
        font-weight: 600;
        color: #e2e8f0;
      }
      #status.thinking::before {
        content: '';
        display: inline-block;
        width: 0.5rem;
        height: 0.5rem;
        margin-right: 0.5rem;
        border-radius: 999px;
        background: var(--fuchsia);
        animation: pulse 1s ease-in-out infinite;
      }
      @keyframes pulse {
        50% {
          opacity: 0.3;
        }
      }
      #message {
        text-align: center;
        min-height: 1.2rem;
        color: #fca5a5;
        font-size: 0.9rem;
      }
      .board {
        padding: 1rem;
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 0.75rem;
        aspect-ratio: 1;
      }
      .cell {
        font-size: clamp(2.5rem, 12vw, 4rem);
        font-weight: 900;
        border-radius: 1.25rem;
        padding: 0;
      }
      .cell.win {
        background: rgba(34, 211, 238, 0.2);
        border-color: var(--cyan);
      }
      .controls {
        display: flex;
        gap: 1rem;
      }
      .controls button:first-child {
        flex: 1;
      }
      .overlay {
        position: fixed;
        inset: 0;
        background: rgba(2, 6, 23, 0.8);
        display: flex;
        justify-content: center;
        align-items: center;
        padding: 1rem;
      }
      .overlay .glass {
        width: min(420px, 100%);
        padding: 2rem;
        background: #0f172a;
      }
      table {
        width: 100%;
        border-collapse: collapse;
        margin: 1rem 0;
      }
      th,
      td {
        padding: 0.45rem;
        text-align: center;
      }
      th {
        font-size: 0.65rem;
        letter-spacing: 0.12em;
        text-transform: uppercase;
        color: var(--muted);
      }
      td:first-child,
      th:first-child {
        text-align: left;
      }
      footer {
        text-align: center;
        font-size: 0.65rem;
        font-weight: 700;
        letter-spacing: 0.2em;
        text-transform: uppercase;
        color: #475569;
      }
      .hidden {
        display: none !important;
      }
    </style>
  </head>
  <body>
    <main>
      <section id=\"menu\" class=\"menu glass\">
        <h1>Tic Tac Toe</h1>
        <div>
          <label for=\"player-name\">Identify Yourself</label>
          <input id=\"player-name\" type=\"text\" maxlength=\"32\" placeholder=\"Enter your name...\" />
        </div>
        <div class=\"mode-choice\">
          <button id=\"choose-ai\" type=\"button\" class=\"selected\">VS CPU</button>
          <button id=\"choose-pvp\" type=\"button\">PVP</button>
        </div>
        <button id=\"start-game\" class=\"primary\" type=\"button\">Start Game</button>
        <button id=\"menu-leaderboard\" type=\"button\">View Leaderboard</button>
      </section>

      <section id=\"game-area\" class=\"hidden\">
        <div class=\"toolbar\">
          <button id=\"go-back\" type=\"button\" title=\"Back to Menu\">&#8592;</button>
          <h1>Tic Tac Toe</h1>
          <button id=\"toggle-mode\" class=\"pill\" type=\"button\"></button>
        </div>
        <div class=\"scores\" style=\"margin-top: 1.5rem\">
          <div class=\"score glass\">
            <div id=\"score-x-name\" class=\"name\"></div>
            <div id=\"score-x\" class=\"value x\">0</div>
          </div>
          <div class=\"score glass\">
            <div class=\"name\">Draws</div>
            <div id=\"score-draws\" class=\"value\">0</div>
          </div>
          <div class=\"score glass\">
            <div id=\"score-o-name\" class=\"name\"></div>
            <div id=\"score-o\" class=\"value o\">0</div>
          </div>
        </div>
        <p id=\"status\"></p>
        <div id=\"message\" role=\"status\"></div>
        <div id=\"board\" class=\"board glass\"></div>
        <div class=\"controls\" style=\"margin-top: 2rem\">
          <button id=\"reset\" type=\"button\">Reset Grid</button>
          <button id=\"game-leaderboard\" type=\"button\" title=\"View Leaderboard\">&#9776;</button>
        </div>
      </section>

      <footer>Tic Tac Toe v1.0.4</footer>
    </main>

    <div id=\"leaderboard\" class=\"overlay hidden\">
      <div class=\"glass\">
        <h1>Leaderboard</h1>
        <table>
          <thead>
            <tr><th>Player</th><th>W</th><th>D</th><th>L</th></tr>
          </thead>
          <tbody id=\"leaderboard-rows\"></tbody>
        </table>
        <button id=\"close-leaderboard\" type=\"button\">Close</button>
      </div>
    </div>

    <script>
      const menuEl = document.getElementById('menu');
      const gameArea = document.getElementById('game-area');
      const nameInput = document.getElementById('player-name');
      const chooseAiButton = document.getElementById('choose-ai');
      const choosePvpButton = document.getElementById('choose-pvp');
      const startButton = document.getElementById('start-game');
      const goBackButton = document.getElementById('go-back');
      const toggleModeButton = document.getElementById('toggle-mode');
      const resetButton = document.getElementById('reset');
      const boardEl = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const messageEl = document.getElementById('message');
      const leaderboardEl = document.getElementById('leaderboard');
      const leaderboardRows = document.getElementById('leaderboard-rows');

      let selectedMode = 'PVAI';
      let gameId = null;
      let gameState = null;
      let isRequestPending = false;
      let aiPollHandle = null;

      async function api(path, options = {}) {
        const response = await fetch(path, {
          headers: { 'Content-Type': 'application/json' },
          ...options,
        });
        const payload = await response.json();
        if (!response.ok) {
          const detail = payload && payload.detail;
          throw new Error(typeof detail === 'string' ? detail : 'Request failed');
        }
        return payload;
      }

      function selectMode(mode) {
        selectedMode = mode;
        chooseAiButton.classList.toggle('selected', mode === 'PVAI');
        choosePvpButton.classList.toggle('selected', mode === 'PVP');
      }

      function stopAiPolling() {
        if (aiPollHandle !== null) {
          clearInterval(aiPollHandle);
          aiPollHandle = null;
        }
      }

      function startAiPolling() {
        if (aiPollHandle !== null) return;
        aiPollHandle = setInterval(async () => {
          if (!gameId) {
            stopAiPolling();
            return;
          }
          try {
            const state = await api(`/api/game/${gameId}`);
            applyState(state);
          } catch (error) {
            messageEl.textContent = error.message;
            stopAiPolling();
          }
        }, 250);
      }

      function applyState(state) {
        gameState = state;
        render();
        if (state.aiPending) {
          startAiPolling();
        } else {
          stopAiPolling();
        }
      }

      function playerLabel(mark) {
        if (mark === 'X') return gameState.playerName;
        return gameState.mode === 'PVP' ? 'Player O' : 'CPU (O)';
      }

      function renderStatus() {
        statusEl.classList.remove('thinking');
        if (gameState.winner) {
          statusEl.textContent = `${playerLabel(gameState.winner)} Wins!`;
        } else if (gameState.drawn) {
          statusEl.textContent = "It's a Draw!";
        } else if (gameState.aiPending) {
          statusEl.classList.add('thinking');
          statusEl.textContent = 'AI is thinking...';
        } else {
          statusEl.textContent = `${playerLabel(gameState.currentPlayer)}'s Turn`;
        }
      }

      function render() {
        if (!gameState) return;
        document.getElementById('score-x-name').textContent = gameState.playerName;
        document.getElementById('score-o-name').textContent = playerLabel('O');
        document.getElementById('score-x').textContent = gameState.scores.X;
        document.getElementById('score-o').textContent = gameState.scores.O;
        document.getElementById('score-draws').textContent = gameState.scores.draws;
        toggleModeButton.textContent = gameState.mode === 'PVP' ? 'PVP' : 'VS CPU';
        resetButton.textContent = gameState.finished ? 'Play Again' : 'Reset Grid';
        renderStatus();

        const winningLine = gameState.winningLine || [];
        const humanLocked =
          gameState.finished ||
          gameState.aiPending ||
          (gameState.mode === 'PVAI' && gameState.currentPlayer !== 'X');
        boardEl.innerHTML = '';
        gameState.board.forEach((value, index) => {
          const cell = document.createElement('button');
          cell.type = 'button';
          cell.className = 'cell';
          if (value) cell.classList.add(value === 'X' ? 'x' : 'o');
          if (winningLine.includes(index)) cell.classList.add('win');
          cell.textContent = value;
          cell.disabled = humanLocked || Boolean(value);
          cell.addEventListener('click', () => submitMove(index));
          boardEl.appendChild(cell);
        });
      }

      async function withRequest(action) {
        if (isRequestPending) return;
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          await action();
        } catch (error) {
          messageEl.textContent = error.message;
        } finally {
          isRequestPending = false;
        }
      }

      function submitMove(index) {
        if (!gameId) return;
        return withRequest(async () => {
          const state = await api(`/api/game/${gameId}/move`, {
            method: 'POST',
            body: JSON.stringify({ cellIndex: index }),
          });
          applyState(state);
        });
      }

      function startGame() {
        return withRequest(async () => {
          const state = await api('/api/game', {
            method: 'POST',
            body: JSON.stringify({ mode: selectedMode, playerName: nameInput.value }),
          });
          gameId = state.id;
          menuEl.classList.add('hidden');
          gameArea.classList.remove('hidden');
          applyState(state);
        });
      }

      function resetGrid() {
        if (!gameId) return;
        return withRequest(async () => {
          applyState(await api(`/api/game/${gameId}/reset`, { method: 'POST' }));
        });
      }

      function toggleMode() {
        if (!gameId) return;
        return withRequest(async () => {
          applyState(await api(`/api/game/${gameId}/mode`, { method: 'POST' }));
        });
      }

      function returnToMenu() {
        stopAiPolling();
        gameId = null;
        gameState = null;
        gameArea.classList.add('hidden');
        menuEl.classList.remove('hidden');
      }

      async function showLeaderboard() {
        try {
          const entries = await api('/api/leaderboard');
          leaderboardRows.innerHTML = '';
          if (!entries.length) {
            const row = document.createElement('tr');
            const cell = document.createElement('td');
            cell.colSpan = 4;
            cell.textContent = 'No games recorded yet.';
            row.appendChild(cell);
            leaderboardRows.appendChild(row);
          }
          entries.forEach((entry) => {
            const row = document.createElement('tr');
            [entry.name, entry.wins, entry.draws, entry.losses].forEach((value) => {
              const cell = document.createElement('td');
              cell.textContent = value;
              row.appendChild(cell);
            });
            leaderboardRows.appendChild(row);
          });
          leaderboardEl.classList.remove('hidden');
        } catch (error) {
          messageEl.textContent = error.message;
        }
      }

      chooseAiButton.addEventListener('click', () => selectMode('PVAI'));
      choosePvpButton.addEventListener('click', () => selectMode('PVP'));
      startButton.addEventListener('click', startGame);
      goBackButton.addEventListener('click', returnToMenu);
      toggleModeButton.addEventListener('click', toggleMode);
      resetButton.addEventListener('click', resetGrid);
      document.getElementById('menu-leaderboard').addEventListener('click', showLeaderboard);
      document.getElementById('game-leaderboard').addEventListener('click', showLeaderboard);
      document.getElementById('close-leaderboard').addEventListener('click', () => {
        leaderboardEl.classList.add('hidden');
      });
    </script>
  </body>
</html>
"""
