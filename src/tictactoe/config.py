"""Runtime settings read from ``TICTACTOE_*`` environment variables."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import os

ENV_PREFIX = "TICTACTOE_"


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    leaderboard_path: Path = Path("leaderboard.json")
    ai_delay: float = 0.6  # seconds the AI "thinks" before replying
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        defaults = cls()

        def get(name: str) -> Optional[str]:
            value = env.get(ENV_PREFIX + name)
            return value.strip() if value and value.strip() else None

        port = defaults.port
        raw_port = get("PORT")
        if raw_port is not None:
            try:
                port = int(raw_port)
            except ValueError as exc:
                raise ValueError(
                    f"{ENV_PREFIX}PORT must be an integer, got {raw_port!r}"
                ) from exc
            if not 0 < port < 65536:
                raise ValueError(f"{ENV_PREFIX}PORT out of range: {port}")

        ai_delay = defaults.ai_delay
        raw_delay = get("AI_DELAY")
        if raw_delay is not None:
            try:
                ai_delay = float(raw_delay)
            except ValueError as exc:
                raise ValueError(
                    f"{ENV_PREFIX}AI_DELAY must be a number, got {raw_delay!r}"
                ) from exc
            if ai_delay < 0:
                raise ValueError(f"{ENV_PREFIX}AI_DELAY cannot be negative")

        path = get("LEADERBOARD_PATH")
        return cls(
            host=get("HOST") or defaults.host,
            port=port,
            leaderboard_path=Path(path) if path else defaults.leaderboard_path,
            ai_delay=ai_delay,
            log_level=(get("LOG_LEVEL") or defaults.log_level).upper(),
        )
