"""JSON-file backed leaderboard of player records."""

from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional
import logging
import threading

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PLAYER_NAME = "Player X"

Result = Literal["win", "draw", "loss"]


class LeaderboardEntry(BaseModel):
    """Cumulative record of a single player."""

    name: str
    wins: int = Field(default=0, ge=0)
    draws: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)


_ENTRIES = TypeAdapter(List[LeaderboardEntry])


def normalize_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    return cleaned or DEFAULT_PLAYER_NAME


class Leaderboard:
    """Leaderboard persisted as a JSON array of entries.

    Names are matched case-insensitively; an entry keeps the spelling it was
    first recorded with. The file is loaded lazily and rewritten after every
    recorded result.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._entries: Optional[List[LeaderboardEntry]] = None
        self._lock = threading.Lock()

    def _load(self) -> List[LeaderboardEntry]:
        if self._entries is not None:
            return self._entries
        entries: List[LeaderboardEntry] = []
        if self.path.exists():
            try:
                entries = _ENTRIES.validate_json(self.path.read_bytes())
            except (OSError, ValueError, ValidationError):
                logger.exception("Failed to load leaderboard from %s", self.path)
                entries = []
        self._entries = entries
        return entries

    def _save(self, entries: List[LeaderboardEntry]) -> None:
        """Write entries via a temp file so an interrupted write never truncates the board."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(".tmp")
        try:
            temp_path.write_bytes(_ENTRIES.dump_json(entries, indent=2))
            temp_path.replace(self.path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

    def entries(self) -> List[LeaderboardEntry]:
        """Entries ranked by wins, then draws, then fewest losses, then name."""
        with self._lock:
            entries = [entry.model_copy() for entry in self._load()]
        return sorted(
            entries,
            key=lambda e: (-e.wins, -e.draws, e.losses, e.name.lower()),
        )

    def get(self, name: str) -> Optional[LeaderboardEntry]:
        key = normalize_name(name).lower()
        with self._lock:
            for entry in self._load():
                if entry.name.lower() == key:
                    return entry.model_copy()
        return None

    def record(self, name: Optional[str], result: Result) -> LeaderboardEntry:
        if result not in ("win", "draw", "loss"):
            raise ValueError(f"Unknown result {result!r}")
        display_name = normalize_name(name)
        key = display_name.lower()

        with self._lock:
            # Work on copies; the cache only changes once the file is written.
            entries = [e.model_copy() for e in self._load()]
            entry = next((e for e in entries if e.name.lower() == key), None)
            if entry is None:
                entry = LeaderboardEntry(name=display_name)
                entries.append(entry)
            if result == "win":
                entry.wins += 1
            elif result == "draw":
                entry.draws += 1
            else:
                entry.losses += 1
            self._save(entries)
            self._entries = entries
            logger.info(
                "Recorded %s for %s (%d/%d/%d)",
                result,
                entry.name,
                entry.wins,
                entry.draws,
                entry.losses,
            )
            return entry.model_copy()
