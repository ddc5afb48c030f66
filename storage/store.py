# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""JSON-file stores for finished games and career player statistics.

Layout under the store root::

    <root>/games/<game_id>.json     one saved game document each
    <root>/players.json             career lines plus applied game ids

Writes go to a temporary file that is renamed over the target, so a
crash mid-write never leaves a half-written document behind. A saved
game file that cannot be parsed is treated as missing.

Usage::

    from storage import GameStore, PlayerStore

    games = GameStore("/tmp/scorebook")
    game_id = games.save(record)
    PlayerStore("/tmp/scorebook").apply_game(game_id, career_deltas(record))
"""

from __future__ import annotations

import json
import logging
import threading
import time
import uuid
from pathlib import Path
from typing import Any

from models import CareerStats, CareerStatsDelta, GameRecord
from names import display_name, normalize_name

logger = logging.getLogger(__name__)

LEADER_STATS = (
    "battingAverage", "sluggingPercentage", "hits", "runs", "rbis", "homers",
)

_COUNTING_FIELDS = (
    "games_played", "at_bats", "hits", "runs", "rbis",
    "singles", "doubles", "triples", "homers", "total_bases",
)


class StoreError(RuntimeError):
    """A document could not be written (or a required file could not be read)."""


def _write_json(path: Path, data: Any) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        with open(tmp_path, "w") as f:
            json.dump(data, f, separators=(",", ":"))
        tmp_path.replace(path)  # atomic rename
    except OSError as exc:
        logger.error("Failed to write %s: %s", path, exc)
        raise StoreError(f"Could not write {path.name}: {exc}") from exc


def _read_json(path: Path) -> Any | None:
    if not path.exists():
        return None
    try:
        with open(path) as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Unreadable store file %s: %s", path, exc)
        return None


def _rate(numerator: int, at_bats: int) -> float:
    return round(numerator / at_bats, 3) if at_bats > 0 else 0


# ---------------------------------------------------------------------------
# Saved games
# ---------------------------------------------------------------------------

class GameStore:
    """Saved game documents, one JSON file per game."""

    def __init__(self, root_dir: str | Path) -> None:
        self._dir = Path(root_dir) / "games"

    def save(self, record: GameRecord, game_id: str | None = None) -> str:
        """Persist one finished game and return its id.

        Saving again under the same ``game_id`` overwrites the document and
        keeps its original ``createdAt``, so a retried save stays one game.
        """
        if game_id is None:
            game_id = uuid.uuid4().hex[:12]
        elif not _is_safe_id(game_id):
            raise ValueError(f"Invalid game id '{game_id}'")
        path = self._dir / f"{game_id}.json"
        existing = _read_json(path) or {}
        doc = record.to_document()
        doc.update({
            "id": game_id,
            "gameHistoryCount": len(record.game_history),
            "createdAt": existing.get("createdAt", time.time()),
        })
        _write_json(path, doc)
        logger.info("Saved game %s (%s at %s)", game_id, record.away_team, record.home_team)
        return game_id

    def get(self, game_id: str) -> dict | None:
        if not _is_safe_id(game_id):
            return None
        return _read_json(self._dir / f"{game_id}.json")

    def list(self, limit: int = 50) -> list[dict]:
        """Saved games, newest first."""
        if not self._dir.exists():
            return []
        games = []
        for path in self._dir.glob("*.json"):
            doc = _read_json(path)
            if doc is not None:
                games.append(doc)
        games.sort(key=lambda g: g.get("createdAt", 0), reverse=True)
        return games[:limit]

    def delete(self, game_id: str) -> bool:
        if not _is_safe_id(game_id):
            return False
        path = self._dir / f"{game_id}.json"
        if path.exists():
            path.unlink()
            return True
        return False


def _is_safe_id(game_id: str) -> bool:
    return bool(game_id) and game_id.isalnum()


# ---------------------------------------------------------------------------
# Career statistics
# ---------------------------------------------------------------------------

class PlayerStore:
    """Career batting lines keyed by normalized player name.

    ``apply_game`` records the id of every game it has folded in, so the
    increments for one game are applied exactly once even if the caller
    retries after a failure.
    """

    def __init__(self, root_dir: str | Path) -> None:
        self._path = Path(root_dir) / "players.json"
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    # -- writes ------------------------------------------------------------

    def apply_game(self, game_id: str, deltas: list[CareerStatsDelta]) -> bool:
        """Add one game's increments. Returns False if already applied."""
        with self._lock:
            data = self._load()
            if game_id in data["appliedGames"]:
                logger.info("Career stats for game %s already applied", game_id)
                return False
            for delta in deltas:
                key = normalize_name(delta.name)
                line = CareerStats.model_validate(
                    data["players"].get(key, {"name": display_name(delta.name)})
                )
                for field in _COUNTING_FIELDS:
                    setattr(line, field, getattr(line, field) + getattr(delta, field))
                if delta.team not in line.teams:
                    line.teams.append(delta.team)
                line.batting_average = _rate(line.hits, line.at_bats)
                line.slugging_percentage = _rate(line.total_bases, line.at_bats)
                data["players"][key] = line.to_document()
            data["appliedGames"].append(game_id)
            _write_json(self._path, data)
        logger.info("Applied career stats for %d players from game %s", len(deltas), game_id)
        return True

    def delete(self, name: str) -> bool:
        with self._lock:
            data = self._load()
            if data["players"].pop(normalize_name(name), None) is None:
                return False
            _write_json(self._path, data)
        return True

    # -- reads -------------------------------------------------------------

    def get(self, name: str) -> dict | None:
        return self._load()["players"].get(normalize_name(name))

    def list(self, team: str | None = None, sort_by: str = "name",
             descending: bool = False, limit: int = 100) -> list[dict]:
        players = list(self._load()["players"].values())
        if team:
            players = [p for p in players if team in p.get("teams", [])]
        players.sort(key=lambda p: p.get(sort_by, 0), reverse=descending)
        return players[:limit]

    def by_team(self, team: str) -> list[dict]:
        return self.list(team=team, sort_by="battingAverage", descending=True,
                         limit=len(self._load()["players"]))

    def leaders(self, stat: str = "battingAverage", limit: int = 10) -> list[dict]:
        """Top players for one stat, skipping anyone with zero."""
        if stat not in LEADER_STATS:
            raise ValueError(f"Invalid stat '{stat}'; expected one of {', '.join(LEADER_STATS)}")
        players = [p for p in self._load()["players"].values() if p.get(stat, 0) > 0]
        players.sort(key=lambda p: p[stat], reverse=True)
        return [
            {
                "name": p["name"],
                "teams": p.get("teams", []),
                stat: p[stat],
                "gamesPlayed": p.get("gamesPlayed", 0),
                "atBats": p.get("atBats", 0),
            }
            for p in players[:limit]
        ]

    # -- helpers -----------------------------------------------------------

    def _load(self) -> dict:
        if not self._path.exists():
            return {"players": {}, "appliedGames": []}
        data = _read_json(self._path)
        if data is None:
            raise StoreError(f"Career stats file {self._path} is unreadable")
        data.setdefault("players", {})
        data.setdefault("appliedGames", [])
        return data
