# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Data models for the party-baseball scorebook.

Every model serializes to the camelCase document shape used by the
persistence layer (``atBats``, ``homeScore``, ``gameEndReason`` ...) while
Python code uses snake_case attribute names. Both spellings are accepted
on input.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase aliases for JSON documents."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Team(str, Enum):
    HOME = "home"
    AWAY = "away"


class Half(str, Enum):
    TOP = "TOP"  # away bats
    BOTTOM = "BOTTOM"  # home bats


class Base(str, Enum):
    FIRST = "1B"
    SECOND = "2B"
    THIRD = "3B"


class EventType(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    HOME_RUN = "home_run"
    STRIKE = "strike"
    OUT = "out"
    DOUBLE_PLAY = "double_play"


HIT_BASES: dict[EventType, int] = {
    EventType.SINGLE: 1,
    EventType.DOUBLE: 2,
    EventType.TRIPLE: 3,
    EventType.HOME_RUN: 4,
}


class Winner(str, Enum):
    HOME = "home"
    AWAY = "away"
    TIE = "tie"


class EndReason(str, Enum):
    REGULATION = "regulation"
    EXTRA_INNINGS = "extra innings"
    WALK_OFF = "walk-off"
    TIE_GAME = "tie game"


# ---------------------------------------------------------------------------
# Scoring events
# ---------------------------------------------------------------------------

class ScoringEvent(CamelModel):
    """One button press by the scorer.

    ``base`` is only meaningful for a double play, where it names the base
    of the runner who was put out.
    """
    model_config = ConfigDict(frozen=True)

    type: EventType
    base: Optional[Base] = None


# ---------------------------------------------------------------------------
# Per-player batting line
# ---------------------------------------------------------------------------

class BattingLine(CamelModel):
    at_bats: int = Field(default=0, ge=0)
    hits: int = Field(default=0, ge=0)
    runs: int = Field(default=0, ge=0)
    rbis: int = Field(default=0, ge=0)
    singles: int = Field(default=0, ge=0)
    doubles: int = Field(default=0, ge=0)
    triples: int = Field(default=0, ge=0)
    homers: int = Field(default=0, ge=0)
    total_bases: int = Field(default=0, ge=0)


class PlayerGameStats(BattingLine):
    """Batting line accumulated during one game."""

    @property
    def batting_average(self) -> float:
        return round(self.hits / self.at_bats, 3) if self.at_bats > 0 else 0

    @property
    def slugging_percentage(self) -> float:
        return round(self.total_bases / self.at_bats, 3) if self.at_bats > 0 else 0


class SummaryPlayerStats(BattingLine):
    """Final batting line with the derived rate stats materialized."""
    batting_average: float = 0
    slugging_percentage: float = 0


# ---------------------------------------------------------------------------
# Game state
# ---------------------------------------------------------------------------

class Count(CamelModel):
    balls: int = Field(default=0, ge=0, le=3)  # tracked but no event moves it
    strikes: int = Field(default=0, ge=0, le=2)


class Bases(CamelModel):
    first: Optional[str] = None
    second: Optional[str] = None
    third: Optional[str] = None

    def get(self, base: Base) -> Optional[str]:
        return getattr(self, _BASE_FIELDS[base])

    def set(self, base: Base, runner: Optional[str]) -> None:
        setattr(self, _BASE_FIELDS[base], runner)

    def occupied(self) -> list[Base]:
        """Occupied bases, lead runner first."""
        return [b for b in (Base.THIRD, Base.SECOND, Base.FIRST) if self.get(b)]

    def runner_count(self) -> int:
        return len(self.occupied())


_BASE_FIELDS = {Base.FIRST: "first", Base.SECOND: "second", Base.THIRD: "third"}


class Score(CamelModel):
    home: int = 0
    away: int = 0

    def get(self, team: Team) -> int:
        return self.home if team is Team.HOME else self.away

    def add(self, team: Team, runs: int) -> None:
        if team is Team.HOME:
            self.home += runs
        else:
            self.away += runs


class GameState(CamelModel):
    """One immutable snapshot of a game in progress.

    The state machine never edits a snapshot in place; every event yields
    a new ``GameState``. Each snapshot carries the rosters and inning limit
    so it can be replayed or persisted on its own.
    """
    inning: int = Field(default=1, ge=1)
    half: Half = Half.TOP
    outs: int = Field(default=0, ge=0, le=2)
    score: Score = Field(default_factory=Score)
    count: Count = Field(default_factory=Count)
    bases: Bases = Field(default_factory=Bases)
    rosters: dict[Team, list[str]]
    player_stats: dict[Team, dict[str, PlayerGameStats]]
    current_batter: str
    current_batter_index: int = Field(default=0, ge=0)
    # 1-based slot of the batter due up (or at bat) for each team
    next_batter: dict[Team, int] = Field(
        default_factory=lambda: {Team.HOME: 1, Team.AWAY: 1}
    )
    max_innings: int = Field(default=9, ge=1)
    game_ended: bool = False

    @property
    def is_top(self) -> bool:
        return self.half is Half.TOP

    @property
    def batting_team(self) -> Team:
        return Team.AWAY if self.half is Half.TOP else Team.HOME

    def stats_for(self, team: Team, player: str) -> PlayerGameStats:
        return self.player_stats[team][player]


# ---------------------------------------------------------------------------
# Finished game
# ---------------------------------------------------------------------------

class GameSummary(CamelModel):
    total_innings: int
    home_player_stats: dict[str, SummaryPlayerStats]
    away_player_stats: dict[str, SummaryPlayerStats]
    home_score: int
    away_score: int
    winner: Winner
    game_end_reason: EndReason


class GameRecord(CamelModel):
    """Document handed to the persistence collaborator for one game."""
    home_team: str
    away_team: str
    home_abbreviation: str
    away_abbreviation: str
    home_players: list[str]
    away_players: list[str]
    max_innings: int
    game_history: list[dict] = Field(default_factory=list)
    final_game_state: dict
    game_summary: GameSummary


class CareerStatsDelta(CamelModel):
    """Increment applied to one player's career line after a game."""
    name: str
    team: str
    games_played: int = 1
    at_bats: int = 0
    hits: int = 0
    runs: int = 0
    rbis: int = 0
    singles: int = 0
    doubles: int = 0
    triples: int = 0
    homers: int = 0
    total_bases: int = 0


class CareerStats(CamelModel):
    name: str
    teams: list[str] = Field(default_factory=list)
    games_played: int = 0
    at_bats: int = 0
    hits: int = 0
    runs: int = 0
    rbis: int = 0
    singles: int = 0
    doubles: int = 0
    triples: int = 0
    homers: int = 0
    total_bases: int = 0
    batting_average: float = 0
    slugging_percentage: float = 0
