# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Game setup validation.

The roster/setup screen hands over two team names, two abbreviations, two
ordered player lists and an inning limit. ``GameSetup`` enforces:

- Team names: 1-13 characters, letters, digits and spaces only
- Abbreviations: 1-3 letters (stored uppercase)
- Rosters: 1-9 players each, blank entries rejected
- No player may appear twice, on the same team or across both teams
  (compared after trimming, collapsing whitespace and lowercasing)
- Inning limit: 1-9

Validation errors name the field that failed and what was expected.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import ConfigDict, Field, ValidationError, field_validator, model_validator

from config import get_default_max_innings
from models import CamelModel
from names import normalize_name

MAX_TEAM_NAME_LENGTH = 13
MAX_ABBREVIATION_LENGTH = 3
MAX_PLAYERS = 9
MAX_INNINGS = 9

_TEAM_NAME_RE = re.compile(r"^[A-Za-z0-9 ]+$")
_ABBREVIATION_RE = re.compile(r"^[A-Za-z]+$")


class GameSetup(CamelModel):
    """Validated input for starting a game."""
    model_config = ConfigDict(frozen=True)

    home_team: str = Field(min_length=1, max_length=MAX_TEAM_NAME_LENGTH)
    away_team: str = Field(min_length=1, max_length=MAX_TEAM_NAME_LENGTH)
    home_abbreviation: str = Field(min_length=1, max_length=MAX_ABBREVIATION_LENGTH)
    away_abbreviation: str = Field(min_length=1, max_length=MAX_ABBREVIATION_LENGTH)
    home_players: list[str] = Field(min_length=1, max_length=MAX_PLAYERS)
    away_players: list[str] = Field(min_length=1, max_length=MAX_PLAYERS)
    max_innings: int = Field(default_factory=get_default_max_innings, ge=1, le=MAX_INNINGS)

    @field_validator("home_team", "away_team", mode="before")
    @classmethod
    def validate_team_name(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        v = v.strip()
        if v and not _TEAM_NAME_RE.match(v):
            raise ValueError("Team name may only contain letters, digits and spaces")
        return v

    @field_validator("home_abbreviation", "away_abbreviation", mode="before")
    @classmethod
    def validate_abbreviation(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        v = v.strip()
        if v and not _ABBREVIATION_RE.match(v):
            raise ValueError("Abbreviation may only contain letters")
        return v.upper()

    @field_validator("home_players", "away_players", mode="before")
    @classmethod
    def strip_player_names(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        names = []
        for name in v:
            if not isinstance(name, str) or not name.strip():
                raise ValueError("Player names must be non-empty strings")
            names.append(" ".join(name.split()))
        return names

    @model_validator(mode="after")
    def check_unique_players(self) -> GameSetup:
        seen: dict[str, str] = {}
        for team, players in ((self.home_team, self.home_players),
                              (self.away_team, self.away_players)):
            for name in players:
                key = normalize_name(name)
                if key in seen:
                    raise ValueError(
                        f"Player '{name}' is listed more than once "
                        f"(already on {seen[key]})"
                    )
                seen[key] = team
        return self


def validate_setup(data: dict[str, Any]) -> tuple[Optional[GameSetup], Optional[str]]:
    """Validate raw setup input.

    Returns:
        Tuple of (setup, error_message). Exactly one of them is None.
    """
    try:
        return GameSetup.model_validate(data), None
    except ValidationError as e:
        return None, format_validation_error(e)


def format_validation_error(exc: ValidationError) -> str:
    """Format a pydantic validation error as ``field: message; ...``."""
    parts = []
    for error in exc.errors():
        loc = ".".join(str(x) for x in error["loc"]) or "setup"
        parts.append(f"{loc}: {error['msg']}")
    return "; ".join(parts)
