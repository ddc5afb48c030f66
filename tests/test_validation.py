# /// script
# requires-python = ">=3.12"
# dependencies = ["pytest>=7.0", "pydantic>=2.0"]
# ///
"""Tests for game setup validation.

Verifies:
1. Well-formed setups are accepted and normalized
2. Team names, abbreviations and rosters are bounded
3. Duplicate players are rejected within and across teams
4. Inning limit bounds and environment default
5. Error messages name the offending field
"""

import sys
from pathlib import Path

# Ensure project root is on the path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from config import MAX_INNINGS_ENV
from names import display_name, normalize_name
from validation import GameSetup, validate_setup


def raw_setup(**overrides):
    data = {
        "homeTeam": "Sharks",
        "awayTeam": "Jets",
        "homeAbbreviation": "SHK",
        "awayAbbreviation": "JET",
        "homePlayers": ["Hank", "Hal"],
        "awayPlayers": ["Abe", "Amy"],
        "maxInnings": 5,
    }
    data.update(overrides)
    return data


# ===========================================================================
# Test: Accepted setups
# ===========================================================================

class TestValidSetup:
    def test_valid_setup(self):
        setup, error = validate_setup(raw_setup())
        assert error is None
        assert setup.home_team == "Sharks"
        assert setup.max_innings == 5
        assert setup.away_players == ["Abe", "Amy"]
        assert setup.home_abbreviation == "SHK"
        assert setup.away_team == "Jets"

    def test_snake_case_input_accepted(self):
        setup = GameSetup(
            home_team="A", away_team="B", home_abbreviation="A", away_abbreviation="B",
            home_players=["x"], away_players=["y"], max_innings=1,
        )
        assert setup.max_innings == 1

    def test_whitespace_normalized(self):
        setup, error = validate_setup(raw_setup(
            homeTeam="  Sharks ", awayAbbreviation=" jet ",
            homePlayers=["  Hank   Aaron ", "Hal"],
        ))
        assert error is None
        assert setup.home_team == "Sharks"
        assert setup.away_abbreviation == "JET"
        assert setup.home_players == ["Hank Aaron", "Hal"]

    def test_nine_players_allowed(self):
        players = [f"P{i}" for i in range(9)]
        setup, error = validate_setup(raw_setup(homePlayers=players))
        assert error is None
        assert len(setup.home_players) == 9

    def test_document_is_camel_case(self):
        setup, _ = validate_setup(raw_setup())
        doc = setup.to_document()
        assert doc["homeAbbreviation"] == "SHK"
        assert doc["maxInnings"] == 5


# ===========================================================================
# Test: Rejected setups
# ===========================================================================

class TestInvalidSetup:
    def test_team_name_too_long(self):
        setup, error = validate_setup(raw_setup(homeTeam="A" * 14))
        assert setup is None
        assert "homeTeam" in error

    def test_team_name_bad_characters(self):
        setup, error = validate_setup(raw_setup(awayTeam="Jets!"))
        assert setup is None
        assert "awayTeam" in error
        assert "letters, digits and spaces" in error

    def test_empty_team_name(self):
        setup, error = validate_setup(raw_setup(homeTeam="   "))
        assert setup is None
        assert "homeTeam" in error

    @pytest.mark.parametrize("abbr", ["SHRK", "S1", "", "S-K"])
    def test_bad_abbreviation(self, abbr):
        setup, error = validate_setup(raw_setup(homeAbbreviation=abbr))
        assert setup is None
        assert "homeAbbreviation" in error

    def test_empty_roster(self):
        setup, error = validate_setup(raw_setup(awayPlayers=[]))
        assert setup is None
        assert "awayPlayers" in error

    def test_too_many_players(self):
        setup, error = validate_setup(raw_setup(homePlayers=[f"P{i}" for i in range(10)]))
        assert setup is None
        assert "homePlayers" in error

    def test_blank_player_name(self):
        setup, error = validate_setup(raw_setup(homePlayers=["Hank", "  "]))
        assert setup is None
        assert "non-empty" in error

    def test_duplicate_across_teams_case_insensitive(self):
        setup, error = validate_setup(raw_setup(awayPlayers=["Abe", "hank"]))
        assert setup is None
        assert "listed more than once" in error
        assert "Sharks" in error

    def test_duplicate_within_team(self):
        setup, error = validate_setup(raw_setup(homePlayers=["Hank", "HANK "]))
        assert setup is None
        assert "listed more than once" in error

    @pytest.mark.parametrize("innings", [0, 10])
    def test_inning_limit_bounds(self, innings):
        setup, error = validate_setup(raw_setup(maxInnings=innings))
        assert setup is None
        assert "maxInnings" in error

    def test_missing_fields_all_reported(self):
        setup, error = validate_setup({})
        assert setup is None
        for field in ("homeTeam", "awayTeam", "homePlayers", "awayPlayers"):
            assert field in error


# ===========================================================================
# Test: Defaults and name helpers
# ===========================================================================

def test_default_inning_limit(monkeypatch):
    monkeypatch.delenv(MAX_INNINGS_ENV, raising=False)
    data = raw_setup()
    del data["maxInnings"]
    setup, _ = validate_setup(data)
    assert setup.max_innings == 9


def test_default_inning_limit_from_env(monkeypatch):
    monkeypatch.setenv(MAX_INNINGS_ENV, "3")
    data = raw_setup()
    del data["maxInnings"]
    setup, _ = validate_setup(data)
    assert setup.max_innings == 3


def test_name_helpers():
    assert normalize_name("  Hank   AARON ") == "hank aaron"
    assert normalize_name("") == ""
    assert display_name("hank aaron") == "Hank Aaron"
    assert display_name("  mcGee ") == "Mcgee"
