# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Game summary reducer.

Turns the final snapshot of a finished game into the summary and the
persisted game document, and derives the per-player career increments
that the player store applies once per saved game.
"""

from __future__ import annotations

from models import (
    CareerStatsDelta,
    EndReason,
    GameRecord,
    GameState,
    GameSummary,
    Half,
    SummaryPlayerStats,
    Team,
    Winner,
)
from engine import game_state_to_dict


def innings_played(state: GameState) -> int:
    """Innings completed: the current inning only counts once its bottom half started."""
    return state.inning - 1 if state.half is Half.TOP else state.inning


def decide_winner(home_score: int, away_score: int) -> Winner:
    if home_score > away_score:
        return Winner.HOME
    if away_score > home_score:
        return Winner.AWAY
    return Winner.TIE


def decide_end_reason(winner: Winner, total_innings: int, half: Half,
                      max_innings: int) -> EndReason:
    if winner is Winner.TIE:
        return EndReason.TIE_GAME
    if total_innings > max_innings:
        return EndReason.EXTRA_INNINGS
    if winner is Winner.HOME and half is Half.BOTTOM and total_innings == max_innings:
        return EndReason.WALK_OFF
    return EndReason.REGULATION


def _final_lines(state: GameState, team: Team) -> dict[str, SummaryPlayerStats]:
    lines = {}
    for name, stats in state.player_stats[team].items():
        lines[name] = SummaryPlayerStats(
            **stats.model_dump(),
            batting_average=stats.batting_average,
            slugging_percentage=stats.slugging_percentage,
        )
    return lines


def reduce_summary(final_state: GameState, max_innings: int | None = None) -> GameSummary:
    """Fold the final snapshot into a ``GameSummary``."""
    if max_innings is None:
        max_innings = final_state.max_innings
    total = innings_played(final_state)
    winner = decide_winner(final_state.score.home, final_state.score.away)
    return GameSummary(
        total_innings=total,
        home_player_stats=_final_lines(final_state, Team.HOME),
        away_player_stats=_final_lines(final_state, Team.AWAY),
        home_score=final_state.score.home,
        away_score=final_state.score.away,
        winner=winner,
        game_end_reason=decide_end_reason(winner, total, final_state.half, max_innings),
    )


def build_game_record(setup, history: list[GameState], final_state: GameState) -> GameRecord:
    """Assemble the document handed to the persistence layer.

    Args:
        setup: The ``GameSetup`` the game was started from.
        history: Every snapshot taken before an event, oldest first.
        final_state: The snapshot in which the game ended.
    """
    return GameRecord(
        home_team=setup.home_team,
        away_team=setup.away_team,
        home_abbreviation=setup.home_abbreviation,
        away_abbreviation=setup.away_abbreviation,
        home_players=list(setup.home_players),
        away_players=list(setup.away_players),
        max_innings=setup.max_innings,
        game_history=[game_state_to_dict(s) for s in history] + [game_state_to_dict(final_state)],
        final_game_state=game_state_to_dict(final_state),
        game_summary=reduce_summary(final_state, setup.max_innings),
    )


def career_deltas(record: GameRecord) -> list[CareerStatsDelta]:
    """One career increment per player who appeared in the game."""
    deltas = []
    summary = record.game_summary
    for team_name, lines in ((record.home_team, summary.home_player_stats),
                             (record.away_team, summary.away_player_stats)):
        for name, line in lines.items():
            deltas.append(CareerStatsDelta(
                name=name,
                team=team_name,
                at_bats=line.at_bats,
                hits=line.hits,
                runs=line.runs,
                rbis=line.rbis,
                singles=line.singles,
                doubles=line.doubles,
                triples=line.triples,
                homers=line.homers,
                total_bases=line.total_bases,
            ))
    return deltas


def format_box_score(record: GameRecord) -> str:
    """Generate a formatted box score string."""
    summary = record.game_summary
    lines = []

    lines.append("=" * 60)
    lines.append("FINAL")
    lines.append("=" * 60)
    lines.append(f"{record.away_team:<16} {record.away_abbreviation:<4} {summary.away_score:>3}")
    lines.append(f"{record.home_team:<16} {record.home_abbreviation:<4} {summary.home_score:>3}")
    winner = {
        Winner.HOME: record.home_team,
        Winner.AWAY: record.away_team,
        Winner.TIE: "Tie",
    }[summary.winner]
    lines.append("")
    lines.append(f"Winner: {winner} ({summary.game_end_reason.value}, "
                 f"{summary.total_innings} innings)")

    for team_name, stats in ((record.away_team, summary.away_player_stats),
                             (record.home_team, summary.home_player_stats)):
        lines.append(f"\n{team_name} Batting:")
        lines.append(f"  {'Name':<20} {'AB':>3} {'H':>3} {'R':>3} {'RBI':>4} {'HR':>3} {'AVG':>6} {'SLG':>6}")
        lines.append(f"  {'-'*20} {'-'*3} {'-'*3} {'-'*3} {'-'*4} {'-'*3} {'-'*6} {'-'*6}")
        for name, s in stats.items():
            lines.append(
                f"  {name:<20} {s.at_bats:>3} {s.hits:>3} {s.runs:>3} {s.rbis:>4} "
                f"{s.homers:>3} {s.batting_average:>6.3f} {s.slugging_percentage:>6.3f}"
            )

    return "\n".join(lines)
