# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Scorekeeping state machine.

Given the current ``GameState`` and one ``ScoringEvent`` the engine computes
the next state: baserunner advancement, run and RBI credit, batting-order
rotation, half-inning transitions and game-end / walk-off detection.

``apply_event`` is pure. It copies the input snapshot, edits the copy and
returns it, so earlier snapshots stay valid for undo and replay.

Batting order is tracked with one counter per team holding the 1-based
slot of that team's batter at the plate (or due up, while the team is in
the field). The active batter index is always ``(counter - 1) % len(roster)``.
A team's counter only moves when that team makes a plate appearance.
"""

from __future__ import annotations

from typing import Optional

from models import (
    HIT_BASES,
    Base,
    Bases,
    Count,
    EventType,
    GameState,
    Half,
    PlayerGameStats,
    ScoringEvent,
    Team,
)


_BASE_NUMBER = {Base.FIRST: 1, Base.SECOND: 2, Base.THIRD: 3}
_NUMBER_BASE = {n: b for b, n in _BASE_NUMBER.items()}

_HIT_COUNTER = {1: "singles", 2: "doubles", 3: "triples", 4: "homers"}


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def initial_state(home_players: list[str], away_players: list[str],
                  max_innings: int = 9) -> GameState:
    """Build the opening snapshot: top of the 1st, away leadoff hitter up."""
    rosters = {Team.HOME: list(home_players), Team.AWAY: list(away_players)}
    return GameState(
        rosters=rosters,
        player_stats={
            team: {name: PlayerGameStats() for name in players}
            for team, players in rosters.items()
        },
        current_batter=rosters[Team.AWAY][0],
        current_batter_index=0,
        next_batter={Team.HOME: 1, Team.AWAY: 1},
        max_innings=max_innings,
    )


# ---------------------------------------------------------------------------
# Rule predicates
# ---------------------------------------------------------------------------

def check_game_end(inning: int, is_top: bool, home_score: int, away_score: int,
                   max_innings: int) -> bool:
    """Decide whether the game is over on entering a new half-inning."""
    if is_top and inning > max_innings:
        # tied after regulation means extra innings
        return home_score != away_score
    if not is_top and inning == max_innings and home_score > away_score:
        # home already leads, no need to bat
        return True
    return False


def check_walk_off(inning: int, is_top: bool, home_score: int, away_score: int,
                   max_innings: int) -> bool:
    """True when the home team has just taken the lead in its last turn at bat."""
    return (not is_top) and home_score > away_score and inning >= max_innings


def can_double_play(state: GameState) -> bool:
    """A double play needs at least one runner and fewer than two outs."""
    return (not state.game_ended) and state.outs < 2 and state.bases.runner_count() >= 1


def double_play_needs_base(state: GameState) -> bool:
    """True when the scorer must say which runner was doubled off."""
    return can_double_play(state) and state.outs == 0 and state.bases.runner_count() >= 2


def resolve_double_play_base(state: GameState, requested: Optional[Base] = None) -> Optional[Base]:
    """Return the base whose runner is put out, or None if the play is invalid.

    Without an explicit base the runner is picked automatically when only
    one runner is on, or when there is already one out (the play ends the
    half-inning and clears the bases anyway; the lead runner is taken).
    """
    if not can_double_play(state):
        return None
    if requested is not None:
        return requested if state.bases.get(requested) else None
    occupied = state.bases.occupied()
    if len(occupied) == 1 or state.outs >= 1:
        return occupied[0]
    return None


# ---------------------------------------------------------------------------
# Runner advancement
# ---------------------------------------------------------------------------

def advance_runners(bases: Bases, num_bases: int, batter: str) -> tuple[Bases, list[str]]:
    """Move every runner and the batter ``num_bases`` bases.

    Runners pushed past third score. The batter reaches base ``num_bases``
    (and scores on a home run). Returns the new bases and the names of
    everyone who scored, lead runner first.
    """
    advanced = Bases()
    scored: list[str] = []
    movers = [(_BASE_NUMBER[b], bases.get(b)) for b in bases.occupied()]
    movers.append((0, batter))
    for start, runner in movers:
        target = start + num_bases
        if target >= 4:
            scored.append(runner)
        else:
            advanced.set(_NUMBER_BASE[target], runner)
    return advanced, scored


# ---------------------------------------------------------------------------
# Event application
# ---------------------------------------------------------------------------

def apply_event(state: GameState, event: ScoringEvent) -> GameState:
    """Return the state that follows ``event``. The input is never modified.

    Events after the game has ended, and double plays whose precondition
    does not hold, leave the state unchanged.
    """
    new = state.model_copy(deep=True)
    if state.game_ended:
        return new

    if event.type in HIT_BASES:
        _record_hit(new, HIT_BASES[event.type])
    elif event.type is EventType.STRIKE:
        _record_strike(new)
    elif event.type is EventType.OUT:
        _record_out(new, 1)
    elif event.type is EventType.DOUBLE_PLAY:
        base = resolve_double_play_base(state, event.base)
        if base is None:
            return new
        new.bases.set(base, None)
        _record_out(new, 2)
    return new


def call_game(state: GameState) -> GameState:
    """End the game where it stands (the scorer stopped play)."""
    new = state.model_copy(deep=True)
    new.game_ended = True
    return new


def _record_hit(state: GameState, num_bases: int) -> None:
    team = state.batting_team
    batter = state.current_batter
    stats = state.stats_for(team, batter)

    state.bases, scored = advance_runners(state.bases, num_bases, batter)
    for runner in scored:
        state.stats_for(team, runner).runs += 1
    state.score.add(team, len(scored))

    stats.at_bats += 1
    stats.hits += 1
    stats.total_bases += num_bases
    setattr(stats, _HIT_COUNTER[num_bases], getattr(stats, _HIT_COUNTER[num_bases]) + 1)
    # a homer credits the batter's own run as well
    stats.rbis += len(scored)

    state.count = Count()
    _advance_batter(state, team)

    if check_walk_off(state.inning, state.is_top, state.score.home,
                      state.score.away, state.max_innings):
        state.game_ended = True


def _record_strike(state: GameState) -> None:
    if state.count.strikes < 2:
        state.count.strikes += 1
        return
    _record_out(state, 1)


def _record_out(state: GameState, outs_made: int) -> None:
    team = state.batting_team
    state.stats_for(team, state.current_batter).at_bats += 1
    state.count = Count()

    outs = state.outs + outs_made
    if outs < 3:
        state.outs = outs
        _advance_batter(state, team)
        return
    _end_half_inning(state)


def _advance_batter(state: GameState, team: Team) -> None:
    state.next_batter[team] += 1
    _set_batter_from_slot(state, team)


def _set_batter_from_slot(state: GameState, team: Team) -> None:
    roster = state.rosters[team]
    state.current_batter_index = (state.next_batter[team] - 1) % len(roster)
    state.current_batter = roster[state.current_batter_index]


def _end_half_inning(state: GameState) -> None:
    retiring = state.batting_team
    state.outs = 0
    state.bases = Bases()
    state.count = Count()
    # the team resumes with the hitter after the one who made the last out
    state.next_batter[retiring] += 1

    if state.half is Half.TOP:
        state.half = Half.BOTTOM
    else:
        state.half = Half.TOP
        state.inning += 1

    _set_batter_from_slot(state, state.batting_team)

    if check_game_end(state.inning, state.is_top, state.score.home,
                      state.score.away, state.max_innings):
        state.game_ended = True


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def ordinal(n: int) -> str:
    """Return ordinal string for an integer (1st, 2nd, 3rd, etc.)."""
    if 11 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def score_display(state: GameState, home_label: str = "Home", away_label: str = "Away") -> str:
    return f"{away_label} {state.score.away} - {home_label} {state.score.home}"


def situation_display(state: GameState, home_label: str = "Home",
                      away_label: str = "Away") -> str:
    """One-line situation, e.g. ``Top 3rd, 1 out, runner on 2nd, 0-2 count``."""
    if state.game_ended:
        return f"Final: {score_display(state, home_label, away_label)}"
    half_str = "Top" if state.is_top else "Bot"
    on_bases = [ordinal(_BASE_NUMBER[b]) for b in reversed(state.bases.occupied())]
    if not on_bases:
        runners_str = "bases empty"
    elif len(on_bases) == 3:
        runners_str = "bases loaded"
    else:
        runners_str = ("runner on " if len(on_bases) == 1 else "runners on ") + ", ".join(on_bases)
    return (
        f"{half_str} {ordinal(state.inning)}, {state.outs} out, {runners_str}, "
        f"{state.count.balls}-{state.count.strikes} count, "
        f"{score_display(state, home_label, away_label)}, "
        f"{state.current_batter} batting"
    )


def describe_play(before: GameState, event: ScoringEvent, after: GameState) -> str:
    """Play-by-play text for one event, derived from the two snapshots."""
    batter = before.current_batter
    team = before.batting_team

    if before.game_ended:
        return "Game is over; play not recorded"

    if event.type in HIT_BASES:
        desc = f"{batter} {_HIT_COUNTER[HIT_BASES[event.type]]}"
        runs = after.score.get(team) - before.score.get(team)
        if event.type is EventType.HOME_RUN and runs > 1:
            desc += " (grand slam)" if runs == 4 else f" ({runs}-run homer)"
    elif event.type is EventType.STRIKE:
        if after.count.strikes > before.count.strikes:
            desc = f"Strike {after.count.strikes} on {batter}"
        else:
            desc = f"{batter} strikes out"
    elif event.type is EventType.OUT:
        desc = f"{batter} is out"
    else:
        base = resolve_double_play_base(before, event.base)
        if base is None:
            return "Double play not recorded"
        runner = before.bases.get(base)
        desc = f"{batter} grounds into a double play, {runner} out at {base.value}"

    scorers = [
        name for name in before.rosters[team]
        if after.stats_for(team, name).runs > before.stats_for(team, name).runs
    ]
    parts = [desc] + [f"{name} scores" for name in scorers]
    text = ". ".join(parts)
    if scorers:
        text += f" [{score_display(after)}]"

    if after.game_ended:
        if check_walk_off(after.inning, after.is_top, after.score.home,
                          after.score.away, after.max_innings) and scorers:
            text += ". Walk-off!"
        text += " Game over."
    elif (after.inning, after.half) != (before.inning, before.half):
        half_str = "Top" if after.is_top else "Bottom"
        text += f". Side retired. {half_str} of the {ordinal(after.inning)}"
    return text


# ---------------------------------------------------------------------------
# Serialization support
# ---------------------------------------------------------------------------

def game_state_to_dict(state: GameState) -> dict:
    """Flatten a snapshot into the persisted game-state document."""
    def team_stats(team: Team) -> dict:
        return {name: s.to_document() for name, s in state.player_stats[team].items()}

    return {
        "inning": state.inning,
        "isTopInning": state.is_top,
        "outs": state.outs,
        "homeScore": state.score.home,
        "awayScore": state.score.away,
        "homePlayerStats": team_stats(Team.HOME),
        "awayPlayerStats": team_stats(Team.AWAY),
        "balls": state.count.balls,
        "strikes": state.count.strikes,
        "firstBase": state.bases.first,
        "secondBase": state.bases.second,
        "thirdBase": state.bases.third,
        "currentBatter": state.current_batter,
        "currentBatterIndex": state.current_batter_index,
        "currentBatterIsHome": state.batting_team is Team.HOME,
        "nextHomeBatter": state.next_batter[Team.HOME],
        "nextAwayBatter": state.next_batter[Team.AWAY],
        "gameEnded": state.game_ended,
        "maxInnings": state.max_innings,
        "homePlayers": list(state.rosters[Team.HOME]),
        "awayPlayers": list(state.rosters[Team.AWAY]),
    }


def game_state_from_dict(doc: dict) -> GameState:
    """Rebuild a snapshot from :func:`game_state_to_dict` output."""
    return GameState(
        inning=doc["inning"],
        half=Half.TOP if doc["isTopInning"] else Half.BOTTOM,
        outs=doc["outs"],
        score={"home": doc["homeScore"], "away": doc["awayScore"]},
        count={"balls": doc.get("balls", 0), "strikes": doc.get("strikes", 0)},
        bases={
            "first": doc.get("firstBase"),
            "second": doc.get("secondBase"),
            "third": doc.get("thirdBase"),
        },
        rosters={Team.HOME: doc["homePlayers"], Team.AWAY: doc["awayPlayers"]},
        player_stats={
            Team.HOME: doc.get("homePlayerStats", {}),
            Team.AWAY: doc.get("awayPlayerStats", {}),
        },
        current_batter=doc["currentBatter"],
        current_batter_index=doc["currentBatterIndex"],
        next_batter={Team.HOME: doc["nextHomeBatter"], Team.AWAY: doc["nextAwayBatter"]},
        max_innings=doc.get("maxInnings", 9),
        game_ended=doc.get("gameEnded", False),
    )
