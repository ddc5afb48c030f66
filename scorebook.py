# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Score a party-baseball game from the terminal, or replay a saved script.

Usage:
    uv run scorebook.py play --home Sharks --away Jets --home-abbr SHK \\
        --away-abbr JET --home-players "Ann,Bo,Cy" --away-players "Di,Ed,Flo"
    uv run scorebook.py replay game.json

Commands while playing (one per line):
    1b 2b 3b hr     hits
    s               strike
    k               strikeout (adds the remaining strikes)
    out             batter out
    dp [1B|2B|3B]   double play, naming the runner put out if needed
    undo            back one play
    end             end the game at the current score
    quit            leave without saving
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import IO, Optional

from config import configure_logging, get_data_dir
from models import Base, EventType, ScoringEvent
from session import GameSession
from storage import GameStore, PlayerStore, StoreError
from summary import career_deltas, format_box_score
from validation import validate_setup

COMMANDS: dict[str, EventType] = {
    "1b": EventType.SINGLE,
    "2b": EventType.DOUBLE,
    "3b": EventType.TRIPLE,
    "hr": EventType.HOME_RUN,
    "s": EventType.STRIKE,
    "out": EventType.OUT,
    "dp": EventType.DOUBLE_PLAY,
}


def parse_command(line: str, strikes: int = 0) -> Optional[list[ScoringEvent]]:
    """Translate one input line into events; None if it is not a play.

    ``strikes`` is the current strike count, so ``k`` adds just enough
    strikes to retire the batter.
    """
    parts = line.strip().split()
    if not parts:
        return None
    word = parts[0].lower()
    if word == "k":
        return [ScoringEvent(type=EventType.STRIKE)] * (3 - strikes)
    if word not in COMMANDS:
        return None
    base = None
    if word == "dp" and len(parts) > 1:
        try:
            base = Base(parts[1].upper())
        except ValueError:
            return None
    return [ScoringEvent(type=COMMANDS[word], base=base)]


def run_interactive(session: GameSession, stdin: IO[str], stdout: IO[str]) -> bool:
    """Read commands until the game ends. Returns False if the scorer quit."""
    print(session.situation(), file=stdout)
    for line in stdin:
        word = line.strip().lower()
        if word == "quit":
            return False
        if word == "undo":
            if not session.undo():
                print("Nothing to undo", file=stdout)
        elif word == "end":
            session.call_game()
        else:
            events = parse_command(line, session.state.count.strikes)
            if events is None:
                if word:
                    print(f"Unknown command: {line.strip()}", file=stdout)
                continue
            if events[0].type is EventType.DOUBLE_PLAY and events[0].base is None \
                    and session.double_play_needs_base():
                print("Which runner was put out? Use: dp 1B|2B|3B", file=stdout)
                continue
            for event in events:
                if not session.dispatch(event):
                    print("Play not allowed now", file=stdout)
                    break
            if session.play_log:
                print(session.play_log[-1], file=stdout)
        print(session.situation(), file=stdout)
        if session.is_over:
            return True
    return session.is_over


def save_game(session: GameSession, data_dir: Path) -> str:
    record = session.finish()
    game_id = GameStore(data_dir).save(record, game_id=session.game_id)
    PlayerStore(data_dir).apply_game(game_id, career_deltas(record))
    return game_id


def cmd_play(args: argparse.Namespace) -> int:
    raw = {
        "homeTeam": args.home,
        "awayTeam": args.away,
        "homeAbbreviation": args.home_abbr,
        "awayAbbreviation": args.away_abbr,
        "homePlayers": [p for p in args.home_players.split(",") if p.strip()],
        "awayPlayers": [p for p in args.away_players.split(",") if p.strip()],
    }
    if args.innings is not None:
        raw["maxInnings"] = args.innings
    setup, error = validate_setup(raw)
    if setup is None:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    session = GameSession(setup)
    if not run_interactive(session, sys.stdin, sys.stdout):
        print("Game abandoned.")
        return 0

    record = session.finish()
    print()
    print(format_box_score(record))
    if args.save:
        try:
            game_id = save_game(session, args.data_dir)
        except StoreError as e:
            print(f"Error saving game: {e}", file=sys.stderr)
            return 1
        print(f"\nSaved game {game_id}")
    return 0


def replay(script: dict) -> GameSession:
    """Run a scripted game ``{"setup": {...}, "events": [...]}``.

    Each event is either an event object (``{"type": "double_play",
    "base": "1B"}``), a CLI command string (``"2b"``), ``"undo"`` or ``"end"``.
    """
    setup, error = validate_setup(script.get("setup", {}))
    if setup is None:
        raise ValueError(error)
    session = GameSession(setup)
    for item in script.get("events", []):
        if item == "undo":
            session.undo()
            continue
        if item == "end":
            session.call_game()
            continue
        if isinstance(item, str):
            events = parse_command(item, session.state.count.strikes)
            if events is None:
                raise ValueError(f"Unknown command in script: {item}")
        else:
            events = [ScoringEvent.model_validate(item)]
        for event in events:
            session.dispatch(event)
    return session


def cmd_replay(args: argparse.Namespace) -> int:
    try:
        script = json.loads(Path(args.file).read_text())
        session = replay(script)
    except (OSError, json.JSONDecodeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for line in session.play_log:
        print(line)
    print(session.situation())
    if session.is_over:
        print()
        print(format_box_score(session.finish()))
    print(json.dumps(session.summary().to_document(), indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Party-baseball scorebook.")
    parser.add_argument("--verbose", action="store_true", help="Log every play.")
    sub = parser.add_subparsers(dest="command", required=True)

    play = sub.add_parser("play", help="Score a game interactively.")
    play.add_argument("--home", required=True, help="Home team name.")
    play.add_argument("--away", required=True, help="Away team name.")
    play.add_argument("--home-abbr", required=True, help="Home abbreviation (<= 3 letters).")
    play.add_argument("--away-abbr", required=True, help="Away abbreviation (<= 3 letters).")
    play.add_argument("--home-players", required=True, help="Comma-separated batting order.")
    play.add_argument("--away-players", required=True, help="Comma-separated batting order.")
    play.add_argument("--innings", type=int, default=None, help="Inning limit (1-9).")
    play.add_argument("--save", action="store_true", help="Save the finished game.")
    play.add_argument("--data-dir", type=Path, default=get_data_dir(),
                      help="Directory for saved games and career stats.")
    play.set_defaults(func=cmd_play)

    rep = sub.add_parser("replay", help="Replay a scripted game from JSON.")
    rep.add_argument("file", help="Path to {setup, events} JSON.")
    rep.set_defaults(func=cmd_replay)

    args = parser.parse_args(argv)
    configure_logging(logging.INFO if args.verbose else None)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
