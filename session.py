# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Session controller for one game.

Owns the single current ``GameState`` and the undo ``HistoryStack``. Every
scorer action goes through here: the pre-event snapshot is pushed, the
engine computes the next snapshot, and a play-by-play line is logged.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

import engine
from history import HistoryStack
from models import EventType, GameRecord, GameState, GameSummary, ScoringEvent
from summary import build_game_record, reduce_summary
from validation import GameSetup

logger = logging.getLogger(__name__)


class GameNotOverError(RuntimeError):
    """Raised when a summary is requested for a game still in progress."""


class EventRejected(ValueError):
    """Raised by ``dispatch(strict=True)`` when an event cannot be applied."""


class GameSession:
    """Controller holding the current snapshot and its undo history."""

    def __init__(self, setup: GameSetup) -> None:
        self.setup = setup
        self.state: GameState = engine.initial_state(
            setup.home_players, setup.away_players, setup.max_innings,
        )
        self.history = HistoryStack()
        self.play_log: list[str] = []
        # one id for the life of the game, so a retried save stays one game
        self.game_id = uuid.uuid4().hex[:12]
        logger.info(
            "Game started: %s at %s, %d innings",
            setup.away_team, setup.home_team, setup.max_innings,
        )

    # -- queries -----------------------------------------------------------

    @property
    def is_over(self) -> bool:
        return self.state.game_ended

    @property
    def can_undo(self) -> bool:
        return bool(self.history)

    def can_double_play(self) -> bool:
        return engine.can_double_play(self.state)

    def double_play_needs_base(self) -> bool:
        return engine.double_play_needs_base(self.state)

    def situation(self) -> str:
        return engine.situation_display(
            self.state, self.setup.home_abbreviation, self.setup.away_abbreviation,
        )

    # -- scorer actions ----------------------------------------------------

    def dispatch(self, event: ScoringEvent, strict: bool = False) -> bool:
        """Apply one event. Returns False if it was refused.

        Events are refused once the game is over, and double plays are
        refused when no runner is on, with two outs, or when the runner
        cannot be determined. With ``strict=True`` a refusal raises
        ``EventRejected`` instead.
        """
        reason = self._refusal_reason(event)
        if reason:
            logger.warning("Event %s refused: %s", event.type.value, reason)
            if strict:
                raise EventRejected(reason)
            return False

        before = self.state
        self.history.push(before)
        self.state = engine.apply_event(before, event)
        description = engine.describe_play(before, event, self.state)
        self.play_log.append(description)
        logger.info("%s", description)
        if self.state.game_ended:
            logger.info("Game over: %s", engine.score_display(self.state))
        return True

    def undo(self) -> bool:
        """Step back one play. Returns False when there is nothing to undo."""
        previous = self.history.pop()
        if previous is None:
            return False
        self.state = previous
        if self.play_log:
            undone = self.play_log.pop()
            logger.info("Undid: %s", undone)
        return True

    def call_game(self) -> None:
        """End the game early at the current score."""
        if self.state.game_ended:
            return
        self.history.push(self.state)
        self.state = engine.call_game(self.state)
        self.play_log.append(f"Game called. Final: {engine.score_display(self.state)}")
        logger.info("Game called at %s", engine.situation_display(self.state))

    # -- results -----------------------------------------------------------

    def summary(self) -> GameSummary:
        return reduce_summary(self.state, self.setup.max_innings)

    def finish(self) -> GameRecord:
        """Return the document to persist for this finished game."""
        if not self.state.game_ended:
            raise GameNotOverError("Game has not ended")
        return build_game_record(self.setup, self.history.snapshots(), self.state)

    # -- helpers -----------------------------------------------------------

    def _refusal_reason(self, event: ScoringEvent) -> Optional[str]:
        if self.state.game_ended:
            return "game is over"
        if event.type is EventType.DOUBLE_PLAY:
            if not engine.can_double_play(self.state):
                return "double play needs a runner on base and fewer than two outs"
            if engine.resolve_double_play_base(self.state, event.base) is None:
                if event.base is not None:
                    return f"no runner on {event.base.value}"
                return "choose which runner was put out"
        return None
