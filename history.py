# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Undo history for a game in progress.

Holds the snapshot taken before each applied event. Snapshots are never
modified after they are produced by the engine, so they are stored as-is.
"""

from __future__ import annotations

from typing import Iterator, Optional

from models import GameState


class HistoryStack:
    """Stack of prior snapshots with single-step undo."""

    def __init__(self) -> None:
        self._states: list[GameState] = []

    def push(self, state: GameState) -> None:
        self._states.append(state)

    def pop(self) -> Optional[GameState]:
        """Remove and return the latest snapshot, or None when empty."""
        if not self._states:
            return None
        return self._states.pop()

    def snapshots(self) -> list[GameState]:
        """All snapshots, oldest first."""
        return list(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def __bool__(self) -> bool:
        return bool(self._states)

    def __iter__(self) -> Iterator[GameState]:
        return iter(self._states)
