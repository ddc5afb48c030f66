# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""File-based persistence for saved games and career statistics."""

from storage.store import GameStore, PlayerStore, StoreError

__all__ = ["GameStore", "PlayerStore", "StoreError"]
