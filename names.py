# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Player-name helpers shared by setup validation and storage."""

from __future__ import annotations


def normalize_name(name: str) -> str:
    """Storage/comparison form of a player name: trimmed, single-spaced, lowercase."""
    if not name:
        return ""
    return " ".join(name.split()).lower()


def display_name(name: str) -> str:
    """Capitalize each word of a (possibly lowercased) player name."""
    if not name:
        return ""
    return " ".join(word[:1].upper() + word[1:] for word in normalize_name(name).split(" "))
