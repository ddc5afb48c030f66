"""Centralized configuration for environment variables."""

import logging
import os
from pathlib import Path

DATA_DIR_ENV = "SCOREBOOK_DATA_DIR"
LOG_LEVEL_ENV = "SCOREBOOK_LOG_LEVEL"
MAX_INNINGS_ENV = "SCOREBOOK_MAX_INNINGS"
PORT_ENV = "PORT"

DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data" / "scorebook"
DEFAULT_MAX_INNINGS = 9
DEFAULT_PORT = 5050


def get_data_dir() -> Path:
    """Return the directory holding saved games and career stats."""
    value = os.environ.get(DATA_DIR_ENV, "")
    return Path(value) if value else DEFAULT_DATA_DIR


def get_log_level() -> int:
    """Return the configured logging level, WARNING if unset or unknown."""
    name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def get_default_max_innings() -> int:
    """Inning limit used when a game setup does not name one."""
    try:
        return int(os.environ.get(MAX_INNINGS_ENV, DEFAULT_MAX_INNINGS))
    except ValueError:
        return DEFAULT_MAX_INNINGS


def get_port() -> int:
    try:
        return int(os.environ.get(PORT_ENV, DEFAULT_PORT))
    except ValueError:
        return DEFAULT_PORT


def configure_logging(level: int | None = None) -> None:
    """Configure root logging for an entry point."""
    logging.basicConfig(
        level=level if level is not None else get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
