"""Configuration constants for bookmark-lists."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

# Directory with the database. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/bookmark-lists").expanduser(),
    Path("~/.bookmark-lists").expanduser(),
    Path("~/.config/bookmark-lists").expanduser(),
]

DEFAULT_DATA_DIR: Path = DATA_DIRECTORIES[0]

DATABASE_FILENAME: str = "bookmarks.db"

ROOT_LIST_ID: int = 0
ROOT_LIST_NAME: str = "root"

# Overrides NavigationConfig.next_prev_wraparound_same_file when set.
WRAPAROUND_ENV_VAR: str = "BOOKMARK_LISTS_WRAPAROUND"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class NavigationConfig:
    """Settings consumed by bookmark navigation."""

    next_prev_wraparound_same_file: bool = True


def resolve_data_directory() -> Path:
    """Return the first existing data directory, or the default one."""
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DEFAULT_DATA_DIR


def load_navigation_config(environ: Mapping[str, str] | None = None) -> NavigationConfig:
    """Build the navigation config, honoring the environment override."""
    env = os.environ if environ is None else environ
    raw = env.get(WRAPAROUND_ENV_VAR)
    if raw is None:
        return NavigationConfig()

    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return NavigationConfig(next_prev_wraparound_same_file=True)
    if value in _FALSE_VALUES:
        return NavigationConfig(next_prev_wraparound_same_file=False)

    logger.warning("Ignoring {}={!r}: expected a boolean", WRAPAROUND_ENV_VAR, raw)
    return NavigationConfig()
