"""Filesystem locations for content-router data."""

import os
from pathlib import Path


def get_user_data_dir() -> Path:
    """Return the per-user data directory.

    Honours ``CONTENTROUTER_HOME``; defaults to ``~/.contentrouter``.
    """
    override = os.getenv("CONTENTROUTER_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".contentrouter"


def get_default_state_file() -> Path:
    return get_user_data_dir() / "state.json"
