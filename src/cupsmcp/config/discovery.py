"""Locate cupsmcp.toml.

Lookup order:
  1. ``CUPSMCP_CONFIG`` (exclusive: if set, nothing else is tried)
  2. the working directory and each of its parents
  3. the per-user file ``$XDG_CONFIG_HOME/cupsmcp/cupsmcp.toml``

MCP clients start the server from arbitrary directories, so the per-user
file is what a desktop install normally relies on.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

CONFIG_FILENAME = "cupsmcp.toml"
CONFIG_ENV_VAR = "CUPSMCP_CONFIG"


def user_config_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "cupsmcp" / CONFIG_FILENAME


def _candidates(start: Path) -> Iterator[Path]:
    for directory in (start, *start.parents):
        yield directory / CONFIG_FILENAME
    yield user_config_path()


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file that applies when running from *start* (default: cwd)."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override).expanduser()
        return path if path.is_file() else None

    return next(
        (c for c in _candidates((start or Path.cwd()).resolve()) if c.is_file()),
        None,
    )
