from __future__ import annotations

import os
from pathlib import Path


def default_cache_dir() -> Path:
    """Return the directory the compiled Go scan helper is cached in.

    Override with `GOTYPEWRITER_CACHE_DIR`.
    """
    override = os.environ.get("GOTYPEWRITER_CACHE_DIR")
    if override:
        return Path(override)

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.path.expanduser("~")
        return Path(base) / "gotypewriter" / "cache"
    return Path(os.path.expanduser("~/.cache/gotypewriter"))


def go_command() -> str:
    """Return the `go` executable used to build the scan helper.

    Override with `GOTYPEWRITER_GO`.
    """
    return os.environ.get("GOTYPEWRITER_GO") or "go"
