from __future__ import annotations

import os
from pathlib import Path

from .errors import ConfigurationError

_SKIP_DIRS = {"vendor", "testdata", "node_modules"}


def find_go_files(root: str | Path, *, recursive: bool = True) -> list[Path]:
    """Go source files under `root`, sorted, excluding `_test.go` files.

    Hidden directories, `vendor` and `testdata` are not descended into.
    """
    root = Path(root)
    if not root.is_dir():
        raise ConfigurationError(f"not a directory: {root}")

    out: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        if recursive:
            dirnames[:] = sorted(d for d in dirnames if not d.startswith((".", "_")) and d not in _SKIP_DIRS)
        else:
            dirnames[:] = []
        for name in filenames:
            if name.endswith(".go") and not name.endswith("_test.go"):
                out.append(Path(dirpath) / name)
    return sorted(out)
