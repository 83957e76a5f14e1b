from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .dialects import Dialect
from .discover import find_go_files
from .errors import ConfigurationError

_TRUTHY = {"1", "true", "yes", "on"}


def default_dialect() -> str | None:
    """Dialect selector from `GOTYPEWRITER_LANG`, if set."""
    return os.environ.get("GOTYPEWRITER_LANG") or None


def default_verbose() -> bool:
    """Override with `GOTYPEWRITER_VERBOSE=1`."""
    return os.environ.get("GOTYPEWRITER_VERBOSE", "").strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Config:
    paths: tuple[Path, ...]
    dialect: Dialect
    verbose: bool = False
    out: Path | None = None
    keep_going: bool = False
    jobs: int = 1
    elm_module: str = "Types"

    @classmethod
    def resolve(
        cls,
        *,
        dialect: str | None,
        files: list[str] | None = None,
        directory: str | None = None,
        recursive: bool = True,
        verbose: bool = False,
        out: str | None = None,
        keep_going: bool = False,
        jobs: int = 1,
        elm_module: str = "Types",
    ) -> "Config":
        """Validate CLI-level settings before any file is scanned.

        Explicit files override the directory; environment variables fill in
        the dialect and verbosity when the caller leaves them unset.
        """
        selector = dialect or default_dialect()
        if not selector:
            raise ConfigurationError("no dialect selected; pass --lang or set GOTYPEWRITER_LANG")
        d = Dialect.parse(selector)

        if files:
            paths = tuple(Path(f) for f in files)
        else:
            paths = tuple(find_go_files(directory or ".", recursive=recursive))
        if not paths:
            raise ConfigurationError(f"no Go source files found in {directory or '.'}")

        if jobs < 1:
            raise ConfigurationError(f"jobs must be at least 1, got {jobs}")
        if not elm_module or not all(part[:1].isupper() and part.isidentifier() for part in elm_module.split(".")):
            raise ConfigurationError(f"invalid Elm module name {elm_module!r}")

        out_path = Path(out) if out else None
        if out_path is not None:
            parent = out_path.parent if str(out_path.parent) else Path(".")
            if out_path.is_dir():
                raise ConfigurationError(f"output path is a directory: {out_path}")
            if not parent.is_dir() or not os.access(parent, os.W_OK):
                raise ConfigurationError(f"cannot write output to {out_path}")

        return cls(
            paths=paths,
            dialect=d,
            verbose=verbose or default_verbose(),
            out=out_path,
            keep_going=keep_going,
            jobs=jobs,
            elm_module=elm_module,
        )
