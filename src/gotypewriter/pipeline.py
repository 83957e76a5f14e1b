from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO

from .builder import build_registry
from .diagnostics import Diagnostics
from .dialects import Dialect
from .draw import draw
from .errors import ConfigurationError, ParseError, ParseErrors
from .registry import TypeRegistry
from .scanner import scan_files

log = logging.getLogger(__name__)


@dataclass
class RunResult:
    registry: TypeRegistry
    diagnostics: Diagnostics
    bytes_written: int
    # Parse failures tolerated with keep_going.
    errors: list[ParseError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def generate(
    paths: list[str | Path],
    dialect: Dialect | str,
    sink: IO,
    *,
    verbose: bool = False,
    keep_going: bool = False,
    jobs: int = 1,
    elm_module: str = "Types",
) -> RunResult:
    """Scan `paths`, build the type model and write `dialect` output to `sink`.

    Parse errors are collected across all files. Without `keep_going` they
    abort the run before anything is written; with it, the files that parsed
    are rendered and the errors are returned on the result.
    """
    d = Dialect.parse(dialect)
    if not paths:
        raise ConfigurationError("no Go source files to scan")

    diagnostics = Diagnostics(verbose=verbose)
    scan = scan_files(list(paths), jobs=jobs)
    if scan.errors and (not keep_going or not scan.files):
        raise ParseErrors(scan.errors)

    registry = build_registry(scan.files, diagnostics)
    written = draw(registry, sink, d, diagnostics=diagnostics, elm_module=elm_module)
    log.info(
        "wrote %d type(s) from %d file(s); %d warning(s), %d parse error(s)",
        len(registry.exported()),
        len(scan.files),
        len(diagnostics),
        len(scan.errors),
    )
    return RunResult(registry=registry, diagnostics=diagnostics, bytes_written=written, errors=scan.errors)
