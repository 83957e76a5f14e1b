from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import ParseError
from .decls import SourceFile
from .parser import parse_source, parse_sources

log = logging.getLogger(__name__)


@dataclass
class ScanResult:
    files: list[SourceFile] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)


def read_source(path: str | Path) -> str:
    """Read one Go file as UTF-8; every failure is a ParseError naming the file."""
    p = str(path)
    try:
        return Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(p, 1, e.start + 1, "file is not valid UTF-8") from e
    except OSError as e:
        raise ParseError(p, 0, 0, f"cannot read file: {e.strerror or e}") from e


def scan_file(path: str | Path) -> SourceFile:
    """Read and parse one Go file."""
    return parse_source(read_source(path), str(path))


def scan_files(paths: list[str | Path], *, jobs: int = 1) -> ScanResult:
    """Parse every file, collecting per-file parse errors instead of stopping.

    Readable files go to the Go helper in one batch. With `jobs > 1` the batch
    is split into `jobs` chunks parsed on a thread pool; results are still
    merged in input order so the model is the same as a sequential scan.
    """
    results: list[SourceFile | ParseError | None] = [None] * len(paths)
    pending: list[tuple[int, str, str]] = []
    for i, path in enumerate(paths):
        try:
            pending.append((i, str(path), read_source(path)))
        except ParseError as e:
            results[i] = e

    if jobs > 1 and len(pending) > 1:
        chunks = [pending[k::jobs] for k in range(jobs) if pending[k::jobs]]
        with ThreadPoolExecutor(max_workers=len(chunks)) as pool:
            parsed = list(pool.map(_parse_chunk, chunks))
    else:
        parsed = [_parse_chunk(pending)]
    for chunk in parsed:
        for i, result in chunk:
            results[i] = result

    out = ScanResult()
    for result in results:
        if isinstance(result, ParseError):
            log.debug("parse failed: %s", result)
            out.errors.append(result)
        elif result is not None:
            log.debug("scanned %s: package %s, %d type(s)", result.path, result.package, len(result.decls))
            out.files.append(result)
    return out


def _parse_chunk(chunk: list[tuple[int, str, str]]) -> list[tuple[int, SourceFile | ParseError]]:
    parsed = parse_sources([(path, source) for _, path, source in chunk])
    return [(i, result) for (i, _, _), result in zip(chunk, parsed)]
