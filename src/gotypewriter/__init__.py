"""gotypewriter: convert Go type declarations into other languages' types."""

from __future__ import annotations

from . import errors
from .builder import build_registry
from .diagnostics import Diagnostics
from .dialects import Dialect, renderer_for
from .draw import draw
from .pipeline import RunResult, generate
from .registry import TypeRegistry
from .scanner import parse_source, scan_files

__all__ = [
    "Diagnostics",
    "Dialect",
    "RunResult",
    "TypeRegistry",
    "build_registry",
    "draw",
    "errors",
    "generate",
    "parse_source",
    "renderer_for",
    "scan_files",
]
