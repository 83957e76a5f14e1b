"""Go source scanning: go/parser helper, JSON decoding and multi-file scan."""

from __future__ import annotations

from .decls import FieldDecl, SourceFile, TypeDecl
from .parser import parse_source, parse_sources
from .scan import ScanResult, scan_file, scan_files

__all__ = [
    "FieldDecl",
    "ScanResult",
    "SourceFile",
    "TypeDecl",
    "parse_source",
    "parse_sources",
    "scan_file",
    "scan_files",
]
