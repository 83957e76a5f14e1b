"""Helpers shared by the dialect strategies.

A `RenderContext` is created per `render()` call, so the strategies themselves
carry no state between runs.
"""

from __future__ import annotations

from typing import Protocol

from ..diagnostics import Diagnostics, UnresolvedTypeWarning
from ..model import (
    Named,
    PackageType,
    Pointer,
    Primitive,
    PrimitiveKind,
    TypeKind,
    TypeRef,
    Unknown,
    refs_of,
)
from ..registry import TypeRegistry


class Renderer(Protocol):
    def render(self, registry: TypeRegistry, diagnostics: Diagnostics) -> bytes: ...


class RenderContext:
    def __init__(self, registry: TypeRegistry, diagnostics: Diagnostics):
        self.registry = registry
        self.diag = diagnostics
        self.names = registry.render_names(diagnostics)
        self.types = registry.exported()
        # Constructs the output used, for dialects that import on demand.
        self.used: set[str] = set()

    def name_of(self, pt: PackageType) -> str:
        return self.names[pt.qualified_name]

    def deref(
        self, ref: Named, visiting: frozenset[str], *, inline_structs: bool = False
    ) -> str | TypeRef | PackageType:
        """Output token for an exported type, or what to render in place of an
        unexported one: an alias's target, or the struct itself when the
        dialect can spell it inline."""
        pt = self.registry[ref.name]
        if pt.exported:
            return self.names[ref.name]
        if ref.name not in visiting:
            if pt.kind is TypeKind.ALIAS and pt.target is not None:
                return pt.target
            if pt.kind is TypeKind.STRUCT and inline_structs:
                return pt
        self.diag.warn(
            UnresolvedTypeWarning,
            f"{ref.name} is not exported; rendered as unknown",
            where=pt.where,
        )
        return Unknown(pt.name)

    def key_kind(self, key: TypeRef) -> PrimitiveKind:
        """Primitive kind behind a map key, following named aliases."""
        seen: set[str] = set()
        while isinstance(key, Named) and key.name not in seen:
            seen.add(key.name)
            pt = self.registry[key.name]
            if pt.target is None:
                break
            key = pt.target
        if isinstance(key, Primitive):
            return key.kind
        return PrimitiveKind.STRING


def strip_pointers(t: TypeRef) -> tuple[TypeRef, bool]:
    pointer = False
    while isinstance(t, Pointer):
        t = t.elem
        pointer = True
    return t, pointer


def is_numeric_key(kind: PrimitiveKind) -> bool:
    return kind in (PrimitiveKind.INT, PrimitiveKind.UINT, PrimitiveKind.BYTE)


def type_refs(pt: PackageType) -> list[str]:
    out: list[str] = []
    for f in pt.visible_fields:
        out.extend(refs_of(f.type))
    if pt.target is not None:
        out.extend(refs_of(pt.target))
    return out


def recursive_types(registry: TypeRegistry) -> set[str]:
    """Qualified names of exported types that reach themselves through references."""
    edges: dict[str, list[str]] = {pt.qualified_name: type_refs(pt) for pt in registry}
    out: set[str] = set()
    for pt in registry.exported():
        start = pt.qualified_name
        stack = list(edges.get(start, []))
        seen: set[str] = set()
        while stack:
            q = stack.pop()
            if q == start:
                out.add(start)
                break
            if q in seen:
                continue
            seen.add(q)
            stack.extend(edges.get(q, []))
    return out


def doc_lines(doc: str | None) -> list[str]:
    return doc.splitlines() if doc else []
