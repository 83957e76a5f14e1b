from __future__ import annotations

import json
import re

from ..diagnostics import Diagnostics
from ..model import (
    Field,
    Map,
    Named,
    PackageType,
    Pointer,
    Primitive,
    PrimitiveKind,
    Slice,
    TypeKind,
    TypeRef,
)
from ..registry import TypeRegistry
from .common import RenderContext, is_numeric_key, strip_pointers

_PRIMITIVES = {
    PrimitiveKind.INT: "number",
    PrimitiveKind.UINT: "number",
    PrimitiveKind.FLOAT: "number",
    PrimitiveKind.BYTE: "number",
    PrimitiveKind.BOOL: "boolean",
    PrimitiveKind.STRING: "string",
    PrimitiveKind.BYTES: "string",
}

UNKNOWN = "any"

_IDENT_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


class TypeScriptRenderer:
    """Exported interfaces for structs and type aliases for everything else."""

    def render(self, registry: TypeRegistry, diagnostics: Diagnostics) -> bytes:
        ctx = RenderContext(registry, diagnostics)
        blocks = [self._block(pt, ctx) for pt in ctx.types]
        return ("\n\n".join(blocks) + "\n").encode("utf-8")

    def _block(self, pt: PackageType, ctx: RenderContext) -> str:
        lines = _jsdoc(pt.doc, "")
        name = ctx.name_of(pt)
        if pt.kind is TypeKind.STRUCT:
            lines.append(f"export interface {name} {{")
            for f in pt.visible_fields:
                lines.extend(_jsdoc(f.doc, "  "))
                lines.append(f"  {self._property(f, ctx)};")
            lines.append("}")
        else:
            assert pt.target is not None
            lines.append(f"export type {name} = {self._type(pt.target, ctx)};")
        return "\n".join(lines)

    def _property(self, f: Field, ctx: RenderContext, visiting: frozenset[str] = frozenset()) -> str:
        inner, pointer = strip_pointers(f.type)
        t = self._type(inner, ctx, visiting)
        if pointer:
            t += " | null"
        key = f.output_name if _IDENT_RE.match(f.output_name) else json.dumps(f.output_name)
        return f"{key}{'?' if f.optional else ''}: {t}"

    def _type(self, t: TypeRef, ctx: RenderContext, visiting: frozenset[str] = frozenset()) -> str:
        if isinstance(t, Primitive):
            return _PRIMITIVES[t.kind]
        if isinstance(t, Named):
            target = ctx.deref(t, visiting, inline_structs=True)
            if isinstance(target, str):
                return target
            if isinstance(target, PackageType):
                return self._inline(target, ctx, visiting | {t.name})
            return self._type(target, ctx, visiting | {t.name})
        if isinstance(t, Pointer):
            inner, _ = strip_pointers(t)
            return f"{self._type(inner, ctx, visiting)} | null"
        if isinstance(t, Slice):
            elem = self._type(t.elem, ctx, visiting)
            if elem.endswith(" | null"):
                elem = f"({elem})"
            return f"{elem}[]"
        if isinstance(t, Map):
            key = "number" if is_numeric_key(ctx.key_kind(t.key)) else "string"
            return f"{{ [key: {key}]: {self._type(t.value, ctx, visiting)} }}"
        return UNKNOWN

    def _inline(self, pt: PackageType, ctx: RenderContext, visiting: frozenset[str]) -> str:
        props = [self._property(f, ctx, visiting) for f in pt.visible_fields]
        return "{ " + "; ".join(props) + " }" if props else "{}"


def _jsdoc(doc: str | None, indent: str) -> list[str]:
    if not doc:
        return []
    lines = doc.splitlines()
    if len(lines) == 1:
        return [f"{indent}/** {lines[0]} */"]
    return [f"{indent}/**", *(f"{indent} * {ln}".rstrip() for ln in lines), f"{indent} */"]
