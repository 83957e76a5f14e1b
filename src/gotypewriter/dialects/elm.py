"""Elm records and custom types.

Elm rejects recursive type aliases, so any type that reaches itself through
references is emitted as a single-constructor custom type; the rest are
plain `type alias` declarations.
"""

from __future__ import annotations

import re

from ..diagnostics import Diagnostics, NameCollisionWarning, UnsupportedShapeWarning
from ..errors import RenderError
from ..model import Map, Named, PackageType, Pointer, Primitive, PrimitiveKind, Slice, TypeKind, TypeRef
from ..registry import TypeRegistry
from .common import RenderContext, doc_lines, is_numeric_key, recursive_types, strip_pointers

_PRIMITIVES = {
    PrimitiveKind.INT: "Int",
    PrimitiveKind.UINT: "Int",
    PrimitiveKind.BYTE: "Int",
    PrimitiveKind.FLOAT: "Float",
    PrimitiveKind.BOOL: "Bool",
    PrimitiveKind.STRING: "String",
    PrimitiveKind.BYTES: "String",
}

UNKNOWN = "Json.Encode.Value"

# Types exposed by Elm's default imports (plus Dict, which we import).
CORE_TYPES = frozenset(
    {
        "Int",
        "Float",
        "Bool",
        "String",
        "Char",
        "List",
        "Maybe",
        "Result",
        "Order",
        "Never",
        "Program",
        "Cmd",
        "Sub",
        "Dict",
    }
)

RESERVED = frozenset(
    {
        "if",
        "then",
        "else",
        "case",
        "of",
        "let",
        "in",
        "type",
        "module",
        "where",
        "import",
        "exposing",
        "as",
        "port",
        "alias",
        "infix",
    }
)

_WORD_RE = re.compile(r"[A-Za-z0-9]+")
_PLAIN_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def elm_field_name(name: str) -> str:
    """lowerCamelCase Elm identifier for a wire name (`ID` -> `id`, `first-name` -> `firstName`)."""
    words = _WORD_RE.findall(name)
    if not words:
        return "field"
    head = words[0]
    if head.isupper():
        head = head.lower()
    else:
        upper_run = len(head) - len(head.lstrip("ABCDEFGHIJKLMNOPQRSTUVWXYZ"))
        if upper_run > 1:
            # URLPath -> urlPath
            head = head[: upper_run - 1].lower() + head[upper_run - 1 :]
        head = head[:1].lower() + head[1:]
    out = head + "".join(w[:1].upper() + w[1:] for w in words[1:])
    if out[:1].isdigit():
        out = "field" + out
    if out in RESERVED:
        out += "_"
    return out


class ElmRenderer:
    def __init__(self, module: str = "Types"):
        self.module = module

    def render(self, registry: TypeRegistry, diagnostics: Diagnostics) -> bytes:
        ctx = RenderContext(registry, diagnostics)
        for pt in ctx.types:
            name = ctx.name_of(pt)
            if name in CORE_TYPES:
                raise RenderError(f"{pt.qualified_name}: {name} would clash with Elm's core type {name}")
        recursive = recursive_types(registry)
        blocks = [self._block(pt, ctx, pt.qualified_name in recursive) for pt in ctx.types]

        header = [f"module {self.module} exposing (..)"]
        imports = []
        if "Dict" in ctx.used:
            imports.append("import Dict exposing (Dict)")
        if "Json.Encode" in ctx.used:
            imports.append("import Json.Encode")
        if imports:
            header.append("\n".join(imports))
        return ("\n\n".join(header) + "\n\n\n" + "\n\n\n".join(blocks) + "\n").encode("utf-8")

    def _block(self, pt: PackageType, ctx: RenderContext, recursive: bool) -> str:
        name = ctx.name_of(pt)
        lines: list[str] = []
        doc = doc_lines(pt.doc)
        if doc:
            lines.append("{-| " + doc[0])
            lines.extend(doc[1:])
            lines.append("-}")

        if pt.kind is TypeKind.STRUCT:
            body = self._record(pt, ctx, "        " if recursive else "    ")
            if recursive:
                lines.extend([f"type {name}", f"    = {name}", *body])
            else:
                lines.extend([f"type alias {name} =", *body])
            return "\n".join(lines)

        assert pt.target is not None
        target = self._type(pt.target, ctx)
        if recursive:
            lines.extend([f"type {name}", f"    = {name} {_arg(target)}"])
        else:
            lines.extend([f"type alias {name} =", f"    {target}"])
        return "\n".join(lines)

    def _record(self, pt: PackageType, ctx: RenderContext, indent: str) -> list[str]:
        fields = self._fields(pt, ctx, frozenset())
        if not fields:
            return [indent + "{}"]
        out: list[str] = []
        for i, (name, t) in enumerate(fields):
            lead = "{ " if i == 0 else ", "
            out.append(f"{indent}{lead}{name} : {t}")
        out.append(indent + "}")
        return out

    def _inline(self, pt: PackageType, ctx: RenderContext, visiting: frozenset[str]) -> str:
        fields = self._fields(pt, ctx, visiting)
        if not fields:
            return "{}"
        return "{ " + ", ".join(f"{name} : {t}" for name, t in fields) + " }"

    def _fields(self, pt: PackageType, ctx: RenderContext, visiting: frozenset[str]) -> list[tuple[str, str]]:
        out: list[tuple[str, str]] = []
        taken: set[str] = set()
        for f in pt.visible_fields:
            name = elm_field_name(f.output_name)
            if not _PLAIN_NAME_RE.fullmatch(f.output_name) or name.endswith("_"):
                ctx.diag.warn(
                    UnsupportedShapeWarning,
                    f"{pt.name}.{f.name}: wire name {f.output_name!r} renamed to Elm field {name}",
                    where=pt.where,
                )
            if name in taken:
                base, n = name, 2
                while f"{base}{n}" in taken:
                    n += 1
                name = f"{base}{n}"
                ctx.diag.warn(
                    NameCollisionWarning,
                    f"{pt.name}.{f.name}: Elm field name taken; renamed to {name}",
                    where=pt.where,
                )
            taken.add(name)

            inner, pointer = strip_pointers(f.type)
            t = self._type(inner, ctx, visiting)
            if pointer or f.optional:
                t = f"Maybe {_arg(t)}"
            out.append((name, t))
        return out

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
            return f"Maybe {_arg(self._type(inner, ctx, visiting))}"
        if isinstance(t, Slice):
            return f"List {_arg(self._type(t.elem, ctx, visiting))}"
        if isinstance(t, Map):
            ctx.used.add("Dict")
            key = "Int" if is_numeric_key(ctx.key_kind(t.key)) else "String"
            return f"Dict {key} {_arg(self._type(t.value, ctx, visiting))}"
        ctx.used.add("Json.Encode")
        return UNKNOWN


def _arg(t: str) -> str:
    return f"({t})" if " " in t and not t.startswith("{") else t
