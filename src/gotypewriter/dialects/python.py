from __future__ import annotations

import keyword

from ..diagnostics import Diagnostics
from ..errors import RenderError
from ..model import Field, Map, Named, PackageType, Pointer, Primitive, PrimitiveKind, Slice, TypeKind, TypeRef
from ..registry import TypeRegistry
from .common import RenderContext, doc_lines, is_numeric_key, strip_pointers

_PRIMITIVES = {
    PrimitiveKind.INT: "int",
    PrimitiveKind.UINT: "int",
    PrimitiveKind.BYTE: "int",
    PrimitiveKind.FLOAT: "float",
    PrimitiveKind.BOOL: "bool",
    PrimitiveKind.STRING: "str",
    PrimitiveKind.BYTES: "bytes",
}

UNKNOWN = "Any"

# Names the generated module imports; a class of the same name would shadow them.
_IMPORTED = {"Any", "TypeAlias"}

# Names a class body must not rebind: later fields call `field()` and
# annotations name these.
_RESERVED_ATTRS = frozenset(
    {"dataclass", "field", "Any", "TypeAlias", "int", "float", "bool", "str", "bytes", "list", "dict"}
)


class PythonRenderer:
    """Frozen dataclasses for structs and `TypeAlias` declarations for the rest.

    Fields keep declaration order (`kw_only=True`); optional fields default to
    None. Annotations are postponed, so classes may reference each other in
    any order.
    """

    def render(self, registry: TypeRegistry, diagnostics: Diagnostics) -> bytes:
        ctx = RenderContext(registry, diagnostics)
        for pt in ctx.types:
            name = ctx.name_of(pt)
            if keyword.iskeyword(name) or name in _IMPORTED:
                raise RenderError(f"{pt.qualified_name}: {name!r} cannot name a Python type")
        blocks = [self._block(pt, ctx) for pt in ctx.types]

        lines: list[str] = ["from __future__ import annotations", ""]
        dc_names = ["dataclass"]
        if "field" in ctx.used:
            dc_names.append("field")
        typing_names = sorted(n for n in ("Any", "TypeAlias") if n in ctx.used)
        if "dataclass" in ctx.used:
            lines.append(f"from dataclasses import {', '.join(dc_names)}")
        if typing_names:
            lines.append(f"from typing import {', '.join(typing_names)}")
        if lines[-1] == "":
            lines.pop()
        return ("\n".join(lines) + "\n\n\n" + "\n\n\n".join(blocks) + "\n").encode("utf-8")

    def _block(self, pt: PackageType, ctx: RenderContext) -> str:
        name = ctx.name_of(pt)
        if pt.kind is not TypeKind.STRUCT:
            assert pt.target is not None
            ctx.used.add("TypeAlias")
            lines = [f"# {ln}".rstrip() for ln in doc_lines(pt.doc)]
            lines.append(f"{name}: TypeAlias = {self._type(pt.target, ctx)!r}")
            return "\n".join(lines)

        ctx.used.add("dataclass")
        lines = ["@dataclass(frozen=True, kw_only=True)", f"class {name}:"]
        if pt.doc:
            doc = pt.doc.replace('"""', '\\"\\"\\"')
            if "\n" in doc:
                lines.append(f'    """{doc.splitlines()[0]}')
                lines.extend(f"    {ln}".rstrip() for ln in doc.splitlines()[1:])
                lines.append('    """')
            else:
                lines.append(f'    """{doc}"""')
            if pt.visible_fields:
                lines.append("")
        taken: set[str] = set()
        for f in pt.visible_fields:
            lines.extend(f"    # {ln}".rstrip() for ln in doc_lines(f.doc))
            lines.append(f"    {self._field(f, ctx, taken)}")
        if not pt.visible_fields and not pt.doc:
            lines.append("    pass")
        return "\n".join(lines)

    def _field(self, f: Field, ctx: RenderContext, taken: set[str]) -> str:
        inner, pointer = strip_pointers(f.type)
        ty = self._type(inner, ctx)
        if pointer or f.optional:
            ty = f"{ty} | None"

        # Prefer the wire name, then the Go name; the wire key goes to field
        # metadata whenever the attribute differs from it.
        attr = next((c for c in (f.output_name, f.name) if _usable_attr(c) and c not in taken), None)
        if attr is None:
            attr = f.name + "_"
            while attr in taken:
                attr += "_"
        taken.add(attr)

        if attr != f.output_name:
            ctx.used.add("field")
            default = "default=None, " if f.optional else ""
            return f"{attr}: {ty} = field({default}metadata={{'key': {f.output_name!r}}})"
        if f.optional:
            return f"{attr}: {ty} = None"
        return f"{attr}: {ty}"

    def _type(self, t: TypeRef, ctx: RenderContext, visiting: frozenset[str] = frozenset()) -> str:
        if isinstance(t, Primitive):
            return _PRIMITIVES[t.kind]
        if isinstance(t, Named):
            target = ctx.deref(t, visiting)
            if isinstance(target, str):
                return target
            return self._type(target, ctx, visiting | {t.name})
        if isinstance(t, Pointer):
            inner, _ = strip_pointers(t)
            return f"{self._type(inner, ctx, visiting)} | None"
        if isinstance(t, Slice):
            return f"list[{self._type(t.elem, ctx, visiting)}]"
        if isinstance(t, Map):
            key = "int" if is_numeric_key(ctx.key_kind(t.key)) else "str"
            return f"dict[{key}, {self._type(t.value, ctx, visiting)}]"
        ctx.used.add("Any")
        return UNKNOWN


def _usable_attr(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name) and name not in _RESERVED_ATTRS
