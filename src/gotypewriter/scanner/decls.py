from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class IdentExpr:
    name: str
    pkg: str | None = None  # import alias for `pkg.Name`
    args: tuple["TypeExpr", ...] = ()  # generic instantiation


@dataclass(frozen=True)
class PointerExpr:
    elem: "TypeExpr"


@dataclass(frozen=True)
class SliceExpr:
    elem: "TypeExpr"
    length: str | None = None  # set for arrays


@dataclass(frozen=True)
class MapExpr:
    key: "TypeExpr"
    value: "TypeExpr"


@dataclass(frozen=True)
class StructExpr:
    fields: tuple["FieldDecl", ...]


@dataclass(frozen=True)
class InterfaceExpr:
    empty: bool = True


@dataclass(frozen=True)
class FuncExpr:
    pass


@dataclass(frozen=True)
class ChanExpr:
    elem: "TypeExpr"


@dataclass(frozen=True)
class OtherExpr:
    text: str  # Go spelling of a shape with no dedicated record


TypeExpr = Union[
    IdentExpr, PointerExpr, SliceExpr, MapExpr, StructExpr, InterfaceExpr, FuncExpr, ChanExpr, OtherExpr
]


@dataclass(frozen=True)
class FieldDecl:
    names: tuple[str, ...]  # empty for an embedded field
    type: TypeExpr
    tag: str | None = None
    doc: str | None = None
    line: int = 0

    @property
    def embedded(self) -> bool:
        return not self.names


@dataclass(frozen=True)
class TypeDecl:
    name: str
    type: TypeExpr
    alias: bool = False
    type_params: tuple[str, ...] = ()
    doc: str | None = None
    line: int = 0

    @property
    def private(self) -> bool:
        doc = self.doc or ""
        return "@private" in doc or "tw:private" in doc

    @property
    def exported(self) -> bool:
        return self.name[:1].isupper() and not self.private

    @property
    def strict(self) -> bool:
        return "@strict" in (self.doc or "")


@dataclass(frozen=True)
class SourceFile:
    path: str
    package: str
    # import alias (or default name) -> package name
    imports: dict[str, str] = field(default_factory=dict)
    decls: list[TypeDecl] = field(default_factory=list)


def render_go_type(t: TypeExpr) -> str:
    """Spell a type expression back in Go syntax (for messages)."""
    if isinstance(t, IdentExpr):
        base = f"{t.pkg}.{t.name}" if t.pkg else t.name
        if t.args:
            base += "[" + ", ".join(render_go_type(a) for a in t.args) + "]"
        return base
    if isinstance(t, PointerExpr):
        return "*" + render_go_type(t.elem)
    if isinstance(t, SliceExpr):
        return f"[{t.length or ''}]" + render_go_type(t.elem)
    if isinstance(t, MapExpr):
        return f"map[{render_go_type(t.key)}]{render_go_type(t.value)}"
    if isinstance(t, StructExpr):
        return "struct{...}"
    if isinstance(t, InterfaceExpr):
        return "interface{}" if t.empty else "interface{...}"
    if isinstance(t, FuncExpr):
        return "func(...)"
    if isinstance(t, ChanExpr):
        return "chan " + render_go_type(t.elem)
    if isinstance(t, OtherExpr):
        return t.text
    return "?"
