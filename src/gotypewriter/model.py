"""Dialect-agnostic type model shared by the builder and the renderers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class PrimitiveKind(str, Enum):
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"
    BYTE = "byte"
    # []byte; encoding/json writes it as a base64 string.
    BYTES = "bytes"


@dataclass(frozen=True)
class Primitive:
    kind: PrimitiveKind


@dataclass(frozen=True)
class Named:
    # Qualified name; always present in the registry.
    name: str


@dataclass(frozen=True)
class Unknown:
    # Go spelling of the reference that could not be resolved.
    name: str


@dataclass(frozen=True)
class Pointer:
    elem: "TypeRef"


@dataclass(frozen=True)
class Slice:
    elem: "TypeRef"


@dataclass(frozen=True)
class Map:
    key: "TypeRef"
    value: "TypeRef"


@dataclass(frozen=True)
class Interface:
    pass


@dataclass(frozen=True)
class Embedded:
    # Only seen by the builder before promotion.
    name: str
    pointer: bool = False


TypeRef = Union[Primitive, Named, Unknown, Pointer, Slice, Map, Interface, Embedded]

STRING = Primitive(PrimitiveKind.STRING)
ANY = Interface()
OPAQUE_RECORD = Map(STRING, ANY)


class TypeKind(str, Enum):
    STRUCT = "struct"
    ALIAS = "alias"


@dataclass(frozen=True)
class Field:
    name: str
    output_name: str
    type: TypeRef
    optional: bool = False
    skip: bool = False
    promoted_from: str | None = None
    doc: str | None = None


@dataclass(frozen=True)
class PackageType:
    package: str
    name: str
    kind: TypeKind
    fields: tuple[Field, ...] = ()
    target: TypeRef | None = None
    exported: bool = True
    doc: str | None = None
    file: str = ""
    line: int = 0
    strict: bool = False
    type_params: tuple[str, ...] = ()

    @property
    def qualified_name(self) -> str:
        return qualify(self.package, self.name)

    @property
    def visible_fields(self) -> tuple[Field, ...]:
        return tuple(f for f in self.fields if not f.skip)

    @property
    def where(self) -> str:
        return f"{self.file}:{self.line}" if self.file else self.qualified_name


def qualify(package: str, name: str) -> str:
    return f"{package}.{name}"


def refs_of(t: TypeRef) -> list[str]:
    """Qualified names directly referenced by a TypeRef."""
    if isinstance(t, Named):
        return [t.name]
    if isinstance(t, (Pointer, Slice)):
        return refs_of(t.elem)
    if isinstance(t, Map):
        return refs_of(t.key) + refs_of(t.value)
    return []
