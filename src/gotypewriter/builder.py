"""Turn scanned Go declarations into the type model.

Field shapes follow `encoding/json`: pointers are optional, slices and arrays
are sequences (`[]byte` is a base64 string), maps need string or integer keys,
embedded structs have their fields promoted. Struct tags `json:"..."` and
`tw:"..."` rename, skip or mark fields optional.
"""

from __future__ import annotations

import ast
import logging
import re
from dataclasses import dataclass, replace

from .diagnostics import (
    Diagnostics,
    NameCollisionWarning,
    SkippedFieldWarning,
    UnresolvedTypeWarning,
    UnsupportedShapeWarning,
)
from .model import (
    ANY,
    OPAQUE_RECORD,
    STRING,
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
    Unknown,
    qualify,
)
from .registry import TypeRegistry
from .scanner.decls import (
    ChanExpr,
    FieldDecl,
    FuncExpr,
    IdentExpr,
    InterfaceExpr,
    MapExpr,
    PointerExpr,
    SliceExpr,
    SourceFile,
    StructExpr,
    TypeDecl,
    TypeExpr,
    render_go_type,
)

log = logging.getLogger(__name__)

_INT = Primitive(PrimitiveKind.INT)
_UINT = Primitive(PrimitiveKind.UINT)
_FLOAT = Primitive(PrimitiveKind.FLOAT)

_BUILTINS: dict[str, TypeRef] = {
    **{name: _INT for name in ("int", "int8", "int16", "int32", "int64", "rune")},
    **{name: _UINT for name in ("uint", "uint16", "uint32", "uint64", "uintptr")},
    "byte": Primitive(PrimitiveKind.BYTE),
    "uint8": Primitive(PrimitiveKind.BYTE),
    "float32": _FLOAT,
    "float64": _FLOAT,
    "bool": Primitive(PrimitiveKind.BOOL),
    "string": STRING,
    "any": ANY,
    "error": ANY,
}

_NO_JSON_FORM = {"complex64", "complex128"}

# (package name, type name) for common types outside the scanned files.
_EXTERNAL: dict[tuple[str, str], TypeRef] = {
    ("time", "Time"): STRING,
    ("time", "Duration"): _INT,
    ("uuid", "UUID"): STRING,
    ("json", "Number"): _FLOAT,
    ("json", "RawMessage"): ANY,
}

_KEY_KINDS = frozenset({PrimitiveKind.STRING, PrimitiveKind.INT, PrimitiveKind.UINT, PrimitiveKind.BYTE})

_TAG_RE = re.compile(r'([^\s:"]+):"((?:[^"\\]|\\.)*)"')
_DIRECTIVE_RE = re.compile(r"^(?:@strict|@private|tw:\S+|go:\S+)(?:\s|$)")


class _UnsupportedShape(Exception):
    pass


@dataclass(frozen=True)
class _Scope:
    file: SourceFile
    owner: str  # qualified name of the declaration being built
    root: str  # top-level declaration that synthesized types are listed under
    type_params: tuple[str, ...]
    exported: bool


@dataclass(frozen=True)
class FieldOptions:
    output_name: str | None = None
    skip: bool = False
    optional: bool = False
    as_string: bool = False

    @property
    def named(self) -> bool:
        return bool(self.output_name)


def parse_struct_tag(tag: str | None) -> dict[str, str]:
    """Split a Go struct tag into key -> value, like reflect.StructTag.Lookup."""
    out: dict[str, str] = {}
    if not tag:
        return out
    for key, raw in _TAG_RE.findall(tag):
        try:
            value = ast.literal_eval(f'"{raw}"')
        except (ValueError, SyntaxError):
            value = raw
        out.setdefault(key, value)
    return out


def field_options(tag: str | None) -> FieldOptions:
    tags = parse_struct_tag(tag)
    name: str | None = None
    skip = optional = as_string = False

    js = tags.get("json")
    if js is not None:
        if js == "-":
            skip = True
        else:
            js_name, *opts = js.split(",")
            name = js_name or None
            optional = "omitempty" in opts or "omitzero" in opts
            as_string = "string" in opts

    tw = tags.get("tw")
    if tw is not None:
        if tw == "-":
            skip = True
        else:
            tw_name, *opts = tw.split(",")
            if tw_name:
                name = tw_name
            if "optional" in opts or "null" in opts:
                optional = True

    return FieldOptions(output_name=name, skip=skip, optional=optional, as_string=as_string)


def clean_doc(doc: str | None) -> str | None:
    if not doc:
        return None
    lines = [ln for ln in doc.splitlines() if not _DIRECTIVE_RE.match(ln.strip())]
    text = "\n".join(lines).strip()
    return text or None


def build_registry(files: list[SourceFile], diagnostics: Diagnostics | None = None) -> TypeRegistry:
    """Build and freeze the registry for every declaration in `files`."""
    if diagnostics is None:
        diagnostics = Diagnostics()
    return ModelBuilder(files, diagnostics).build()


class ModelBuilder:
    def __init__(self, files: list[SourceFile], diagnostics: Diagnostics):
        self.diag = diagnostics
        # Later declarations of the same qualified name win; the slot stays first.
        self._decls: dict[str, tuple[SourceFile, TypeDecl]] = {}
        for f in files:
            for d in f.decls:
                self._decls[qualify(f.package, d.name)] = (f, d)
        self._built: dict[str, PackageType] = {}
        self._synthesized: dict[str, list[PackageType]] = {}
        self._taken: set[str] = set(self._decls)
        self._in_progress: set[str] = set()

    def build(self) -> TypeRegistry:
        registry = TypeRegistry()
        for q in self._decls:
            registry.add(self._build(q))
            for extra in self._synthesized.get(q, []):
                registry.add(extra)
        log.debug("built %d type(s)", len(registry))
        return registry.freeze()

    def _build(self, q: str) -> PackageType:
        built = self._built.get(q)
        if built is not None:
            return built

        file, decl = self._decls[q]
        scope = _Scope(file=file, owner=q, root=q, type_params=decl.type_params, exported=decl.exported)
        common = dict(
            package=file.package,
            name=decl.name,
            exported=decl.exported,
            doc=clean_doc(decl.doc),
            file=file.path,
            line=decl.line,
            strict=decl.strict,
            type_params=decl.type_params,
        )
        self._in_progress.add(q)
        try:
            if isinstance(decl.type, StructExpr):
                fields = self._struct_fields(decl.type, scope, decl.name)
                pt = PackageType(kind=TypeKind.STRUCT, fields=tuple(fields), **common)
            else:
                where = f"{file.path}:{decl.line}"
                try:
                    target = self._resolve(decl.type, scope, decl.name, where)
                except _UnsupportedShape as e:
                    self.diag.warn(UnsupportedShapeWarning, f"type {decl.name}: {e}; rendering as interface", where=where)
                    target = ANY
                pt = PackageType(kind=TypeKind.ALIAS, target=target, **common)
        finally:
            self._in_progress.discard(q)

        self._built[q] = pt
        return pt

    # fields

    def _struct_fields(self, st: StructExpr, scope: _Scope, owner_name: str) -> list[Field]:
        entries: list[tuple[Field, bool]] = []
        for fd in st.fields:
            if fd.embedded:
                entries.extend(self._embedded(fd, scope, owner_name))
            else:
                entries.extend((self._field(name, fd, scope, owner_name), False) for name in fd.names)

        own = {f.output_name for f, promoted in entries if not promoted and not f.skip}
        seen: set[str] = set()
        out: list[Field] = []
        for f, promoted in entries:
            if promoted:
                if f.output_name in own or f.output_name in seen:
                    winner = "field of " + owner_name if f.output_name in own else "an earlier embedded field"
                    self.diag.warn(
                        NameCollisionWarning,
                        f"{owner_name}.{f.output_name} promoted from {f.promoted_from} is shadowed by {winner}; dropped",
                        where=f"{scope.file.path}",
                    )
                    continue
                seen.add(f.output_name)
            out.append(f)
        return out

    def _field(self, name: str, fd: FieldDecl, scope: _Scope, owner_name: str) -> Field:
        where = f"{scope.file.path}:{fd.line}"
        opts = field_options(fd.tag)
        output_name = opts.output_name or name

        if not name[:1].isupper():
            self.diag.warn(SkippedFieldWarning, f"{owner_name}.{name}: unexported field skipped", where=where)
            return Field(name=name, output_name=output_name, type=ANY, skip=True, doc=fd.doc)
        if opts.skip:
            self.diag.warn(SkippedFieldWarning, f"{owner_name}.{name}: excluded by struct tag", where=where)
            return Field(name=name, output_name=output_name, type=ANY, skip=True, doc=fd.doc)

        try:
            ref = self._resolve(fd.type, scope, owner_name + name, where)
        except _UnsupportedShape as e:
            self.diag.warn(UnsupportedShapeWarning, f"{owner_name}.{name}: {e}; field skipped", where=where)
            return Field(name=name, output_name=output_name, type=ANY, skip=True, doc=fd.doc)

        if opts.as_string:
            ref = _as_string(ref)
        return Field(
            name=name,
            output_name=output_name,
            type=ref,
            optional=isinstance(ref, Pointer) or opts.optional,
            doc=fd.doc,
        )

    def _embedded(self, fd: FieldDecl, scope: _Scope, owner_name: str) -> list[tuple[Field, bool]]:
        t = fd.type
        pointer = isinstance(t, PointerExpr)
        if isinstance(t, PointerExpr):
            t = t.elem
        assert isinstance(t, IdentExpr)

        opts = field_options(fd.tag)
        target = self._lookup(t, scope)
        promotable = target is not None and isinstance(self._decls[target][1].type, StructExpr)
        if opts.skip or opts.named or not promotable:
            # Tagged or non-struct embeddings are ordinary fields named after the type.
            return [(self._field(t.name, fd, scope, owner_name), False)]

        assert target is not None
        if target in self._in_progress:
            self.diag.warn(
                UnsupportedShapeWarning,
                f"{owner_name}: embedding {t.name} is cyclic; kept as a field",
                where=f"{scope.file.path}:{fd.line}",
            )
            return [(self._field(t.name, fd, scope, owner_name), False)]

        base = self._build(target)
        return [
            (
                replace(
                    f,
                    optional=f.optional or pointer,
                    promoted_from=f.promoted_from or target,
                ),
                True,
            )
            for f in base.visible_fields
        ]

    # type references

    def _lookup(self, t: IdentExpr, scope: _Scope) -> str | None:
        if t.pkg is None:
            q = qualify(scope.file.package, t.name)
        else:
            q = qualify(scope.file.imports.get(t.pkg, t.pkg), t.name)
        return q if q in self._decls else None

    def _resolve(self, t: TypeExpr, scope: _Scope, hint: str, where: str) -> TypeRef:
        if isinstance(t, IdentExpr):
            return self._resolve_ident(t, scope, where)
        if isinstance(t, PointerExpr):
            return Pointer(self._resolve(t.elem, scope, hint, where))
        if isinstance(t, SliceExpr):
            elem = t.elem
            if t.length is None and isinstance(elem, IdentExpr) and elem.pkg is None and elem.name in ("byte", "uint8"):
                return Primitive(PrimitiveKind.BYTES)
            return Slice(self._resolve(elem, scope, hint, where))
        if isinstance(t, MapExpr):
            key = self._resolve(t.key, scope, hint, where)
            if not self._valid_key(key):
                self.diag.warn(
                    UnsupportedShapeWarning,
                    f"{hint}: unsupported key type {render_go_type(t.key)} in {render_go_type(t)}; "
                    "falling back to an opaque record",
                    where=where,
                )
                return OPAQUE_RECORD
            return Map(key, self._resolve(t.value, scope, hint, where))
        if isinstance(t, StructExpr):
            return self._synthesize(t, scope, hint)
        if isinstance(t, InterfaceExpr):
            return ANY
        if isinstance(t, FuncExpr):
            raise _UnsupportedShape("func types have no data representation")
        if isinstance(t, ChanExpr):
            raise _UnsupportedShape("channel types have no data representation")
        raise _UnsupportedShape(f"unsupported type {render_go_type(t)}")

    def _resolve_ident(self, t: IdentExpr, scope: _Scope, where: str) -> TypeRef:
        if t.pkg is None:
            if t.name in scope.type_params:
                self.diag.warn(
                    UnsupportedShapeWarning,
                    f"type parameter {t.name} rendered as interface",
                    where=where,
                )
                return ANY
            builtin = _BUILTINS.get(t.name)
            if builtin is not None:
                return builtin
            if t.name in _NO_JSON_FORM:
                raise _UnsupportedShape(f"{t.name} has no JSON representation")
        else:
            pkg = scope.file.imports.get(t.pkg, t.pkg)
            external = _EXTERNAL.get((pkg, t.name))
            if external is not None:
                return external
            if (pkg, t.name) == ("unsafe", "Pointer"):
                raise _UnsupportedShape("unsafe.Pointer has no data representation")

        q = self._lookup(t, scope)
        if q is not None:
            return Named(q)
        spelled = render_go_type(IdentExpr(name=t.name, pkg=t.pkg))
        self.diag.warn(UnresolvedTypeWarning, f"unresolved type {spelled}", where=where)
        return Unknown(spelled)

    def _valid_key(self, key: TypeRef) -> bool:
        if isinstance(key, Primitive):
            return key.kind in _KEY_KINDS
        if isinstance(key, Named):
            return self._key_underlying_ok(key.name, set())
        return False

    def _key_underlying_ok(self, q: str, seen: set[str]) -> bool:
        seen.add(q)
        file, decl = self._decls[q]
        t = decl.type
        if not isinstance(t, IdentExpr) or t.args:
            return False
        if t.pkg is None:
            builtin = _BUILTINS.get(t.name)
            if builtin is not None:
                return isinstance(builtin, Primitive) and builtin.kind in _KEY_KINDS
            nq = qualify(file.package, t.name)
        else:
            pkg = file.imports.get(t.pkg, t.pkg)
            external = _EXTERNAL.get((pkg, t.name))
            if external is not None:
                return isinstance(external, Primitive) and external.kind in _KEY_KINDS
            nq = qualify(pkg, t.name)
        if nq in self._decls and nq not in seen:
            return self._key_underlying_ok(nq, seen)
        return False

    def _synthesize(self, st: StructExpr, scope: _Scope, hint: str) -> Named:
        name = hint
        package = scope.file.package
        n = 2
        while qualify(package, name) in self._taken:
            name = f"{hint}{n}"
            n += 1
        q = qualify(package, name)
        self._taken.add(q)

        siblings = self._synthesized.setdefault(scope.root, [])
        slot = len(siblings)
        fields = self._struct_fields(st, replace(scope, owner=q), name)
        siblings.insert(
            slot,
            PackageType(
                package=package,
                name=name,
                kind=TypeKind.STRUCT,
                fields=tuple(fields),
                exported=scope.exported,
                file=scope.file.path,
                type_params=scope.type_params,
            )
        )
        return Named(q)


def _as_string(ref: TypeRef) -> TypeRef:
    # `json:",string"` only affects scalars and pointers to scalars.
    if isinstance(ref, Pointer) and isinstance(ref.elem, Primitive):
        return Pointer(STRING)
    if isinstance(ref, Primitive):
        return STRING
    return ref

