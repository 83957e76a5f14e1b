from __future__ import annotations

import re

from ..errors import ParseError
from .decls import (
    ChanExpr,
    FieldDecl,
    FuncExpr,
    IdentExpr,
    InterfaceExpr,
    MapExpr,
    OtherExpr,
    PointerExpr,
    SliceExpr,
    SourceFile,
    StructExpr,
    TypeDecl,
    TypeExpr,
)
from .goast import parse_go_sources


def parse_source(source: str, path: str = "<source>") -> SourceFile:
    """Parse one Go file into its package name, imports and type declarations."""
    (result,) = parse_sources([(path, source)])
    if isinstance(result, ParseError):
        raise result
    return result


def parse_sources(items: list[tuple[str, str]]) -> list[SourceFile | ParseError]:
    """Parse (path, source) pairs in one helper run, keeping input order."""
    return [decode_file(obj, path) for obj, (path, _) in zip(parse_go_sources(items), items)]


def decode_file(obj: dict, path: str) -> SourceFile | ParseError:
    """Turn one helper result into a SourceFile, or the ParseError it reports."""
    err = obj.get("error")
    if isinstance(err, dict):
        return ParseError(path, int(err.get("line") or 0), int(err.get("col") or 0), str(err.get("msg") or ""))

    imports: dict[str, str] = {}
    for imp in obj.get("imports") or []:
        name = package_name_from_import(imp["path"])
        alias = imp.get("name") or None
        if alias == "_":
            continue
        imports[alias or name] = name

    decls = [
        TypeDecl(
            name=d["name"],
            type=_expr(d["type"]),
            alias=bool(d.get("alias")),
            type_params=tuple(d.get("type_params") or ()),
            doc=d.get("doc"),
            line=int(d.get("line") or 0),
        )
        for d in obj.get("decls") or []
    ]
    return SourceFile(path=path, package=obj["package"], imports=imports, decls=decls)


def package_name_from_import(path: str) -> str:
    """Best guess at the package name an import path declares."""
    parts = [p for p in path.split("/") if p]
    if not parts:
        return path
    last = parts[-1]
    if re.fullmatch(r"v\d+", last) and len(parts) > 1:
        last = parts[-2]
    last = re.sub(r"\.v\d+$", "", last)
    if last.startswith("go-"):
        last = last[3:]
    return last.replace("-", "_").replace(".", "_")


def _expr(obj: dict) -> TypeExpr:
    kind = obj.get("kind")
    if kind == "ident":
        args = tuple(_expr(a) for a in obj.get("args") or ())
        return IdentExpr(name=obj["name"], pkg=obj.get("pkg"), args=args)
    if kind == "pointer":
        return PointerExpr(_expr(obj["elem"]))
    if kind == "slice":
        return SliceExpr(_expr(obj["elem"]), length=obj.get("len"))
    if kind == "map":
        return MapExpr(_expr(obj["key"]), _expr(obj["value"]))
    if kind == "struct":
        return StructExpr(tuple(_field(f) for f in obj.get("fields") or ()))
    if kind == "interface":
        return InterfaceExpr(empty=bool(obj.get("empty", True)))
    if kind == "func":
        return FuncExpr()
    if kind == "chan":
        return ChanExpr(_expr(obj["elem"]))
    return OtherExpr(str(obj.get("text") or kind))


def _field(obj: dict) -> FieldDecl:
    return FieldDecl(
        names=tuple(obj.get("names") or ()),
        type=_expr(obj["type"]),
        tag=obj.get("tag"),
        doc=obj.get("doc"),
        line=int(obj.get("line") or 0),
    )
