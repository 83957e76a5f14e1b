from __future__ import annotations

from gotypewriter.builder import build_registry, clean_doc, field_options, parse_struct_tag
from gotypewriter.diagnostics import (
    Diagnostics,
    NameCollisionWarning,
    SkippedFieldWarning,
    UnresolvedTypeWarning,
    UnsupportedShapeWarning,
)
from gotypewriter.model import (
    ANY,
    OPAQUE_RECORD,
    STRING,
    Map,
    Named,
    Pointer,
    Primitive,
    PrimitiveKind,
    Slice,
    TypeKind,
    Unknown,
)
from gotypewriter.scanner.decls import FieldDecl, IdentExpr, MapExpr, OtherExpr, SourceFile, StructExpr, TypeDecl

INT = Primitive(PrimitiveKind.INT)


def _names(pt):
    return [f.output_name for f in pt.visible_fields]


def test_parse_struct_tag_and_field_options():
    tag = 'json:"name,omitempty" tw:"display,optional" db:"n"'
    assert parse_struct_tag(tag) == {"json": "name,omitempty", "tw": "display,optional", "db": "n"}

    opts = field_options('json:"id,omitempty"')
    assert (opts.output_name, opts.optional, opts.skip) == ("id", True, False)
    assert field_options('json:",string"').as_string
    assert field_options('json:",string"').output_name is None
    assert field_options('json:"-"').skip
    assert field_options('json:"-,"').output_name == "-"
    assert field_options('json:"a" tw:"b"').output_name == "b"
    assert field_options('tw:"-"').skip
    assert field_options(None) == field_options("")


def test_clean_doc_drops_directive_lines():
    assert clean_doc("Secret holds keys.\n@private") == "Secret holds keys."
    assert clean_doc("tw:private") is None
    assert clean_doc("@strictly speaking") == "@strictly speaking"


def test_promoted_fields_lose_to_owner_fields(build):
    diag = Diagnostics()
    reg = build(
        "\n".join(
            [
                "package blog",
                "",
                "type Base struct {",
                '\tID      int64  `json:"id"`',
                '\tCreated string `json:"created"`',
                "}",
                "",
                "type Post struct {",
                "\tBase",
                '\tID    string `json:"id"`',
                '\tTitle string `json:"title"`',
                "}",
            ]
        ),
        diagnostics=diag,
    )
    post = reg["blog.Post"]
    assert _names(post) == ["created", "id", "title"]
    by_name = {f.output_name: f for f in post.visible_fields}
    assert by_name["id"].type == STRING
    assert by_name["created"].promoted_from == "blog.Base"
    assert by_name["id"].promoted_from is None
    assert len(diag.of(NameCollisionWarning)) == 1


def test_first_embedded_struct_wins_a_promotion_tie(build):
    diag = Diagnostics()
    reg = build(
        "package p\n\ntype A struct { X int }\n\ntype B struct { X string }\n\ntype C struct {\n\tA\n\tB\n}\n",
        diagnostics=diag,
    )
    (x,) = reg["p.C"].visible_fields
    assert x.type == INT
    assert x.promoted_from == "p.A"
    assert len(diag.of(NameCollisionWarning)) == 1


def test_pointer_embedding_makes_promoted_fields_optional(build):
    reg = build("package p\n\ntype Audit struct { By string }\n\ntype Doc struct {\n\t*Audit\n\tName string\n}\n")
    by, name = reg["p.Doc"].visible_fields
    assert (by.name, by.optional, by.promoted_from) == ("By", True, "p.Audit")
    assert (name.name, name.optional) == ("Name", False)


def test_tagged_or_non_struct_embeddings_are_plain_fields(build):
    reg = build(
        "\n".join(
            [
                "package p",
                "",
                "type Meta struct { K string }",
                "type Level int",
                "",
                "type Row struct {",
                '\tMeta `json:"meta"`',
                "\tLevel",
                "}",
            ]
        )
    )
    meta, level = reg["p.Row"].visible_fields
    assert (meta.output_name, meta.type) == ("meta", Named("p.Meta"))
    assert (level.output_name, level.type) == ("Level", Named("p.Level"))


def test_map_keys(build):
    diag = Diagnostics()
    reg = build(
        "\n".join(
            [
                "package p",
                "",
                "type Key struct { A int }",
                "type Status string",
                "",
                "type Index struct {",
                "\tByKey    map[Key]int",
                "\tByStatus map[Status]int",
                "\tByID     map[int64]string",
                "\tByFlag   map[bool]string",
                "}",
            ]
        ),
        diagnostics=diag,
    )
    by_key, by_status, by_id, by_flag = reg["p.Index"].visible_fields
    assert by_key.type == OPAQUE_RECORD
    assert by_status.type == Map(Named("p.Status"), INT)
    assert by_id.type == Map(INT, STRING)
    assert by_flag.type == OPAQUE_RECORD
    assert len(diag.of(UnsupportedShapeWarning)) == 2


def test_cross_package_references(build):
    diag = Diagnostics()
    reg = build(
        "\n".join(
            [
                "package models",
                "",
                'import "example.com/app/acct"',
                "",
                "type Invoice struct {",
                "\tOwner acct.Owner",
                "\tPayer acct.Payer",
                "}",
            ]
        ),
        "package acct\n\ntype Owner struct { Name string }\n",
        diagnostics=diag,
    )
    owner, payer = reg["models.Invoice"].visible_fields
    assert owner.type == Named("acct.Owner")
    assert payer.type == Unknown("acct.Payer")
    (w,) = diag.of(UnresolvedTypeWarning)
    assert "acct.Payer" in str(w)


def test_well_known_external_types(build):
    reg = build(
        "\n".join(
            [
                "package p",
                "",
                "import (",
                '\t"encoding/json"',
                '\t"time"',
                ")",
                "",
                "type Event struct {",
                "\tAt      time.Time",
                "\tTimeout time.Duration",
                "\tAmount  json.Number",
                "\tExtra   json.RawMessage",
                "\tBlob    []byte",
                "\tCodes   [4]byte",
                "}",
            ]
        )
    )
    types = [f.type for f in reg["p.Event"].visible_fields]
    assert types == [
        STRING,
        INT,
        Primitive(PrimitiveKind.FLOAT),
        ANY,
        Primitive(PrimitiveKind.BYTES),
        Slice(Primitive(PrimitiveKind.BYTE)),
    ]


def test_inline_structs_are_synthesized_after_their_owner(build):
    reg = build(
        "\n".join(
            [
                "package p",
                "",
                "type Order struct {",
                "\tItems []struct {",
                "\t\tSKU  string",
                "\t\tMeta struct { Note string }",
                "\t}",
                "}",
                "",
                "type Later struct{}",
            ]
        )
    )
    assert [pt.name for pt in reg] == ["Order", "OrderItems", "OrderItemsMeta", "Later"]
    (items,) = reg["p.Order"].visible_fields
    assert items.type == Slice(Named("p.OrderItems"))
    assert reg["p.OrderItems"].visible_fields[1].type == Named("p.OrderItemsMeta")


def test_tags_and_skipped_fields(build):
    diag = Diagnostics()
    reg = build(
        "\n".join(
            [
                "package p",
                "",
                "type T struct {",
                '\tA string `json:"a,omitempty"`',
                '\tB int    `json:",string"`',
                '\tC *int   `json:",string"`',
                '\tD string `json:"-"`',
                '\tE string `json:"e" tw:"ee,optional"`',
                "\tf int",
                "\tCh chan int",
                "\tFn func()",
                "\tZ complex128",
                "}",
            ]
        ),
        diagnostics=diag,
    )
    t = reg["p.T"]
    assert _names(t) == ["a", "B", "C", "ee"]
    a, b, c, e = t.visible_fields
    assert a.optional and a.type == STRING
    assert b.type == STRING and not b.optional
    assert c.type == Pointer(STRING) and c.optional
    assert e.optional
    assert [f.name for f in t.fields if f.skip] == ["D", "f", "Ch", "Fn", "Z"]
    assert len(diag.of(SkippedFieldWarning)) == 2
    assert len(diag.of(UnsupportedShapeWarning)) == 3


def test_type_parameters_render_as_interface(build):
    diag = Diagnostics()
    reg = build("package p\n\ntype Box[T any] struct {\n\tValue T\n\tItems []T\n}\n", diagnostics=diag)
    value, items = reg["p.Box"].visible_fields
    assert value.type == ANY
    assert items.type == Slice(ANY)
    assert reg["p.Box"].type_params == ("T",)
    assert len(diag.of(UnsupportedShapeWarning)) == 2


def test_aliases_and_private_types(build):
    diag = Diagnostics()
    reg = build(
        "\n".join(
            [
                "package p",
                "",
                "type ID = string",
                "type Tags []string",
                "type Cplx complex128",
                "",
                "// Secret holds keys.",
                "// @private",
                "type Secret struct { K string }",
                "",
                "type internal struct{}",
            ]
        ),
        diagnostics=diag,
    )
    assert reg["p.ID"].kind is TypeKind.ALIAS
    assert reg["p.ID"].target == STRING
    assert reg["p.Tags"].target == Slice(STRING)
    assert reg["p.Cplx"].target == ANY
    assert reg["p.Secret"].doc == "Secret holds keys."
    assert [pt.name for pt in reg.exported()] == ["ID", "Tags", "Cplx"]
    assert len(diag.of(UnsupportedShapeWarning)) == 1


def test_registry_is_frozen_after_build(build):
    reg = build("package p\n\ntype A int\n")
    assert reg.frozen


def test_warnings_land_in_the_callers_empty_collector():
    box = StructExpr(
        (
            FieldDecl(("Flags",), MapExpr(IdentExpr("bool"), IdentExpr("int")), line=4),
            FieldDecl(("Thing",), IdentExpr("Thing", pkg="ext"), line=5),
            FieldDecl(("Pick",), OtherExpr("[N + 1]int"), line=6),
        )
    )
    files = [SourceFile(path="box.go", package="p", decls=[TypeDecl("Box", box, line=3)])]
    diag = Diagnostics()

    reg = build_registry(files, diag)

    assert [type(w) for w in diag.warnings] == [
        UnsupportedShapeWarning,
        UnresolvedTypeWarning,
        UnsupportedShapeWarning,
    ]
    assert "[N + 1]int" in str(diag.warnings[2])
    assert reg["p.Box"].fields[0].type == OPAQUE_RECORD
    assert _names(reg["p.Box"]) == ["Flags", "Thing"]
