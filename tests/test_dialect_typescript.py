from __future__ import annotations

from gotypewriter.diagnostics import Diagnostics, UnresolvedTypeWarning
from gotypewriter.dialects import TypeScriptRenderer


def test_user_team(user_team, render):
    assert render(TypeScriptRenderer(), user_team) == "\n".join(
        [
            "/** User is an account. */",
            "export interface User {",
            "  ID: number;",
            "  Name: string;",
            "  Manager?: User | null;",
            "}",
            "",
            "export interface Team {",
            "  Members: User[];",
            "}",
            "",
        ]
    )


def test_shapes(shapes, render):
    diag = Diagnostics()
    assert render(TypeScriptRenderer(), shapes, diag) == "\n".join(
        [
            "export type Tag = string;",
            "",
            "export interface Post {",
            "  Tags?: Tag[] | null;",
            "  ByID: { [key: number]: string };",
            "  Extra: { [key: string]: any };",
            "  State: string;",
            "  Inner: { Note: string };",
            '  "kind-of": string;',
            "}",
            "",
        ]
    )
    assert diag.warnings == []


def test_multiline_docs_and_optional_fields(build, render):
    reg = build(
        "\n".join(
            [
                "package p",
                "",
                "// Page is one page",
                "// of results.",
                "type Page struct {",
                "\t// Cursor for the next page.",
                '\tNext  string   `json:"next,omitempty"`',
                "\tItems []*string",
                "}",
            ]
        )
    )
    assert render(TypeScriptRenderer(), reg) == "\n".join(
        [
            "/**",
            " * Page is one page",
            " * of results.",
            " */",
            "export interface Page {",
            "  /** Cursor for the next page. */",
            "  next?: string;",
            "  Items: (string | null)[];",
            "}",
            "",
        ]
    )


def test_unexported_structs_render_inline(hidden, render):
    diag = Diagnostics()
    assert render(TypeScriptRenderer(), hidden, diag) == "\n".join(
        [
            "export interface Shape {",
            "  Corners: ({ X: number; label?: string | null } | null)[];",
            "  Head: { Next?: any | null };",
            "}",
            "",
        ]
    )
    (w,) = diag.of(UnresolvedTypeWarning)
    assert "p.node" in str(w)
