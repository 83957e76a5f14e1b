from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from gotypewriter.builder import build_registry
from gotypewriter.diagnostics import Diagnostics
from gotypewriter.paths import go_command
from gotypewriter.scanner import parse_source


@pytest.fixture
def write_go(tmp_path: Path):
    """Write Go source lines to tmp_path/<name> and return the path."""

    def _write(name: str, lines: list[str]) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def go_toolchain():
    """Skip tests that need the Go scan helper when no `go` is installed."""
    if shutil.which(go_command()) is None:
        pytest.skip("Go toolchain not found")


@pytest.fixture
def build(go_toolchain):
    """Parse sources (one string per file) and build a frozen registry."""

    def _build(*sources: str, diagnostics: Diagnostics | None = None):
        files = [parse_source(src, f"file{i}.go") for i, src in enumerate(sources)]
        return build_registry(files, diagnostics)

    return _build


USER_TEAM = "\n".join(
    [
        "package acct",
        "",
        "// User is an account.",
        "type User struct {",
        "\tID      int",
        "\tName    string",
        "\tManager *User",
        "}",
        "",
        "type Team struct {",
        "\tMembers []User",
        "}",
    ]
)

SHAPES = "\n".join(
    [
        "package shop",
        "",
        "type Tag string",
        "",
        "type status string",
        "",
        "type inner struct { Note string }",
        "",
        "type Post struct {",
        "\tTags   *[]Tag",
        "\tByID   map[int]string",
        "\tExtra  map[string]any",
        "\tState  status",
        "\tInner  inner",
        '\tKind   string `json:"kind-of"`',
        "}",
    ]
)


@pytest.fixture
def user_team(build):
    return build(USER_TEAM)


@pytest.fixture
def shapes(build):
    return build(SHAPES)


@pytest.fixture
def render():
    """Render a registry with a renderer and return the text."""

    def _render(renderer, registry, diagnostics: Diagnostics | None = None) -> str:
        return renderer.render(registry, diagnostics if diagnostics is not None else Diagnostics()).decode("utf-8")

    return _render


HIDDEN = "\n".join(
    [
        "package p",
        "",
        "type point struct {",
        "\tX     int",
        '\tLabel *string `json:"label,omitempty"`',
        "}",
        "",
        "type node struct {",
        "\tNext *node",
        "}",
        "",
        "type Shape struct {",
        "\tCorners []*point",
        "\tHead    node",
        "}",
    ]
)


@pytest.fixture
def hidden(build):
    return build(HIDDEN)
