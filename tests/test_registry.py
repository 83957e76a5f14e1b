from __future__ import annotations

import pytest

from gotypewriter.diagnostics import Diagnostics, NameCollisionWarning
from gotypewriter.errors import RegistryFrozenError, RenderError
from gotypewriter.model import PackageType, TypeKind
from gotypewriter.registry import TypeRegistry


def test_later_declaration_wins_but_keeps_its_slot(build):
    reg = build(
        "package p\n\ntype A struct { X int }\n\ntype B int\n",
        "package p\n\ntype A struct { Y string }\n",
    )
    assert [pt.name for pt in reg] == ["A", "B"]
    assert [f.name for f in reg["p.A"].fields] == ["Y"]
    assert reg["p.A"].file == "file1.go"


def test_lookup_helpers():
    reg = TypeRegistry()
    pt = PackageType(package="p", name="A", kind=TypeKind.STRUCT)
    reg.add(pt)
    assert reg.get("p.A") is pt
    assert reg.resolve("p", "A") is pt
    assert reg.resolve("q", "A") is None
    assert "p.A" in reg
    assert len(reg) == 1


def test_frozen_registry_rejects_additions():
    reg = TypeRegistry().freeze()
    with pytest.raises(RegistryFrozenError):
        reg.add(PackageType(package="p", name="A", kind=TypeKind.STRUCT))


def test_colliding_short_names_are_prefixed_with_their_package(build):
    diag = Diagnostics()
    reg = build(
        "package a\n\ntype User struct{}\n",
        "package b_c\n\ntype User struct{}\n\ntype Team struct{}\n",
    )
    names = reg.render_names(diag)
    assert names == {"a.User": "AUser", "b_c.User": "BCUser", "b_c.Team": "Team"}
    assert len(diag.of(NameCollisionWarning)) == 1


def test_collision_surviving_prefixing_is_a_render_error(build):
    reg = build(
        "package a\n\ntype User struct{}\n",
        "package b\n\ntype User struct{}\n",
        "package a\n\ntype BUser struct{}\n",
    )
    with pytest.raises(RenderError, match="BUser"):
        reg.render_names()
