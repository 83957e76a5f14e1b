from __future__ import annotations

from pathlib import Path

import pytest

from gotypewriter.config import Config, default_verbose
from gotypewriter.dialects import Dialect
from gotypewriter.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("GOTYPEWRITER_LANG", raising=False)
    monkeypatch.delenv("GOTYPEWRITER_VERBOSE", raising=False)


def test_dialect_from_environment(write_go, monkeypatch):
    src = write_go("a.go", ["package p"])
    monkeypatch.setenv("GOTYPEWRITER_LANG", "elm")
    cfg = Config.resolve(dialect=None, files=[str(src)])
    assert cfg.dialect is Dialect.ELM
    assert cfg.paths == (src,)


def test_explicit_dialect_beats_environment(write_go, monkeypatch):
    src = write_go("a.go", ["package p"])
    monkeypatch.setenv("GOTYPEWRITER_LANG", "elm")
    assert Config.resolve(dialect="py", files=[str(src)]).dialect is Dialect.PYTHON


def test_no_dialect_is_an_error(write_go):
    src = write_go("a.go", ["package p"])
    with pytest.raises(ConfigurationError, match="no dialect selected"):
        Config.resolve(dialect=None, files=[str(src)])


@pytest.mark.parametrize("value,expected", [("1", True), ("yes", True), ("0", False), ("", False)])
def test_default_verbose(monkeypatch, value: str, expected: bool):
    monkeypatch.setenv("GOTYPEWRITER_VERBOSE", value)
    assert default_verbose() is expected


def test_files_override_directory(write_go, tmp_path: Path):
    write_go("dir/a.go", ["package p"])
    single = write_go("other/b.go", ["package p"])
    cfg = Config.resolve(dialect="ts", files=[str(single)], directory=str(tmp_path / "dir"))
    assert cfg.paths == (single,)


def test_directory_without_go_files_is_an_error(tmp_path: Path):
    with pytest.raises(ConfigurationError, match="no Go source files"):
        Config.resolve(dialect="ts", directory=str(tmp_path))


@pytest.mark.parametrize(
    "kwargs,message",
    [
        ({"jobs": 0}, "jobs must be at least 1"),
        ({"elm_module": "types"}, "invalid Elm module name"),
        ({"elm_module": "App..Types"}, "invalid Elm module name"),
    ],
)
def test_invalid_settings(write_go, kwargs: dict, message: str):
    src = write_go("a.go", ["package p"])
    with pytest.raises(ConfigurationError, match=message):
        Config.resolve(dialect="elm", files=[str(src)], **kwargs)


def test_output_path_checks(write_go, tmp_path: Path):
    src = write_go("a.go", ["package p"])
    with pytest.raises(ConfigurationError, match="is a directory"):
        Config.resolve(dialect="ts", files=[str(src)], out=str(tmp_path))
    with pytest.raises(ConfigurationError, match="cannot write output"):
        Config.resolve(dialect="ts", files=[str(src)], out=str(tmp_path / "missing" / "t.ts"))

    cfg = Config.resolve(dialect="ts", files=[str(src)], out=str(tmp_path / "t.ts"), elm_module="App.Types")
    assert cfg.out == tmp_path / "t.ts"
