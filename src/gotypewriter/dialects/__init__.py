"""Target dialects and their rendering strategies."""

from __future__ import annotations

from enum import Enum

from ..errors import ConfigurationError
from .common import Renderer
from .elm import ElmRenderer
from .flow import FlowRenderer
from .python import PythonRenderer
from .typescript import TypeScriptRenderer


class Dialect(str, Enum):
    TYPESCRIPT = "ts"
    PYTHON = "py"
    ELM = "elm"
    FLOW = "flow"

    @classmethod
    def parse(cls, value: "Dialect | str") -> "Dialect":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for d in cls:
                if key in (d.value, d.name.lower()):
                    return d
            alias = _ALIASES.get(key)
            if alias is not None:
                return alias
        choices = ", ".join(d.value for d in cls)
        raise ConfigurationError(f"unknown dialect {value!r}; expected one of {choices}")


_ALIASES = {
    "typescript": Dialect.TYPESCRIPT,
    "python": Dialect.PYTHON,
    "dialect-a": Dialect.TYPESCRIPT,
    "dialect-b": Dialect.PYTHON,
    "dialect-c": Dialect.ELM,
}


def renderer_for(dialect: Dialect | str, *, elm_module: str = "Types") -> Renderer:
    d = Dialect.parse(dialect)
    if d is Dialect.TYPESCRIPT:
        return TypeScriptRenderer()
    if d is Dialect.PYTHON:
        return PythonRenderer()
    if d is Dialect.ELM:
        return ElmRenderer(module=elm_module)
    return FlowRenderer()


__all__ = [
    "Dialect",
    "ElmRenderer",
    "FlowRenderer",
    "PythonRenderer",
    "Renderer",
    "TypeScriptRenderer",
    "renderer_for",
]
