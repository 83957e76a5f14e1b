from __future__ import annotations

import io
import logging
from typing import IO

from .diagnostics import Diagnostics
from .dialects import Dialect, renderer_for
from .errors import NoTypesError
from .registry import TypeRegistry

log = logging.getLogger(__name__)


def draw(
    registry: TypeRegistry,
    sink: IO,
    dialect: Dialect | str,
    *,
    diagnostics: Diagnostics | None = None,
    elm_module: str = "Types",
) -> int:
    """Render every exported type in `registry` and write it to `sink`.

    The whole payload is rendered before the sink is touched, so a RenderError
    leaves nothing behind. Returns the number of bytes written.
    """
    d = Dialect.parse(dialect)
    if not registry.exported():
        raise NoTypesError("no exported types were discovered")

    if diagnostics is None:
        diagnostics = Diagnostics()
    payload = renderer_for(d, elm_module=elm_module).render(registry, diagnostics)
    log.debug("rendered %d type(s) as %s (%d bytes)", len(registry.exported()), d.value, len(payload))

    if isinstance(sink, io.TextIOBase):
        sink.write(payload.decode("utf-8"))
    else:
        sink.write(payload)
    return len(payload)
