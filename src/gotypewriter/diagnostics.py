"""Non-fatal warnings collected during a run.

Warnings are a separate channel from exceptions: they are always collected so
the structural output never depends on verbosity, and only logged when the run
is verbose.
"""

from __future__ import annotations

import logging

log = logging.getLogger(__name__)


class GoTypewriterWarning(UserWarning):
    """Base category for gotypewriter warnings."""


class UnresolvedTypeWarning(GoTypewriterWarning):
    """A referenced type was not found in any scanned file."""


class UnsupportedShapeWarning(GoTypewriterWarning):
    """A field or key shape has no faithful rendering and fell back."""


class SkippedFieldWarning(GoTypewriterWarning):
    """A field was excluded from output."""


class NameCollisionWarning(GoTypewriterWarning):
    """Two declarations compete for the same output name."""


class Diagnostics:
    def __init__(self, *, verbose: bool = False):
        self.verbose = verbose
        self.warnings: list[GoTypewriterWarning] = []

    def warn(self, category: type[GoTypewriterWarning], message: str, *, where: str | None = None) -> None:
        text = f"{where}: {message}" if where else message
        self.warnings.append(category(text))
        if self.verbose:
            log.warning("%s: %s", category.__name__, text)

    def of(self, category: type[GoTypewriterWarning]) -> list[GoTypewriterWarning]:
        return [w for w in self.warnings if isinstance(w, category)]

    def __len__(self) -> int:
        return len(self.warnings)
