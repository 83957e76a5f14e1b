"""Domain-specific errors for gotypewriter."""

from __future__ import annotations


class GoTypewriterError(Exception):
    """Base error for gotypewriter."""


class ConfigurationError(GoTypewriterError):
    """Raised before scanning for an invalid dialect, empty file list or unusable sink."""


class ParseError(GoTypewriterError):
    """Raised when a Go source file cannot be read or parsed."""

    def __init__(self, path: str, line: int, column: int, message: str):
        self.path = path
        self.line = line
        self.column = column
        self.message = message
        super().__init__(f"{path}:{line}:{column}: {message}")


class ToolchainError(GoTypewriterError):
    """Raised when the Go scan helper cannot be built or run."""


class ParseErrors(GoTypewriterError):
    """Raised after scanning when one or more files failed to parse."""

    def __init__(self, errors: list[ParseError]):
        self.errors = list(errors)
        lines = [f"{len(self.errors)} file(s) failed to parse:"]
        lines.extend(f"  {e}" for e in self.errors)
        super().__init__("\n".join(lines))


class RenderError(GoTypewriterError):
    """Raised when a dialect cannot represent a discovered shape at all."""


class NoTypesError(GoTypewriterError):
    """Raised when the registry holds no exported types to render."""


class RegistryFrozenError(GoTypewriterError):
    """Raised when a frozen type registry is mutated."""
