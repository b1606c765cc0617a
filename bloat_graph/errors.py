"""Error types raised by the bloat-graph pipeline."""

from __future__ import annotations

from dataclasses import dataclass


class BloatGraphError(Exception):
    """Base class for every fatal pipeline error."""


class ReportParseError(BloatGraphError):
    """A cargo tree or size report could not be parsed."""

    def __init__(self, message: str, line: str | None = None, line_number: int | None = None):
        self.line = line
        self.line_number = line_number
        if line_number is not None:
            message = f"{message} (line {line_number}: {line!r})"
        super().__init__(message)


class RootResolutionError(BloatGraphError):
    """The root selector matched no node, or more than one."""

    def __init__(self, selector: str, candidates: list[str] | None = None):
        self.selector = selector
        self.candidates = candidates or []
        if self.candidates:
            shown = ", ".join(self.candidates[:10])
            more = f" (+{len(self.candidates) - 10} more)" if len(self.candidates) > 10 else ""
            message = f"Ambiguous root {selector!r}: matches {shown}{more}"
        else:
            message = f"Root not found: no dependency matches {selector!r}"
        super().__init__(message)


class ConfigurationError(BloatGraphError):
    """Invalid option value, gradient, or template."""


class CommandError(BloatGraphError):
    """An external program (cargo, dot) failed."""


@dataclass(frozen=True)
class UnmatchedSizeEntry:
    """A size report entry with no matching crate in the dependency tree."""
    name: str
    size: int

    def __str__(self) -> str:
        return f"size entry {self.name!r} ({self.size} bytes) matches no dependency"
