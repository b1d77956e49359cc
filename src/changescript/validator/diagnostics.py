"""Diagnostic types for the changescript validator.

A ``Diagnostic`` is an annotated message attached to a statement of a
script, identified by its 1-based position.  Index ``0`` designates the
script as a whole.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostics, aligned with LSP conventions."""

    ERROR = auto()
    WARNING = auto()
    INFORMATION = auto()
    HINT = auto()


@dataclass(frozen=True)
class Diagnostic:
    """A single validation finding.

    Parameters
    ----------
    severity:
        How serious this finding is.
    code:
        A short machine-readable identifier, e.g. ``"CS001"``.
    message:
        Human-readable description of the problem.
    index:
        1-based position of the offending statement in the script.
    suggestion:
        Optional human-readable fix suggestion.
    rule:
        The rule name that produced this diagnostic.
    """

    severity: DiagnosticSeverity
    code: str
    message: str
    index: int
    suggestion: str | None = field(default=None)
    rule: str = field(default="")

    def __str__(self) -> str:
        prefix = f"[{self.code}] {self.severity.name}"
        suggestion_part = f" (hint: {self.suggestion})" if self.suggestion else ""
        return f"{prefix} at statement {self.index}: {self.message}{suggestion_part}"

    @property
    def is_error(self) -> bool:
        """Return True if this diagnostic should block a successful validation."""
        return self.severity == DiagnosticSeverity.ERROR
