"""Parse error types for the changescript parser.

All parse errors carry source-location information so that the CLI can
display precise, actionable error messages.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from changescript.grammar.tokens import Token, TokenType


@dataclass(frozen=True)
class ParseError(Exception):
    """A single parse error with location.

    Parameters
    ----------
    message:
        Human-readable description of the error.
    line:
        1-based line of the offending token.
    col:
        1-based column of the offending token.
    expected:
        What token types were expected at this position.
    found:
        The actual token that was encountered, if available.
    """

    message: str
    line: int
    col: int
    expected: tuple[TokenType, ...] = ()
    found: Token | None = None

    def __str__(self) -> str:
        loc = f"{self.line}:{self.col}"
        if self.found is not None:
            return (
                f"ParseError at {loc}: {self.message} "
                f"(found {self.found.type.name} {self.found.value!r})"
            )
        return f"ParseError at {loc}: {self.message}"

    # dataclass(frozen=True) doesn't call Exception.__init__ automatically
    def __post_init__(self) -> None:
        object.__setattr__(self, "args", (str(self),))


@dataclass
class ParseErrorCollection(Exception):
    """Aggregates every ``ParseError`` from a single parse run.

    The parser skips to the next line after an error and keeps going, so
    one run reports every malformed statement.

    Parameters
    ----------
    errors:
        Ordered list of errors encountered during parsing.
    """

    errors: list[ParseError] = field(default_factory=list)

    def add(self, error: ParseError) -> None:
        """Append a new error to the collection."""
        self.errors.append(error)

    @property
    def has_errors(self) -> bool:
        """Return True if any errors were recorded."""
        return bool(self.errors)

    def __str__(self) -> str:
        if not self.errors:
            return "ParseErrorCollection (no errors)"
        lines = [f"ParseErrorCollection ({len(self.errors)} error(s)):"]
        for err in self.errors:
            lines.append(f"  {err}")
        return "\n".join(lines)
