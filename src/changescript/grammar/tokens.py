"""Token definitions for changescript source text.

Scripts are line oriented: each non-blank line holds one statement made
of words, quoted strings, ``{hole}`` placeholders, ``$ref`` references,
``=`` and ``,``.  Every scanned token is represented by a ``Token``
dataclass carrying its type, text, and source position.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Exhaustive enumeration of changescript token types."""

    # -----------------------------------------------------------------
    # Operands
    # -----------------------------------------------------------------
    WORD = auto()     # unquoted simple token, e.g. create, 10.0.0.0/16
    STRING = auto()   # quoted string, value holds the unescaped text
    HOLE = auto()     # {name}, value holds the name
    REF = auto()      # $name, value holds the name

    # -----------------------------------------------------------------
    # Punctuation
    # -----------------------------------------------------------------
    ASSIGN = auto()
    COMMA = auto()

    # -----------------------------------------------------------------
    # Whitespace / structure
    # -----------------------------------------------------------------
    NEWLINE = auto()
    COMMENT = auto()
    EOF = auto()


@dataclass(frozen=True, slots=True)
class Token:
    """A single scanned token with source-location metadata.

    Parameters
    ----------
    type:
        The ``TokenType`` variant for this token.
    value:
        The token text.  For ``STRING``, ``HOLE`` and ``REF`` tokens this
        is the payload without quotes, braces or ``$``.
    line:
        1-based line number in the source.
    col:
        1-based column number of the first character of the token.
    offset:
        0-based character offset from the start of the source string.
    """

    type: TokenType
    value: str
    line: int
    col: int
    offset: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.col})"

    @property
    def is_operand(self) -> bool:
        """Return True if this token can stand for an operand value."""
        return self.type in (TokenType.WORD, TokenType.STRING, TokenType.HOLE, TokenType.REF)
