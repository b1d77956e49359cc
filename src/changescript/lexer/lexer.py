"""changescript Lexer: converts script source into a flat list of tokens.

The lexer is a single-pass character scanner.  It tracks line and column
numbers for every token so the parser can report precise errors.

Lexical rules:
    - ``#`` starts a comment that runs to the end of the line
    - words use the simple-token alphabet ``[A-Za-z0-9-._:/+;~@<>]``
    - strings are wrapped in ``'`` or ``"``; inside them a backslash
      escapes the next character, and ``\\n`` stands for a newline
    - ``{name}`` is a hole and ``$name`` a reference
    - newlines are significant and emitted as ``NEWLINE`` tokens
"""
from __future__ import annotations

import re
from typing import Final

from changescript.grammar.tokens import Token, TokenType

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WORD_CHAR: Final[re.Pattern[str]] = re.compile(r"[a-zA-Z0-9\-._:/+;~@<>]")
_NAME_CHAR: Final[re.Pattern[str]] = re.compile(r"[a-zA-Z0-9\-._]")
_QUOTES: Final[frozenset[str]] = frozenset({"'", '"'})
_ESCAPES: Final[dict[str, str]] = {"n": "\n"}


class LexError(Exception):
    """Raised when the lexer encounters invalid input.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    line:
        1-based line number where the error occurred.
    col:
        1-based column number where the error occurred.
    offset:
        0-based offset in the source where the error occurred.
    """

    def __init__(self, message: str, line: int, col: int, offset: int) -> None:
        super().__init__(f"LexError at {line}:{col}: {message}")
        self.lex_message = message
        self.line = line
        self.col = col
        self.offset = offset


class Lexer:
    """Single-pass changescript lexer.

    Parameters
    ----------
    source:
        The complete script source text to tokenize.
    """

    __slots__ = ("_source", "_pos", "_line", "_col", "_tokens", "_token_line", "_token_col")

    def __init__(self, source: str) -> None:
        self._source: str = source
        self._pos: int = 0
        self._line: int = 1
        self._col: int = 1
        self._tokens: list[Token] = []
        self._token_line: int = 1
        self._token_col: int = 1

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def tokenize(self) -> list[Token]:
        """Scan the entire source and return the complete token list.

        The list always ends with an ``EOF`` token.

        Raises
        ------
        LexError
            On any character that cannot begin a valid token, or on an
            unterminated string, hole or reference.
        """
        while self._pos < len(self._source):
            self._scan_one()
        self._token_line = self._line
        self._token_col = self._col
        self._emit(TokenType.EOF, "", self._pos)
        return self._tokens

    # ------------------------------------------------------------------
    # Internal scanner
    # ------------------------------------------------------------------

    def _current(self) -> str:
        return self._source[self._pos] if self._pos < len(self._source) else ""

    def _advance(self) -> str:
        """Consume and return the current character, updating line/col."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _emit(self, token_type: TokenType, value: str, start_offset: int) -> None:
        self._tokens.append(
            Token(
                type=token_type,
                value=value,
                line=self._token_line,
                col=self._token_col,
                offset=start_offset,
            )
        )

    def _error(self, message: str, start: int) -> LexError:
        return LexError(message, self._token_line, self._token_col, start)

    def _scan_one(self) -> None:
        """Scan exactly one token (or skip whitespace)."""
        self._token_line = self._line
        self._token_col = self._col
        start = self._pos
        ch = self._current()

        if ch in (" ", "\t", "\r"):
            self._advance()
            return

        if ch == "\n":
            self._advance()
            self._emit(TokenType.NEWLINE, "\n", start)
            return

        if ch == "#":
            self._scan_comment(start)
            return

        if ch in _QUOTES:
            self._scan_string(start)
            return

        if ch == "{":
            self._scan_hole(start)
            return

        if ch == "$":
            self._advance()
            name = self._scan_name()
            if not name:
                raise self._error("Expected identifier after '$'", start)
            self._emit(TokenType.REF, name, start)
            return

        if ch == "=":
            self._advance()
            self._emit(TokenType.ASSIGN, "=", start)
            return

        if ch == ",":
            self._advance()
            self._emit(TokenType.COMMA, ",", start)
            return

        if _WORD_CHAR.match(ch):
            buf: list[str] = []
            while self._pos < len(self._source) and _WORD_CHAR.match(self._current()):
                buf.append(self._advance())
            self._emit(TokenType.WORD, "".join(buf), start)
            return

        raise self._error(f"Unexpected character {ch!r}", start)

    # ------------------------------------------------------------------
    # Token-specific scanners
    # ------------------------------------------------------------------

    def _scan_name(self) -> str:
        buf: list[str] = []
        while self._pos < len(self._source) and _NAME_CHAR.match(self._current()):
            buf.append(self._advance())
        return "".join(buf)

    def _scan_comment(self, start: int) -> None:
        """Consume a ``#`` comment through the end of the line."""
        text_start = self._pos
        while self._pos < len(self._source) and self._current() != "\n":
            self._advance()
        self._emit(TokenType.COMMENT, self._source[text_start : self._pos], start)

    def _scan_hole(self, start: int) -> None:
        """Consume a ``{name}`` hole."""
        self._advance()  # {
        name = self._scan_name()
        if self._current() != "}":
            raise self._error("Unterminated hole (expected '}')", start)
        self._advance()  # }
        if not name:
            raise self._error("Empty hole name", start)
        self._emit(TokenType.HOLE, name, start)

    def _scan_string(self, start: int) -> None:
        """Consume a quoted string; a backslash escapes the following character.

        ``\\n`` reads as a newline; any other escaped character stands for itself.
        """
        quote_char = self._advance()
        buf: list[str] = []
        while self._pos < len(self._source):
            ch = self._current()
            if ch == quote_char:
                self._advance()
                self._emit(TokenType.STRING, "".join(buf), start)
                return
            if ch == "\n":
                raise self._error("Unterminated string literal (newline in string)", start)
            if ch == "\\":
                self._advance()
                if self._pos >= len(self._source):
                    break
                escaped = self._advance()
                buf.append(_ESCAPES.get(escaped, escaped))
                continue
            buf.append(self._advance())
        raise self._error("Unterminated string literal (EOF)", start)


# ---------------------------------------------------------------------------
# Module-level convenience function
# ---------------------------------------------------------------------------


def tokenize(source: str) -> list[Token]:
    """Tokenize script source and return the complete token list.

    Example
    -------
    ::

        from changescript.lexer import tokenize
        tokens = tokenize("create vpc cidr={vpc.cidr}")
    """
    return Lexer(source).tokenize()
