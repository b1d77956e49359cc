"""changescript Recursive-Descent Parser.

Converts a flat list of ``Token`` objects into a ``Script``.

Grammar
-------
One statement per line; blank lines and ``#`` comments are ignored::

    statement   := declaration | command | value
    declaration := WORD "=" (command | value)
    command     := WORD WORD param*
    param       := WORD "=" operand
    operand     := HOLE | REF | list | scalar | empty
    list        := scalar ("," scalar)+
    scalar      := WORD | STRING
    value       := HOLE | list | scalar

Unquoted integers become ``int``, ``true``/``false`` become ``bool`` and
comma lists become ``list[str]``.  Quoted strings are always ``str``.
An empty operand, ``key=`` followed by the end of the line or by the
next ``key=``, becomes ``None``; that is how ``None`` and empty lists
render.

Error recovery
--------------
When an unexpected token is encountered the parser records a
``ParseError``, skips to the next newline and carries on with the next
statement.  All errors are raised together as a ``ParseErrorCollection``.
"""
from __future__ import annotations

import re
from typing import Any, Final

from changescript.ast.nodes import (
    CommandNode,
    DeclarationNode,
    ExpressionNode,
    Node,
    Script,
    Statement,
    ValueNode,
)
from changescript.grammar.tokens import Token, TokenType
from changescript.lexer.lexer import tokenize
from changescript.parser.errors import ParseError, ParseErrorCollection

_INT: Final[re.Pattern[str]] = re.compile(r"-?[0-9]+")
_BOOLS: Final[dict[str, bool]] = {"true": True, "false": False}
_END = (TokenType.NEWLINE, TokenType.EOF)
_SCALARS = (TokenType.WORD, TokenType.STRING)


class _StatementAbort(Exception):
    """Unwinds the current statement after an error has been recorded."""


def convert_word(text: str) -> Any:
    """Convert an unquoted word to ``int``, ``bool`` or leave it a ``str``."""
    if _INT.fullmatch(text):
        return int(text)
    if text in _BOOLS:
        return _BOOLS[text]
    return text


class Parser:
    """Recursive descent parser that produces a ``Script`` from tokens.

    Parameters
    ----------
    tokens:
        The flat token list produced by the lexer.  Must include the
        terminal ``EOF`` token.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens: list[Token] = [t for t in tokens if t.type != TokenType.COMMENT]
        self._pos: int = 0
        self._errors: ParseErrorCollection = ParseErrorCollection()

    # ------------------------------------------------------------------
    # Navigation helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return self._tokens[-1]  # EOF

    def _peek(self, offset: int = 1) -> Token:
        idx = self._pos + offset
        if idx < len(self._tokens):
            return self._tokens[idx]
        return self._tokens[-1]

    def _advance(self) -> Token:
        tok = self._current()
        if tok.type != TokenType.EOF:
            self._pos += 1
        return tok

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _match(self, *types: TokenType) -> Token | None:
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: TokenType, message: str) -> Token:
        if self._check(token_type):
            return self._advance()
        self._fail(message, (token_type,))

    def _fail(self, message: str, expected: tuple[TokenType, ...]) -> None:
        """Record an error at the current token and abandon the statement."""
        tok = self._current()
        self._errors.add(
            ParseError(message=message, line=tok.line, col=tok.col, expected=expected, found=tok)
        )
        raise _StatementAbort

    def _synchronize(self) -> None:
        """Skip tokens up to and including the next newline."""
        while not self._check(*_END):
            self._advance()
        self._match(TokenType.NEWLINE)

    # ------------------------------------------------------------------
    # Top level
    # ------------------------------------------------------------------

    def parse(self) -> Script:
        """Parse every statement and return the ``Script``.

        Raises
        ------
        ParseErrorCollection
            If any statement failed to parse.
        """
        statements: list[Statement] = []
        while not self._check(TokenType.EOF):
            if self._match(TokenType.NEWLINE):
                continue
            try:
                statements.append(Statement(node=self._parse_statement()))
            except _StatementAbort:
                self._synchronize()

        if self._errors.has_errors:
            raise self._errors
        return Script(statements=statements)

    def _parse_statement(self) -> Node:
        tok = self._current()
        if tok.type == TokenType.WORD and self._peek().type == TokenType.ASSIGN:
            self._advance()
            self._advance()
            node: Node = DeclarationNode(ident=tok.value, expr=self._parse_expression())
        else:
            node = self._parse_expression()

        if not self._check(*_END):
            self._fail("Expected end of statement", _END)
        self._match(TokenType.NEWLINE)
        return node

    def _parse_expression(self) -> ExpressionNode:
        tok = self._current()
        if tok.type == TokenType.WORD and self._peek().type == TokenType.WORD:
            return self._parse_command()
        if tok.type == TokenType.HOLE:
            self._advance()
            return ValueNode(hole=tok.value)
        if tok.type in _SCALARS:
            return ValueNode(value=self._parse_value())
        self._fail("Expected a command or a value", (TokenType.WORD, TokenType.STRING, TokenType.HOLE))

    # ------------------------------------------------------------------
    # Commands and operands
    # ------------------------------------------------------------------

    def _parse_command(self) -> CommandNode:
        action = self._advance().value
        entity = self._advance().value
        cmd = CommandNode(action=action, entity=entity)

        while self._check(TokenType.WORD):
            key_tok = self._advance()
            key = key_tok.value
            if key in cmd.keys():
                self._errors.add(
                    ParseError(
                        message=f"Duplicate operand {key!r} in '{action} {entity}'",
                        line=key_tok.line,
                        col=key_tok.col,
                        found=key_tok,
                    )
                )
                raise _StatementAbort
            self._expect(TokenType.ASSIGN, f"Expected '=' after operand {key!r}")

            operand = self._current()
            if self._at_empty_operand():
                cmd.params[key] = None
            elif operand.type == TokenType.HOLE:
                self._advance()
                cmd.holes[key] = operand.value
            elif operand.type == TokenType.REF:
                self._advance()
                cmd.refs[key] = operand.value
            elif operand.type in _SCALARS:
                cmd.params[key] = self._parse_value()
            else:
                self._fail(
                    f"Expected a value for operand {key!r}",
                    (TokenType.WORD, TokenType.STRING, TokenType.HOLE, TokenType.REF),
                )
        return cmd

    def _at_empty_operand(self) -> bool:
        """True after ``key=`` when the line ends or the next operand starts."""
        if self._check(*_END):
            return True
        return self._check(TokenType.WORD) and self._peek().type == TokenType.ASSIGN

    def _parse_value(self) -> Any:
        """Parse a scalar, or a comma list of scalars."""
        first = self._advance()
        if not self._check(TokenType.COMMA):
            if first.type == TokenType.STRING:
                return first.value
            return convert_word(first.value)

        items = [first.value]
        while self._match(TokenType.COMMA):
            if not self._check(*_SCALARS):
                self._fail("Expected a list item after ','", _SCALARS)
            items.append(self._advance().value)
        return items


# ---------------------------------------------------------------------------
# Module-level convenience function
# ---------------------------------------------------------------------------


def parse(source: str) -> Script:
    """Parse script source text and return the ``Script``.

    Raises
    ------
    LexError
        If the source contains invalid characters or unterminated literals.
    ParseErrorCollection
        If the source contains syntactic errors.

    Example
    -------
    ::

        from changescript.parser import parse
        script = parse('''
            myvpc = create vpc cidr={vpc.cidr}
            create subnet vpc=$myvpc cidr=10.0.1.0/24
        ''')
    """
    tokens = tokenize(source)
    return Parser(tokens).parse()
