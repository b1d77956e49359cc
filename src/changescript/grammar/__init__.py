"""changescript grammar module.

Exports the token vocabulary shared by the lexer and the parser.
"""
from __future__ import annotations

from changescript.grammar.tokens import Token, TokenType

__all__ = ["Token", "TokenType"]
