"""changescript Parser module.

Exports the ``Parser`` class, the ``parse`` convenience function, and
parse error types.
"""
from __future__ import annotations

from changescript.parser.errors import ParseError, ParseErrorCollection
from changescript.parser.parser import Parser, convert_word, parse

__all__ = [
    "Parser",
    "parse",
    "convert_word",
    "ParseError",
    "ParseErrorCollection",
]
