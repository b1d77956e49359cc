"""changescript Validator module.

Exports the ``Validator`` class, the ``validate`` convenience function,
``Diagnostic`` types, and all built-in validation rules.
"""
from __future__ import annotations

from changescript.validator.diagnostics import Diagnostic, DiagnosticSeverity
from changescript.validator.rules import DEFAULT_RULES, Rule
from changescript.validator.validator import Validator, validate

__all__ = [
    "Validator",
    "validate",
    "Diagnostic",
    "DiagnosticSeverity",
    "Rule",
    "DEFAULT_RULES",
]
