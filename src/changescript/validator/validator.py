"""changescript Validator: optional static checks over a ``Script``.

The ``Validator`` runs a configurable set of rules and returns a list of
``Diagnostic`` objects.  It never changes the script, and the resolution
engine does not depend on it: forward or undefined references are
reported here but still simply stay unresolved at run time.

Usage
-----
::

    from changescript.parser import parse
    from changescript.validator import Validator

    script = parse(source)
    diagnostics = Validator().validate(script)
    errors = [d for d in diagnostics if d.is_error]
"""
from __future__ import annotations

import logging

from changescript.ast.nodes import Script
from changescript.validator.diagnostics import Diagnostic, DiagnosticSeverity
from changescript.validator.rules import DEFAULT_RULES, Rule

logger = logging.getLogger(__name__)


class Validator:
    """Static validator for changescript scripts.

    Parameters
    ----------
    rules:
        The rules to run.  Defaults to all built-in rules
        (``DEFAULT_RULES``).
    strict:
        When ``True``, WARNING-level diagnostics are promoted to ERROR.
    """

    def __init__(
        self,
        rules: list[Rule] | None = None,
        strict: bool = False,
    ) -> None:
        self._rules: list[Rule] = rules if rules is not None else list(DEFAULT_RULES)
        self._strict: bool = strict

    def validate(self, script: Script) -> list[Diagnostic]:
        """Run all rules against ``script`` and return the collected diagnostics.

        Returns
        -------
        list[Diagnostic]
            All findings, sorted by statement index then code.
        """
        all_diagnostics: list[Diagnostic] = []
        for rule in self._rules:
            try:
                all_diagnostics.extend(rule(script))
            except Exception as exc:  # noqa: BLE001
                logger.exception("Validation rule %r crashed", rule.__name__)
                all_diagnostics.append(
                    Diagnostic(
                        severity=DiagnosticSeverity.ERROR,
                        code="CS999",
                        message=f"Internal validator error in rule {rule.__name__!r}: {exc}",
                        index=0,
                        suggestion="Please report this as a bug",
                        rule=rule.__name__,
                    )
                )

        if self._strict:
            all_diagnostics = [
                Diagnostic(
                    severity=DiagnosticSeverity.ERROR,
                    code=d.code,
                    message=d.message,
                    index=d.index,
                    suggestion=d.suggestion,
                    rule=d.rule,
                )
                if d.severity == DiagnosticSeverity.WARNING
                else d
                for d in all_diagnostics
            ]

        all_diagnostics.sort(key=lambda d: (d.index, d.code))
        return all_diagnostics

    def add_rule(self, rule: Rule) -> None:
        """Add a custom ``(Script) -> list[Diagnostic]`` rule."""
        self._rules.append(rule)

    @property
    def rule_count(self) -> int:
        return len(self._rules)


def validate(script: Script, strict: bool = False) -> list[Diagnostic]:
    """Convenience function: validate a ``Script`` with the default rules."""
    return Validator(strict=strict).validate(script)
