"""changescript — templates for ordered infrastructure change scripts.

A script is a list of ``<action> <entity> key=value`` statements whose
operands may still be ``{holes}`` (values supplied later by the caller)
or ``$references`` (results of earlier declared statements).  This
package parses scripts, resolves them in one or more passes, executes
them through a driver, and renders them canonically for audit and diff.

Public API
----------
The stable public surface is everything exported from this module.

Example
-------
::

    import changescript

    template = changescript.parse('''
        myvpc = create vpc cidr={vpc.cidr}
        create subnet vpc=$myvpc cidr=10.0.1.0/24
    ''')

    # List what still needs input
    template.get_holes()            # ['vpc.cidr']

    # Resolve and dry-run a clone; the template is left untouched
    report = changescript.run(template, fills={"vpc.cidr": "10.0.0.0/16"})
    print(report.script)

    # Build the script undoing what ran
    print(changescript.revert(report.script))

    changescript.__version__
    '0.1.0'
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from changescript.ast.nodes import Script
    from changescript.diff.diff import ScriptChange
    from changescript.runner.driver import Driver
    from changescript.runner.engine import RunReport
    from changescript.validator.diagnostics import Diagnostic


def parse(source: str) -> "Script":
    """Parse script source text into a ``Script``.

    Raises
    ------
    changescript.lexer.LexError
        If the source contains invalid characters.
    changescript.parser.ParseErrorCollection
        If the source contains syntactic errors.
    """
    from changescript.parser.parser import parse as _parse

    return _parse(source)


def format(script: "Script") -> str:  # noqa: A001
    """Render a ``Script`` as canonical source text ending with a newline."""
    text = str(script)
    return f"{text}\n" if text else ""


def validate(script: "Script", strict: bool = False) -> list["Diagnostic"]:
    """Run the static checks on ``script``.

    Parameters
    ----------
    script:
        The script to check.
    strict:
        When ``True``, warnings are promoted to errors.
    """
    from changescript.validator.validator import validate as _validate

    return _validate(script, strict=strict)


def run(
    template: "Script",
    fills: dict[str, Any] | None = None,
    driver: "Driver | None" = None,
) -> "RunReport":
    """Resolve and execute a clone of ``template``.

    Parameters
    ----------
    template:
        The script to run; it is not modified.
    fills:
        Hole name to value.
    driver:
        The executor.  Defaults to a ``DryRunDriver``.
    """
    from changescript.runner import DryRunDriver, Runner

    return Runner(driver if driver is not None else DryRunDriver()).run(template, fills)


def revert(script: "Script") -> "Script":
    """Return the script undoing the successful commands of an executed ``script``."""
    from changescript.runner.revert import revert as _revert

    return _revert(script)


def diff(old: "Script", new: "Script") -> list["ScriptChange"]:
    """Compute the statement-level changes from ``old`` to ``new``."""
    from changescript.diff.diff import diff as _diff

    return _diff(old, new)


__all__ = [
    "__version__",
    "parse",
    "format",
    "validate",
    "run",
    "revert",
    "diff",
]
