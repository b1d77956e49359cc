"""Individual validation rules for the changescript validator.

Each rule is a callable that accepts a ``Script`` and returns a list of
``Diagnostic`` objects.  Rules only inspect the script; the resolution
engine keeps its own permissive behaviour regardless of what they find.

    CS001  Duplicate declaration identifier
    CS002  Forward reference to a later declaration
    CS003  Reference to an undeclared identifier
    CS004  Hole still waiting for input
    CS005  Operand listed in more than one of params/holes/refs
"""
from __future__ import annotations

from typing import Callable

from changescript.ast.nodes import DeclarationNode, Script
from changescript.validator.diagnostics import Diagnostic, DiagnosticSeverity

Rule = Callable[[Script], list[Diagnostic]]


def _first_declarations(script: Script) -> dict[str, int]:
    """Map each declared identifier to the index of its first declaration."""
    first: dict[str, int] = {}
    for index, stat in enumerate(script.statements, start=1):
        if isinstance(stat.node, DeclarationNode):
            first.setdefault(stat.node.ident, index)
    return first


# ---------------------------------------------------------------------------
# CS001 — duplicate identifiers
# ---------------------------------------------------------------------------

def rule_duplicate_identifiers(script: Script) -> list[Diagnostic]:
    """CS001: a later declaration shadows an earlier one with the same identifier."""
    diagnostics: list[Diagnostic] = []
    first = _first_declarations(script)
    for index, stat in enumerate(script.statements, start=1):
        if not isinstance(stat.node, DeclarationNode):
            continue
        ident = stat.node.ident
        if first[ident] != index:
            diagnostics.append(Diagnostic(
                severity=DiagnosticSeverity.WARNING,
                code="CS001",
                message=f"Identifier {ident!r} already declared at statement {first[ident]}",
                index=index,
                suggestion=f"Rename one of the '{ident}' declarations",
                rule="duplicate_identifiers",
            ))
    return diagnostics


# ---------------------------------------------------------------------------
# CS002 / CS003 — references
# ---------------------------------------------------------------------------

def rule_forward_references(script: Script) -> list[Diagnostic]:
    """CS002: a reference names an identifier declared at or after its own statement."""
    diagnostics: list[Diagnostic] = []
    first = _first_declarations(script)
    for index, stat in enumerate(script.statements, start=1):
        cmd = stat.command
        if cmd is None:
            continue
        for key, ident in sorted(cmd.refs.items()):
            declared_at = first.get(ident)
            if declared_at is not None and declared_at >= index:
                diagnostics.append(Diagnostic(
                    severity=DiagnosticSeverity.WARNING,
                    code="CS002",
                    message=(
                        f"Operand {key!r} references ${ident}, declared at statement "
                        f"{declared_at}; it will never resolve"
                    ),
                    index=index,
                    suggestion=f"Move the '{ident}' declaration before this statement",
                    rule="forward_references",
                ))
    return diagnostics


def rule_undefined_references(script: Script) -> list[Diagnostic]:
    """CS003: a reference names an identifier that is never declared."""
    diagnostics: list[Diagnostic] = []
    first = _first_declarations(script)
    for index, stat in enumerate(script.statements, start=1):
        cmd = stat.command
        if cmd is None:
            continue
        for key, ident in sorted(cmd.refs.items()):
            if ident not in first:
                diagnostics.append(Diagnostic(
                    severity=DiagnosticSeverity.WARNING,
                    code="CS003",
                    message=f"Operand {key!r} references undeclared identifier ${ident}",
                    index=index,
                    rule="undefined_references",
                ))
    return diagnostics


# ---------------------------------------------------------------------------
# CS004 — pending holes
# ---------------------------------------------------------------------------

def rule_pending_holes(script: Script) -> list[Diagnostic]:
    """CS004: statements still waiting for hole values."""
    diagnostics: list[Diagnostic] = []
    for index, stat in enumerate(script.statements, start=1):
        holes = stat.get_holes()
        if holes:
            diagnostics.append(Diagnostic(
                severity=DiagnosticSeverity.INFORMATION,
                code="CS004",
                message=f"Needs input: {', '.join(holes)}",
                index=index,
                suggestion="Provide values with --fill name=value",
                rule="pending_holes",
            ))
    return diagnostics


# ---------------------------------------------------------------------------
# CS005 — operand maps overlap
# ---------------------------------------------------------------------------

def rule_disjoint_operands(script: Script) -> list[Diagnostic]:
    """CS005: an operand name appears in more than one operand map."""
    diagnostics: list[Diagnostic] = []
    for index, stat in enumerate(script.statements, start=1):
        cmd = stat.command
        if cmd is None:
            continue
        params, holes, refs = set(cmd.params), set(cmd.holes), set(cmd.refs)
        overlap = (params & holes) | (params & refs) | (holes & refs)
        for key in sorted(overlap):
            diagnostics.append(Diagnostic(
                severity=DiagnosticSeverity.ERROR,
                code="CS005",
                message=f"Operand {key!r} of '{cmd.action} {cmd.entity}' is both resolved and pending",
                index=index,
                rule="disjoint_operands",
            ))
    return diagnostics


DEFAULT_RULES: tuple[Rule, ...] = (
    rule_duplicate_identifiers,
    rule_forward_references,
    rule_undefined_references,
    rule_pending_holes,
    rule_disjoint_operands,
)
