"""Unit tests for changescript.validator.validator, changescript.validator.rules,
and changescript.validator.diagnostics — covering all three modules in one file.
"""
from __future__ import annotations

import pytest

from changescript.ast.nodes import Script
from changescript.parser.parser import parse
from changescript.validator.diagnostics import Diagnostic, DiagnosticSeverity
from changescript.validator.rules import (
    DEFAULT_RULES,
    rule_disjoint_operands,
    rule_duplicate_identifiers,
    rule_forward_references,
    rule_pending_holes,
    rule_undefined_references,
)
from changescript.validator.validator import Validator, validate

# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def _codes(diagnostics: list[Diagnostic]) -> list[str]:
    return [d.code for d in diagnostics]


# ---------------------------------------------------------------------------
# Diagnostic
# ---------------------------------------------------------------------------


class TestDiagnostic:
    def test_str_with_suggestion(self) -> None:
        diag = Diagnostic(
            severity=DiagnosticSeverity.WARNING,
            code="CS001",
            message="dup",
            index=3,
            suggestion="rename",
        )
        assert str(diag) == "[CS001] WARNING at statement 3: dup (hint: rename)"

    def test_str_without_suggestion(self) -> None:
        diag = Diagnostic(severity=DiagnosticSeverity.ERROR, code="CS005", message="m", index=1)
        assert str(diag) == "[CS005] ERROR at statement 1: m"

    def test_is_error(self) -> None:
        assert Diagnostic(DiagnosticSeverity.ERROR, "X", "m", 1).is_error
        assert not Diagnostic(DiagnosticSeverity.WARNING, "X", "m", 1).is_error

    def test_frozen(self) -> None:
        diag = Diagnostic(DiagnosticSeverity.HINT, "X", "m", 1)
        with pytest.raises(AttributeError):
            diag.code = "Y"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


class TestDuplicateIdentifiers:
    def test_flags_later_declaration(self) -> None:
        script = parse("a = create vpc\nb = create subnet\na = create vpc\n")
        diagnostics = rule_duplicate_identifiers(script)
        assert len(diagnostics) == 1
        assert diagnostics[0].index == 3
        assert "statement 1" in diagnostics[0].message
        assert diagnostics[0].severity is DiagnosticSeverity.WARNING

    def test_unique_identifiers_clean(self, network_script: Script) -> None:
        assert rule_duplicate_identifiers(network_script) == []


class TestReferences:
    def test_forward_reference(self) -> None:
        script = parse("create subnet vpc=$myvpc\nmyvpc = create vpc\n")
        diagnostics = rule_forward_references(script)
        assert _codes(diagnostics) == ["CS002"]
        assert diagnostics[0].index == 1

    def test_self_reference_is_forward(self) -> None:
        script = parse("a = create subnet vpc=$a\n")
        assert _codes(rule_forward_references(script)) == ["CS002"]

    def test_backward_reference_clean(self, network_script: Script) -> None:
        assert rule_forward_references(network_script) == []
        assert rule_undefined_references(network_script) == []

    def test_undefined_reference(self) -> None:
        script = parse("create subnet vpc=$ghost\n")
        diagnostics = rule_undefined_references(script)
        assert _codes(diagnostics) == ["CS003"]
        assert "$ghost" in diagnostics[0].message

    def test_references_inside_declarations_checked(self) -> None:
        script = parse("s = create subnet vpc=$ghost\n")
        assert _codes(rule_undefined_references(script)) == ["CS003"]


class TestPendingHoles:
    def test_lists_hole_names(self, network_script: Script) -> None:
        diagnostics = rule_pending_holes(network_script)
        assert [d.index for d in diagnostics] == [1, 3]
        assert diagnostics[0].message == "Needs input: vpc.cidr"
        assert all(d.severity is DiagnosticSeverity.INFORMATION for d in diagnostics)

    def test_value_holes_reported(self) -> None:
        assert rule_pending_holes(parse("{region}")) [0].message == "Needs input: region"

    def test_filled_script_clean(self, network_script: Script, network_fills: dict) -> None:
        network_script.process_holes(network_fills)
        assert rule_pending_holes(network_script) == []


class TestDisjointOperands:
    def test_overlap_is_error(self, network_script: Script) -> None:
        cmd = network_script.commands()[1]
        cmd.holes["cidr"] = "subnet.cidr"
        diagnostics = rule_disjoint_operands(network_script)
        assert _codes(diagnostics) == ["CS005"]
        assert diagnostics[0].is_error
        assert diagnostics[0].index == 2

    def test_parsed_scripts_are_disjoint(self, network_script: Script) -> None:
        assert rule_disjoint_operands(network_script) == []


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class TestValidator:
    def test_default_rules(self) -> None:
        assert Validator().rule_count == len(DEFAULT_RULES)

    def test_sorted_by_index_then_code(self) -> None:
        script = parse("create subnet vpc=$late cidr={c}\nlate = create vpc\n")
        diagnostics = validate(script)
        assert [(d.index, d.code) for d in diagnostics] == [(1, "CS002"), (1, "CS004")]

    def test_strict_promotes_warnings(self) -> None:
        script = parse("create subnet vpc=$ghost\n")
        diagnostics = validate(script, strict=True)
        assert diagnostics[0].code == "CS003"
        assert diagnostics[0].severity is DiagnosticSeverity.ERROR

    def test_strict_leaves_information(self, network_script: Script) -> None:
        diagnostics = validate(network_script, strict=True)
        assert all(d.severity is DiagnosticSeverity.INFORMATION for d in diagnostics)

    def test_crashing_rule_reported(self, caplog: pytest.LogCaptureFixture) -> None:
        def broken(script: Script) -> list[Diagnostic]:
            raise RuntimeError("kaboom")

        validator = Validator(rules=[broken])
        diagnostics = validator.validate(Script())
        assert _codes(diagnostics) == ["CS999"]
        assert diagnostics[0].index == 0
        assert "kaboom" in diagnostics[0].message
        assert "crashed" in caplog.text

    def test_add_rule(self) -> None:
        def always(script: Script) -> list[Diagnostic]:
            return [Diagnostic(DiagnosticSeverity.HINT, "CS900", "hi", 0)]

        validator = Validator(rules=[])
        validator.add_rule(always)
        assert validator.rule_count == 1
        assert _codes(validator.validate(Script())) == ["CS900"]

    def test_validation_does_not_modify_script(self, network_script: Script) -> None:
        before = str(network_script)
        validate(network_script)
        assert str(network_script) == before
