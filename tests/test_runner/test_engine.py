"""Resolution engine tests: hole fills, reference threading and execution order.

These tests drive ``Runner`` with the recording ``DryRunDriver`` and with
small ``DispatchDriver`` subclasses that fail on purpose, then inspect the
executed script, the driver calls and the ``RunReport``.
"""
from __future__ import annotations

from typing import Any

import pytest

from changescript.ast.nodes import CommandNode, DeclarationNode, Script, Statement, ValueNode
from changescript.parser.parser import parse
from changescript.runner.driver import DispatchDriver, Driver, DryRunDriver
from changescript.runner.engine import Change, RunReport, Runner


class _FailingVpcDriver(DispatchDriver):
    def create_vpc(self, params: dict[str, Any]) -> str:
        raise RuntimeError("quota exceeded")

    def create_subnet(self, params: dict[str, Any]) -> str:
        return "subnet-1"

    def create_instance(self, params: dict[str, Any]) -> str:
        return "i-1"


class _NullResultDriver(DispatchDriver):
    def create_vpc(self, params: dict[str, Any]) -> None:
        return None

    def create_subnet(self, params: dict[str, Any]) -> str:
        return "subnet-1"


class _SilentDriver(Driver):
    """Succeeds with neither result nor error, recording every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def execute(self, action: str, entity: str, params: dict[str, Any]) -> tuple[Any, Exception | None]:
        self.calls.append((action, entity))
        return None, None


# ---------------------------------------------------------------------------
# Full runs
# ---------------------------------------------------------------------------


class TestFullRun:
    def test_all_statements_execute_in_order(
        self, network_script: Script, network_fills: dict
    ) -> None:
        driver = DryRunDriver()
        report = Runner(driver).run(network_script, network_fills)
        assert [c.entity for c in driver.calls] == ["vpc", "subnet", "instance"]
        assert report.ok
        assert report.summary() == "3 executed, 0 failed, 0 pending"

    def test_results_thread_through_references(
        self, network_script: Script, network_fills: dict
    ) -> None:
        driver = DryRunDriver()
        Runner(driver).run(network_script, network_fills)
        assert driver.calls[1].params == {"cidr": "10.0.1.0/24", "vpc": "vpc-1"}
        assert driver.calls[2].params == {
            "count": 1, "name": "web server", "image": "ami-12", "subnet": "subnet-1",
        }

    def test_template_left_untouched(self, network_script: Script, network_fills: dict) -> None:
        before = str(network_script)
        report = Runner(DryRunDriver()).run(network_script, network_fills)
        assert str(network_script) == before
        assert report.script is not network_script
        assert all(cmd.result is None for cmd in network_script.commands())

    def test_executed_script_renders_resolved(
        self, network_script: Script, network_fills: dict
    ) -> None:
        report = Runner(DryRunDriver()).run(network_script, network_fills)
        assert str(report.script).splitlines()[1] == "mysubnet = create subnet cidr=10.0.1.0/24 vpc=vpc-1"
        assert report.script.is_resolved()

    def test_filled_records_namespaced_bindings(
        self, network_script: Script, network_fills: dict
    ) -> None:
        report = Runner(DryRunDriver()).run(network_script, network_fills)
        assert report.filled == {"vpc.cidr": "10.0.0.0/16", "instance.image": "ami-12"}

    def test_changes(self, network_script: Script, network_fills: dict) -> None:
        report = Runner(DryRunDriver()).run(network_script, network_fills)
        assert report.changes[0] == Change(
            action="create", entity="vpc", params={"cidr": "10.0.0.0/16"}, result="vpc-1"
        )
        assert str(report.changes[0]) == "create vpc -> vpc-1"


# ---------------------------------------------------------------------------
# Pending statements
# ---------------------------------------------------------------------------


class TestPending:
    def test_no_fills_nothing_executes(self, network_script: Script) -> None:
        driver = DryRunDriver()
        report = Runner(driver).run(network_script)
        assert driver.calls == []
        assert len(report.pending) == 3
        assert not report.ok

    def test_missing_fill_does_not_raise(self, network_script: Script) -> None:
        report = Runner(DryRunDriver()).run(network_script, {"vpc.cidr": "10.0.0.0/16"})
        assert [c.entity for c in report.changes] == ["vpc", "subnet"]
        assert [c.entity for c in report.pending] == ["instance"]
        assert report.summary() == "2 executed, 0 failed, 1 pending"

    def test_pending_is_logged(
        self, network_script: Script, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level("WARNING", logger="changescript.runner.engine"):
            Runner(DryRunDriver()).run(network_script)
        assert "not executed" in caplog.text

    def test_forward_reference_stays_pending(self) -> None:
        script = parse("create subnet vpc=$myvpc\nmyvpc = create vpc\n")
        driver = DryRunDriver()
        report = Runner(driver).run(script)
        assert [c.entity for c in driver.calls] == ["vpc"]
        assert report.pending[0].refs == {"vpc": "myvpc"}

    def test_undefined_reference_stays_pending(self) -> None:
        report = Runner(DryRunDriver()).run(parse("create subnet vpc=$ghost"))
        assert len(report.pending) == 1

    def test_redeclaration_shadows_for_later_statements(self) -> None:
        script = parse(
            "v = create vpc\n"
            "create subnet vpc=$v\n"
            "v = create vpc\n"
            "create instance vpc=$v\n"
        )
        driver = DryRunDriver()
        Runner(driver).run(script)
        assert driver.calls[1].params == {"vpc": "vpc-1"}
        assert driver.calls[3].params == {"vpc": "vpc-2"}


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_failed_declaration_blocks_dependents(
        self, network_script: Script, network_fills: dict
    ) -> None:
        report = Runner(_FailingVpcDriver()).run(network_script, network_fills)
        assert [c.entity for c in report.failed] == ["vpc"]
        assert [c.entity for c in report.pending] == ["subnet", "instance"]
        vpc = report.script.commands()[0]
        assert isinstance(vpc.error, RuntimeError)
        assert vpc.result is None

    def test_failure_does_not_abort_independent_statements(self) -> None:
        script = parse("create vpc\ncreate subnet\n")
        report = Runner(_FailingVpcDriver()).run(script)
        assert [c.entity for c in report.changes] == ["subnet"]
        assert report.summary() == "1 executed, 1 failed, 0 pending"

    def test_none_result_not_exposed(self) -> None:
        script = parse("v = create vpc\ncreate subnet vpc=$v\n")
        report = Runner(_NullResultDriver()).run(script)
        assert [c.entity for c in report.changes] == ["vpc"]
        assert [c.entity for c in report.pending] == ["subnet"]

    def test_unsupported_action_is_recorded(self) -> None:
        report = Runner(_FailingVpcDriver()).run(parse("delete bucket name=b"))
        assert len(report.failed) == 1
        assert "Unsupported action" in str(report.failed[0].error)


# ---------------------------------------------------------------------------
# Values and multi-pass resolution
# ---------------------------------------------------------------------------


class TestValuesAndPasses:
    def test_declared_value_feeds_references(self) -> None:
        script = parse("region = {region}\ncreate vpc region=$region\n")
        driver = DryRunDriver()
        Runner(driver).run(script, {"region": "eu-west-1"})
        assert driver.calls[0].params == {"region": "eu-west-1"}

    def test_literal_value_declaration(self) -> None:
        script = Script(statements=[
            Statement(node=DeclarationNode(ident="n", expr=ValueNode(value="web"))),
            Statement(node=CommandNode(action="create", entity="tag", refs={"name": "n"})),
        ])
        driver = DryRunDriver()
        Runner(driver).run(script)
        assert driver.calls[0].params == {"name": "web"}

    def test_second_pass_completes_without_repeating(self, network_script: Script) -> None:
        driver = DryRunDriver()
        runner = Runner(driver)
        script = network_script.clone()

        first = runner.execute(script, {"vpc.cidr": "10.0.0.0/16"})
        assert len(first.changes) == 2
        assert len(first.pending) == 1

        second = runner.execute(script, {"instance.image": "ami-12"})
        assert [c.entity for c in second.changes] == ["instance"]
        assert second.ok
        assert len(driver.calls) == 3
        assert driver.calls[2].params["subnet"] == "subnet-1"

    def test_command_without_result_runs_once_across_passes(self) -> None:
        driver = _SilentDriver()
        runner = Runner(driver)
        script = parse("delete instance id=i-1\ncreate subnet cidr={c}\n")

        first = runner.execute(script)
        assert [c.entity for c in first.changes] == ["instance"]
        assert script.commands()[0].executed

        second = runner.execute(script, {"c": "10.0.0.0/24"})
        assert [c.entity for c in second.changes] == ["subnet"]
        assert driver.calls == [("delete", "instance"), ("create", "subnet")]

    def test_clone_resets_executed(self, network_script: Script, network_fills: dict) -> None:
        report = Runner(DryRunDriver()).run(network_script, network_fills)
        assert all(cmd.executed for cmd in report.script.commands())
        assert not any(cmd.executed for cmd in report.script.clone().commands())
        assert not any(cmd.executed for cmd in network_script.commands())

    def test_execute_returns_report_for_same_script(self, network_script: Script) -> None:
        report = Runner(DryRunDriver()).execute(network_script)
        assert isinstance(report, RunReport)
        assert report.script is network_script
