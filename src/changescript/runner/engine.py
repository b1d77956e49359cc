"""Resolution engine: fills holes, threads results through references, executes.

Statements are processed strictly in script order.  For each one the
engine applies the hole fills, resolves references against the results
of declarations seen so far, and hands fully resolved commands to the
driver.  A declaration exposes its result under its identifier only after
its expression produced a result without error, so a failed or pending
command leaves every statement that references it pending as well.

The engine never looks ahead, never raises on a missing fill and never
aborts the script because one statement failed.

Usage
-----
::

    from changescript.runner import DryRunDriver, Runner

    report = Runner(DryRunDriver()).run(template, fills={"vpc.cidr": "10.0.0.0/16"})
    for change in report.changes:
        print(change)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from changescript.ast.nodes import CommandNode, DeclarationNode, Script, ValueNode
from changescript.runner.driver import Driver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Change:
    """A successfully executed command: the unit recorded by revision tracking."""

    action: str
    entity: str
    params: dict[str, Any]
    result: Any

    def __str__(self) -> str:
        return f"{self.action} {self.entity} -> {self.result}"


@dataclass
class RunReport:
    """Outcome of one resolution and execution pass over a script.

    Parameters
    ----------
    script:
        The script that was executed, carrying results and errors.
    changes:
        Commands executed successfully during this pass, in order.
    pending:
        Commands not executed because holes or references stayed pending.
    failed:
        Commands whose driver returned an error during this pass.
    filled:
        Every hole binding made during this pass, as returned by
        ``process_holes``.
    """

    script: Script
    changes: list[Change] = field(default_factory=list)
    pending: list[CommandNode] = field(default_factory=list)
    failed: list[CommandNode] = field(default_factory=list)
    filled: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when every command was executed without error."""
        return not self.pending and not self.failed

    def summary(self) -> str:
        return (
            f"{len(self.changes)} executed, {len(self.failed)} failed, "
            f"{len(self.pending)} pending"
        )


class Runner:
    """Resolves and executes scripts against a ``Driver``.

    Parameters
    ----------
    driver:
        The executor invoked once per fully resolved command.
    """

    def __init__(self, driver: Driver) -> None:
        self._driver = driver

    def run(self, template: Script, fills: dict[str, Any] | None = None) -> RunReport:
        """Execute a clone of ``template``; the template itself is not modified."""
        return self.execute(template.clone(), fills)

    def execute(self, script: Script, fills: dict[str, Any] | None = None) -> RunReport:
        """Resolve and execute ``script`` in place.

        Commands already executed in an earlier pass are not executed
        again, even when the driver returned neither result nor error.
        Their results are still exposed to later references, so calling
        this repeatedly with growing fills makes progress without
        repeating work.
        """
        fills = fills or {}
        report = RunReport(script=script)
        declared: dict[str, Any] = {}

        for index, stat in enumerate(script.statements, start=1):
            report.filled.update(stat.process_holes(fills))
            cmd = stat.command

            if cmd is not None:
                cmd.process_refs(declared)
                if cmd.executed:
                    logger.debug("Statement %d already executed: %s", index, cmd)
                elif cmd.is_resolved():
                    self._execute_command(cmd, report)
                else:
                    logger.warning(
                        "Statement %d not executed, pending holes %s and refs %s: %s",
                        index,
                        cmd.get_holes(),
                        cmd.get_refs(),
                        cmd,
                    )
                    report.pending.append(cmd)

            node = stat.node
            if isinstance(node, DeclarationNode):
                if isinstance(node.expr, ValueNode):
                    if node.expr.is_resolved():
                        declared[node.ident] = node.expr.value
                elif node.error is None and node.result is not None:
                    declared[node.ident] = node.result

        return report

    def _execute_command(self, cmd: CommandNode, report: RunReport) -> None:
        logger.debug("Executing %s", cmd)
        result, error = self._driver.execute(cmd.action, cmd.entity, dict(cmd.params))
        cmd.result = result
        cmd.error = error
        cmd.executed = True
        if error is not None:
            logger.warning("'%s %s' failed: %s", cmd.action, cmd.entity, error)
            report.failed.append(cmd)
            return
        report.changes.append(
            Change(action=cmd.action, entity=cmd.entity, params=dict(cmd.params), result=result)
        )
