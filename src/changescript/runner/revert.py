"""Build the script that undoes an executed script.

Only commands that executed successfully are reverted, last first.
``create`` is undone by deleting the created resource by its result id;
``start``/``stop`` and ``attach``/``detach`` invert each other with the
same operands.  Other actions have no inverse and are skipped.
"""
from __future__ import annotations

import logging
from typing import Final

from changescript.ast.nodes import CommandNode, Script, Statement

logger = logging.getLogger(__name__)

INVERSE_ACTIONS: Final[dict[str, str]] = {
    "create": "delete",
    "start": "stop",
    "stop": "start",
    "attach": "detach",
    "detach": "attach",
}


def _succeeded(cmd: CommandNode) -> bool:
    return cmd.executed and cmd.error is None


def _invertible(cmd: CommandNode) -> bool:
    """A ``create`` is only undone by id, so it needs a result."""
    if cmd.action == "create":
        return cmd.result is not None
    return cmd.action in INVERSE_ACTIONS


def revert(script: Script) -> Script:
    """Return a new script undoing the successful commands of ``script``."""
    statements: list[Statement] = []
    for cmd in reversed(script.commands()):
        if not _succeeded(cmd):
            logger.info("Not reverting '%s %s': it did not execute successfully", cmd.action, cmd.entity)
            continue
        if not _invertible(cmd):
            logger.info("Not reverting '%s %s': no inverse action", cmd.action, cmd.entity)
            continue
        inverse = INVERSE_ACTIONS[cmd.action]
        if cmd.action == "create":
            params = {"id": cmd.result}
        else:
            params = dict(cmd.params)
        statements.append(Statement(node=CommandNode(action=inverse, entity=cmd.entity, params=params)))
    return Script(statements=statements)


def is_revertible(script: Script) -> bool:
    """True if some command succeeded and every successful command has an inverse."""
    executed = [cmd for cmd in script.commands() if _succeeded(cmd)]
    return bool(executed) and all(_invertible(cmd) for cmd in executed)
