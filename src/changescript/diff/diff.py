"""Statement-level diff between two changescript scripts.

Statements are aligned by their canonical rendering, so the diff is
stable regardless of how operands were ordered in the source.  When a
statement is replaced by one with the same action, entity and declared
identifier, the change is reported as a modification listing the
operands that differ.  The typical use is comparing two fills of the
same template.

Usage
-----
::

    from changescript.diff import diff

    for change in diff(old_script, new_script):
        print(change)
"""
from __future__ import annotations

from dataclasses import dataclass
from difflib import SequenceMatcher
from enum import Enum, auto
from typing import Union

from changescript.ast.nodes import CommandNode, DeclarationNode, Script, Statement, render_value


class ChangeKind(Enum):
    """Enumeration of all change kinds in a script diff."""

    STATEMENT_ADDED = auto()
    STATEMENT_REMOVED = auto()
    STATEMENT_MODIFIED = auto()


# ---------------------------------------------------------------------------
# Change dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParamChange:
    """One operand whose canonical rendering differs."""

    key: str
    old_value: str | None = None
    new_value: str | None = None

    def __str__(self) -> str:
        old = self.old_value if self.old_value is not None else "<none>"
        new = self.new_value if self.new_value is not None else "<none>"
        return f"{self.key}: {old} → {new}"


@dataclass(frozen=True)
class StatementAdded:
    """A statement present only in the new script; ``index`` is its 1-based position there."""

    kind: ChangeKind = ChangeKind.STATEMENT_ADDED
    index: int = 0
    statement: str = ""

    def __str__(self) -> str:
        return f"[+] {self.statement}"


@dataclass(frozen=True)
class StatementRemoved:
    """A statement present only in the old script; ``index`` is its 1-based position there."""

    kind: ChangeKind = ChangeKind.STATEMENT_REMOVED
    index: int = 0
    statement: str = ""

    def __str__(self) -> str:
        return f"[-] {self.statement}"


@dataclass(frozen=True)
class StatementModified:
    """The same operation with different operands; ``index`` is its position in the new script."""

    kind: ChangeKind = ChangeKind.STATEMENT_MODIFIED
    index: int = 0
    operation: str = ""
    params: tuple[ParamChange, ...] = ()

    def __str__(self) -> str:
        details = "; ".join(str(p) for p in self.params)
        return f"[~] {self.operation}: {details}"


ScriptChange = Union[StatementAdded, StatementRemoved, StatementModified]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _operation(stat: Statement) -> tuple[str, str, str] | None:
    """Return ``(ident, action, entity)`` for a command statement, else None."""
    cmd = stat.command
    if cmd is None:
        return None
    ident = stat.node.ident if isinstance(stat.node, DeclarationNode) else ""
    return ident, cmd.action, cmd.entity


def _operands(cmd: CommandNode) -> dict[str, str]:
    """Canonical rendering of each operand, keyed by operand name."""
    rendered = {key: f"${ident}" for key, ident in cmd.refs.items()}
    rendered.update({key: render_value(val) for key, val in cmd.params.items()})
    rendered.update({key: f"{{{hole}}}" for key, hole in cmd.holes.items()})
    return rendered


def _param_changes(old: CommandNode, new: CommandNode) -> tuple[ParamChange, ...]:
    old_ops, new_ops = _operands(old), _operands(new)
    changes = []
    for key in sorted(set(old_ops) | set(new_ops)):
        if old_ops.get(key) != new_ops.get(key):
            changes.append(ParamChange(key=key, old_value=old_ops.get(key), new_value=new_ops.get(key)))
    return tuple(changes)


# ---------------------------------------------------------------------------
# Diff engine
# ---------------------------------------------------------------------------


class ScriptDiff:
    """Computes the ordered list of changes from one script to another."""

    def diff(self, old: Script, new: Script) -> list[ScriptChange]:
        old_lines = [str(stat) for stat in old.statements]
        new_lines = [str(stat) for stat in new.statements]
        matcher = SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)

        changes: list[ScriptChange] = []
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                continue
            if tag == "replace":
                changes.extend(self._diff_replaced(old, new, i1, i2, j1, j2))
                continue
            for i in range(i1, i2):
                changes.append(StatementRemoved(index=i + 1, statement=old_lines[i]))
            for j in range(j1, j2):
                changes.append(StatementAdded(index=j + 1, statement=new_lines[j]))
        return changes

    def _diff_replaced(
        self, old: Script, new: Script, i1: int, i2: int, j1: int, j2: int
    ) -> list[ScriptChange]:
        changes: list[ScriptChange] = []
        pairs = min(i2 - i1, j2 - j1)
        for offset in range(pairs):
            old_stat = old.statements[i1 + offset]
            new_stat = new.statements[j1 + offset]
            op = _operation(new_stat)
            if op is not None and op == _operation(old_stat):
                ident, action, entity = op
                label = f"{ident} = {action} {entity}" if ident else f"{action} {entity}"
                changes.append(StatementModified(
                    index=j1 + offset + 1,
                    operation=label,
                    params=_param_changes(old_stat.command, new_stat.command),
                ))
            else:
                changes.append(StatementRemoved(index=i1 + offset + 1, statement=str(old_stat)))
                changes.append(StatementAdded(index=j1 + offset + 1, statement=str(new_stat)))
        for i in range(i1 + pairs, i2):
            changes.append(StatementRemoved(index=i + 1, statement=str(old.statements[i])))
        for j in range(j1 + pairs, j2):
            changes.append(StatementAdded(index=j + 1, statement=str(new.statements[j])))
        return changes


# ---------------------------------------------------------------------------
# Module-level convenience function
# ---------------------------------------------------------------------------


def diff(old: Script, new: Script) -> list[ScriptChange]:
    """Compare two scripts and return the list of changes from ``old`` to ``new``.

    Example
    -------
    ::

        from changescript.diff import diff
        changes = diff(parse("create vpc cidr={cidr}"), parse("create vpc cidr=10.0.0.0/16"))
        # [StatementModified(operation='create vpc', params=(cidr: {cidr} → 10.0.0.0/16,))]
    """
    return ScriptDiff().diff(old, new)
