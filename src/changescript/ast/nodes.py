"""Template tree for changescript scripts.

A ``Script`` is an ordered list of ``Statement`` objects, each wrapping
exactly one node variant:

``ValueNode``
    A literal operand or a named hole awaiting a value.
``CommandNode``
    An ``<action> <entity>`` operation whose operands are partitioned
    into resolved ``params``, pending ``holes`` and pending ``refs``.
``DeclarationNode``
    Binds an identifier to the result of a command or value so later
    statements can reference it as ``$identifier``.

Unlike most tree types in this package the nodes are mutable: hole and
reference resolution move operands from ``holes``/``refs`` into
``params`` in place, and the executor records ``result``/``error`` on
commands.  Use ``Script.clone()`` to obtain an independent copy before
resolving a shared template.

``str()`` on any node gives its canonical rendering.  Command operands
are sorted, so the output is stable across runs and suitable for audit
logs and diffs.
"""
from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Final, Union

_SIMPLE_STRING: Final[re.Pattern[str]] = re.compile(r"[a-zA-Z0-9\-._:/+;~@<>]+")


# ---------------------------------------------------------------------------
# Value rendering
# ---------------------------------------------------------------------------


def is_simple_string(value: str) -> bool:
    """Return True if ``value`` can be written without quotes."""
    return _SIMPLE_STRING.fullmatch(value) is not None


def quote(value: str) -> str:
    """Quote ``value`` for script source if it is not a simple token.

    Single quotes are used unless the string contains one, in which case
    double quotes are used.  Strings containing a backslash, a newline or
    both quote characters are single-quoted with ``\\``, ``'`` and
    newline backslash-escaped (newline as ``\\n``), which the lexer reads
    back unchanged.
    """
    if is_simple_string(value):
        return value
    if "\\" in value or "\n" in value or ("'" in value and '"' in value):
        escaped = value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
        return f"'{escaped}'"
    if "'" in value:
        return f'"{value}"'
    return f"'{value}'"


def render_value(value: Any) -> str:
    """Render an operand value in canonical script form.

    ``None`` renders empty, a sequence of strings is comma-joined, a
    string is quoted when needed and booleans render as ``true``/``false``.
    Anything else falls back to ``str()``.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return quote(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return ",".join(value)
    return str(value)


# ---------------------------------------------------------------------------
# Node variants
# ---------------------------------------------------------------------------


@dataclass
class ValueNode:
    """A single operand: either a resolved ``value`` or a named ``hole``.

    Parameters
    ----------
    value:
        The literal value.  Only meaningful once ``hole`` is empty.
    hole:
        Name of the pending hole, or ``""`` when resolved.
    """

    value: Any = None
    hole: str = ""

    def __str__(self) -> str:
        if self.hole:
            return f"{{{self.hole}}}"
        return render_value(self.value)

    @property
    def result(self) -> Any:
        return self.value

    @property
    def error(self) -> Exception | None:
        return None

    def is_resolved(self) -> bool:
        return self.hole == ""

    def process_holes(self, fills: dict[str, Any]) -> dict[str, Any]:
        """Bind the hole from ``fills`` if present.

        Returns ``{hole: value}`` for the binding just made, or an empty
        dict when the node was already resolved or the fill is missing.
        """
        processed: dict[str, Any] = {}
        if self.is_resolved():
            return processed
        if self.hole in fills:
            value = fills[self.hole]
            self.value = value
            processed[self.hole] = value
            self.hole = ""
        return processed

    def get_holes(self) -> list[str]:
        return [self.hole] if self.hole else []

    def clone(self) -> ValueNode:
        return ValueNode(value=self.value, hole=self.hole)


@dataclass
class CommandNode:
    """An ``<action> <entity>`` operation with partially known operands.

    The key sets of ``params``, ``holes`` and ``refs`` are disjoint: an
    operand is either resolved, waiting for a hole fill, or waiting for
    the result of an earlier declaration.  ``action`` and ``entity``
    cannot be reassigned after construction.

    Parameters
    ----------
    action:
        The verb, e.g. ``create``.
    entity:
        The resource kind, e.g. ``vpc``.
    params:
        Resolved operand values.
    holes:
        Operand name to hole name.  One hole may back several operands.
    refs:
        Operand name to the identifier of an earlier declaration.
    result:
        Value returned by the executor, set after execution.
    error:
        Error returned by the executor, set after execution.
    executed:
        True once the executor has been called, whatever it returned.
    """

    action: str
    entity: str
    params: dict[str, Any] = field(default_factory=dict)
    holes: dict[str, str] = field(default_factory=dict)
    refs: dict[str, str] = field(default_factory=dict)
    result: Any = None
    error: Exception | None = None
    executed: bool = False

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("action", "entity") and name in self.__dict__:
            raise AttributeError(f"CommandNode.{name} cannot be reassigned")
        super().__setattr__(name, value)

    def __str__(self) -> str:
        tokens = [f"{key}=${ident}" for key, ident in self.refs.items()]
        tokens.extend(f"{key}={render_value(val)}" for key, val in self.params.items())
        tokens.extend(f"{key}={{{hole}}}" for key, hole in self.holes.items())
        tokens.sort()

        head = f"{self.action} {self.entity}"
        if tokens:
            return f"{head} {' '.join(tokens)}"
        return head

    def keys(self) -> set[str]:
        """Return every operand name across params, holes and refs."""
        return set(self.params) | set(self.holes) | set(self.refs)

    def is_resolved(self) -> bool:
        """Return True if the command has no pending holes or refs."""
        return not self.holes and not self.refs

    def process_holes(self, fills: dict[str, Any]) -> dict[str, Any]:
        """Move every operand whose hole is in ``fills`` into ``params``.

        Returns the bindings just made, keyed ``"<entity>.<operand>"``.
        Operands whose hole is missing from ``fills`` stay pending.
        """
        processed: dict[str, Any] = {}
        for key, hole in list(self.holes.items()):
            if hole in fills:
                value = fills[hole]
                self.params[key] = value
                processed[f"{self.entity}.{key}"] = value
                del self.holes[key]
        return processed

    def process_refs(self, fills: dict[str, Any]) -> None:
        """Move every operand whose referenced identifier is in ``fills`` into ``params``."""
        for key, ident in list(self.refs.items()):
            if ident in fills:
                self.params[key] = fills[ident]
                del self.refs[key]

    def get_holes(self) -> list[str]:
        return sorted(set(self.holes.values()))

    def get_refs(self) -> list[str]:
        return sorted(set(self.refs.values()))

    def clone(self) -> CommandNode:
        """Return a fresh, not-yet-executed copy; ``result``, ``error`` and ``executed`` are not carried over."""
        return CommandNode(
            action=self.action,
            entity=self.entity,
            params=dict(self.params),
            holes=dict(self.holes),
            refs=dict(self.refs),
        )


ExpressionNode = Union[CommandNode, ValueNode]


@dataclass
class DeclarationNode:
    """Binds ``ident`` to the result of ``expr`` for later ``$ident`` references."""

    ident: str
    expr: ExpressionNode

    def __str__(self) -> str:
        return f"{self.ident} = {self.expr}"

    @property
    def result(self) -> Any:
        return self.expr.result

    @property
    def error(self) -> Exception | None:
        return self.expr.error

    def process_holes(self, fills: dict[str, Any]) -> dict[str, Any]:
        return self.expr.process_holes(fills)

    def process_refs(self, fills: dict[str, Any]) -> None:
        if isinstance(self.expr, CommandNode):
            self.expr.process_refs(fills)

    def get_holes(self) -> list[str]:
        return self.expr.get_holes()

    def clone(self) -> DeclarationNode:
        return DeclarationNode(ident=self.ident, expr=_clone_expression(self.expr))


Node = Union[DeclarationNode, CommandNode, ValueNode]


def _clone_expression(expr: ExpressionNode) -> ExpressionNode:
    if isinstance(expr, (CommandNode, ValueNode)):
        return expr.clone()
    raise TypeError(f"Unknown expression node type: {type(expr)}")


def _clone_node(node: Node) -> Node:
    if isinstance(node, DeclarationNode):
        return node.clone()
    if isinstance(node, (CommandNode, ValueNode)):
        return node.clone()
    raise TypeError(f"Unknown node type: {type(node)}")


# ---------------------------------------------------------------------------
# Statement and script
# ---------------------------------------------------------------------------


@dataclass
class Statement:
    """A single slot in a script holding exactly one node."""

    node: Node

    def __str__(self) -> str:
        return str(self.node)

    @property
    def command(self) -> CommandNode | None:
        """The command carried by this statement, directly or via a declaration."""
        if isinstance(self.node, CommandNode):
            return self.node
        if isinstance(self.node, DeclarationNode) and isinstance(self.node.expr, CommandNode):
            return self.node.expr
        return None

    def process_holes(self, fills: dict[str, Any]) -> dict[str, Any]:
        return self.node.process_holes(fills)

    def get_holes(self) -> list[str]:
        return self.node.get_holes()

    def clone(self) -> Statement:
        return Statement(node=_clone_node(self.node))


@dataclass
class Script:
    """An ordered sequence of statements; order is execution order."""

    statements: list[Statement] = field(default_factory=list)

    def __str__(self) -> str:
        return "\n".join(str(stat) for stat in self.statements)

    def __iter__(self) -> Iterator[Statement]:
        return iter(self.statements)

    def __len__(self) -> int:
        return len(self.statements)

    def clone(self) -> Script:
        return Script(statements=[stat.clone() for stat in self.statements])

    def commands(self) -> list[CommandNode]:
        """All command nodes in script order, including declared ones."""
        return [stat.command for stat in self.statements if stat.command is not None]

    def declarations(self) -> list[DeclarationNode]:
        return [stat.node for stat in self.statements if isinstance(stat.node, DeclarationNode)]

    def get_holes(self) -> list[str]:
        """Distinct pending hole names in first-seen order."""
        seen: dict[str, None] = {}
        for stat in self.statements:
            for hole in stat.get_holes():
                seen.setdefault(hole, None)
        return list(seen)

    def process_holes(self, fills: dict[str, Any]) -> dict[str, Any]:
        """Apply ``fills`` to every statement and merge what was bound."""
        processed: dict[str, Any] = {}
        for stat in self.statements:
            processed.update(stat.process_holes(fills))
        return processed

    def is_resolved(self) -> bool:
        if self.get_holes():
            return False
        return all(cmd.is_resolved() for cmd in self.commands())
