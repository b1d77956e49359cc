"""Structured serialization of changescript template trees.

Converts a ``Script`` to and from a plain dict/list structure that maps
naturally to JSON and YAML.  Only the template structure is serialized:
executor ``result`` and ``error`` values are runtime state and are not
part of the dump.

Usage
-----
::

    from changescript.ast.serializer import AstSerializer

    serializer = AstSerializer()
    data = serializer.to_dict(script)
    json_text = serializer.to_json(script)
    script2 = serializer.from_json(json_text)
    assert str(script) == str(script2)
"""
from __future__ import annotations

import json

import yaml

from changescript.ast.nodes import (
    CommandNode,
    DeclarationNode,
    ExpressionNode,
    Node,
    Script,
    Statement,
    ValueNode,
)


class AstSerializer:
    """Converts between ``Script`` objects and plain Python dicts.

    Every node dict carries a ``"kind"`` discriminator so that
    deserialization is unambiguous.
    """

    # ------------------------------------------------------------------
    # Serialization (AST → dict)
    # ------------------------------------------------------------------

    def to_dict(self, script: Script) -> dict[str, object]:
        """Serialize a ``Script`` to a JSON-compatible dict."""
        return {
            "kind": "Script",
            "statements": [self._node_to_dict(stat.node) for stat in script.statements],
        }

    def _node_to_dict(self, node: Node) -> dict[str, object]:
        if isinstance(node, DeclarationNode):
            return {
                "kind": "Declaration",
                "ident": node.ident,
                "expr": self._node_to_dict(node.expr),
            }
        if isinstance(node, CommandNode):
            return {
                "kind": "Command",
                "action": node.action,
                "entity": node.entity,
                "params": {k: self._value_to_data(v) for k, v in node.params.items()},
                "holes": dict(node.holes),
                "refs": dict(node.refs),
            }
        if isinstance(node, ValueNode):
            return {"kind": "Value", "value": self._value_to_data(node.value), "hole": node.hole}
        raise TypeError(f"Unknown node type: {type(node)}")

    def _value_to_data(self, value: object) -> object:
        if isinstance(value, tuple):
            return list(value)
        return value

    # ------------------------------------------------------------------
    # Deserialization (dict → AST)
    # ------------------------------------------------------------------

    def from_dict(self, data: dict[str, object]) -> Script:
        """Deserialize a ``Script`` from a plain dict."""
        if data.get("kind", "Script") != "Script":
            raise ValueError(f"Expected a Script, got kind {data.get('kind')!r}")
        return Script(
            statements=[Statement(node=self._node_from_dict(d)) for d in data.get("statements", [])]
        )

    def _node_from_dict(self, d: dict[str, object]) -> Node:
        kind = d["kind"]
        if kind == "Declaration":
            expr = self._node_from_dict(d["expr"])
            if isinstance(expr, DeclarationNode):
                raise ValueError(f"Declaration {d['ident']!r} cannot wrap another declaration")
            return DeclarationNode(ident=d["ident"], expr=expr)
        if kind == "Command":
            return CommandNode(
                action=d["action"],
                entity=d["entity"],
                params=dict(d.get("params") or {}),
                holes=dict(d.get("holes") or {}),
                refs=dict(d.get("refs") or {}),
            )
        if kind == "Value":
            return ValueNode(value=d.get("value"), hole=d.get("hole") or "")
        raise ValueError(f"Unknown node kind: {kind!r}")

    def expression_from_dict(self, d: dict[str, object]) -> ExpressionNode:
        """Deserialize a single command or value node."""
        node = self._node_from_dict(d)
        if isinstance(node, DeclarationNode):
            raise ValueError("Expected a command or value node, got a declaration")
        return node

    # ------------------------------------------------------------------
    # JSON helpers
    # ------------------------------------------------------------------

    def to_json(self, script: Script, indent: int = 2) -> str:
        """Serialize a ``Script`` to a JSON string."""
        return json.dumps(self.to_dict(script), indent=indent, ensure_ascii=False)

    def from_json(self, text: str) -> Script:
        """Deserialize a ``Script`` from a JSON string."""
        data: dict[str, object] = json.loads(text)
        return self.from_dict(data)

    # ------------------------------------------------------------------
    # YAML helpers
    # ------------------------------------------------------------------

    def to_yaml(self, script: Script) -> str:
        """Serialize a ``Script`` to a YAML string."""
        return yaml.dump(self.to_dict(script), default_flow_style=False, allow_unicode=True)

    def from_yaml(self, text: str) -> Script:
        """Deserialize a ``Script`` from a YAML string."""
        data: dict[str, object] = yaml.safe_load(text)
        return self.from_dict(data)
