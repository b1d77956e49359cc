"""changescript AST module.

Exports the template node types, the canonical value rendering helpers,
and the serializer for converting scripts to and from JSON/YAML.
"""
from __future__ import annotations

from changescript.ast.nodes import (
    CommandNode,
    DeclarationNode,
    ExpressionNode,
    Node,
    Script,
    Statement,
    ValueNode,
    is_simple_string,
    quote,
    render_value,
)
from changescript.ast.serializer import AstSerializer

__all__ = [
    # Node types
    "Node",
    "ExpressionNode",
    "ValueNode",
    "CommandNode",
    "DeclarationNode",
    "Statement",
    "Script",
    # Rendering
    "is_simple_string",
    "quote",
    "render_value",
    # Serializer
    "AstSerializer",
]
