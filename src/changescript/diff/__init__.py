"""changescript Diff module.

Exports the ``ScriptDiff`` class and the ``diff`` convenience function,
plus all ``ScriptChange`` union member types.
"""
from __future__ import annotations

from changescript.diff.diff import (
    ChangeKind,
    ParamChange,
    ScriptChange,
    ScriptDiff,
    StatementAdded,
    StatementModified,
    StatementRemoved,
    diff,
)

__all__ = [
    "ScriptDiff",
    "diff",
    "ScriptChange",
    "ChangeKind",
    "ParamChange",
    "StatementAdded",
    "StatementRemoved",
    "StatementModified",
]
