"""Collect hole fill values from command-line pairs and YAML files.

Values given as ``name=value`` are converted the way unquoted words are
in script source: integers become ``int``, ``true``/``false`` become
``bool`` and comma lists become ``list[str]``.  YAML files supply a flat
mapping of hole name to value and keep YAML's own typing.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from changescript.parser.parser import convert_word


class FillError(ValueError):
    """Raised when fill values cannot be read."""


def parse_fill_value(text: str) -> Any:
    if "," in text:
        return text.split(",")
    return convert_word(text)


def parse_fill_args(pairs: list[str] | tuple[str, ...]) -> dict[str, Any]:
    """Parse ``["name=value", ...]`` into a fill mapping.

    Raises
    ------
    FillError
        If a pair has no ``=`` or an empty name.
    """
    fills: dict[str, Any] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        name = name.strip()
        if not sep or not name:
            raise FillError(f"Invalid fill {pair!r}: expected name=value")
        fills[name] = parse_fill_value(value)
    return fills


def load_fills(path: str | Path) -> dict[str, Any]:
    """Load a YAML mapping of hole name to value.

    An empty file yields an empty mapping.

    Raises
    ------
    FillError
        If the file cannot be read, is not valid YAML, or is not a mapping.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise FillError(f"Cannot read fills file {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise FillError(f"Invalid YAML in fills file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FillError(f"Fills file {path} must contain a mapping, got {type(data).__name__}")
    return {str(key): value for key, value in data.items()}


def merge_fills(*sources: dict[str, Any]) -> dict[str, Any]:
    """Merge fill mappings; later sources override earlier ones."""
    merged: dict[str, Any] = {}
    for source in sources:
        merged.update(source)
    return merged
