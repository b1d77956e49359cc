#!/usr/bin/env python3
"""Example: Custom driver — changescript

Implements a tiny in-memory provider with ``DispatchDriver`` and runs a
template against it in two passes, supplying the second fill late.

Usage:
    python examples/02_custom_driver.py
"""
from __future__ import annotations

import itertools
from typing import Any

import changescript
from changescript.runner import DispatchDriver, Runner


class InMemoryCloud(DispatchDriver):
    """Keeps created resources in a dict keyed by generated id."""

    def __init__(self) -> None:
        self.resources: dict[str, dict[str, Any]] = {}
        self._ids = itertools.count(100)

    def _create(self, prefix: str, params: dict[str, Any]) -> str:
        resource_id = f"{prefix}-{next(self._ids)}"
        self.resources[resource_id] = dict(params)
        return resource_id

    def create_vpc(self, params: dict[str, Any]) -> str:
        return self._create("vpc", params)

    def create_subnet(self, params: dict[str, Any]) -> str:
        if params["vpc"] not in self.resources:
            raise KeyError(f"no such vpc {params['vpc']}")
        return self._create("subnet", params)

    def delete_subnet(self, params: dict[str, Any]) -> str:
        return str(self.resources.pop(params["id"]))

    def delete_vpc(self, params: dict[str, Any]) -> str:
        return str(self.resources.pop(params["id"]))


TEMPLATE = """
net = create vpc cidr={cidr}
create subnet vpc=$net cidr={subnet.cidr}
"""


def main() -> None:
    cloud = InMemoryCloud()
    runner = Runner(cloud)
    script = changescript.parse(TEMPLATE)

    first = runner.execute(script, {"cidr": "10.0.0.0/16"})
    print(f"Pass 1: {first.summary()}")

    second = runner.execute(script, {"subnet.cidr": "10.0.1.0/24"})
    print(f"Pass 2: {second.summary()}")
    print(script)

    undo = changescript.revert(script)
    Runner(cloud).execute(undo)
    print(f"Resources left after revert: {len(cloud.resources)}")


if __name__ == "__main__":
    main()
