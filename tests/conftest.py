"""Shared test fixtures for changescript.

Fixtures defined here are available to all tests in the suite without
needing an explicit import.
"""
from __future__ import annotations

import pytest

from changescript.ast.nodes import CommandNode, DeclarationNode, Script, Statement, ValueNode

NETWORK_SOURCE = """\
# network with one instance
myvpc = create vpc cidr={vpc.cidr}
mysubnet = create subnet vpc=$myvpc cidr=10.0.1.0/24
create instance subnet=$mysubnet image={instance.image} count=1 name='web server'
"""


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string."""
    return "0.1.0"


@pytest.fixture()
def network_source() -> str:
    return NETWORK_SOURCE


@pytest.fixture()
def network_script() -> Script:
    """The tree ``NETWORK_SOURCE`` parses to, built by hand."""
    return Script(statements=[
        Statement(node=DeclarationNode(
            ident="myvpc",
            expr=CommandNode(action="create", entity="vpc", holes={"cidr": "vpc.cidr"}),
        )),
        Statement(node=DeclarationNode(
            ident="mysubnet",
            expr=CommandNode(
                action="create",
                entity="subnet",
                params={"cidr": "10.0.1.0/24"},
                refs={"vpc": "myvpc"},
            ),
        )),
        Statement(node=CommandNode(
            action="create",
            entity="instance",
            params={"count": 1, "name": "web server"},
            holes={"image": "instance.image"},
            refs={"subnet": "mysubnet"},
        )),
    ])


@pytest.fixture()
def network_fills() -> dict[str, str]:
    return {"vpc.cidr": "10.0.0.0/16", "instance.image": "ami-12"}


@pytest.fixture()
def region_value() -> ValueNode:
    return ValueNode(hole="region")
