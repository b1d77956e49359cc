#!/usr/bin/env python3
"""Example: Quickstart — changescript

Minimal working example: parse a template, list its holes, dry-run it
with fills, and print the script that undoes it.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install changescript
"""
from __future__ import annotations

import changescript

TEMPLATE = """
# one network with a web server
myvpc = create vpc cidr={vpc.cidr}
mysubnet = create subnet vpc=$myvpc cidr=10.0.1.0/24
create instance subnet=$mysubnet image={instance.image} name='web server'
"""


def main() -> None:
    print(f"changescript version: {changescript.__version__}")

    template = changescript.parse(TEMPLATE)
    print(f"Needs input: {', '.join(template.get_holes())}")

    print("\nCanonical form:")
    print(changescript.format(template), end="")

    report = changescript.run(
        template,
        fills={"vpc.cidr": "10.0.0.0/16", "instance.image": "ami-12"},
    )
    print(f"\nDry run: {report.summary()}")
    for change in report.changes:
        print(f"  {change}")

    print("\nRevert:")
    print(changescript.revert(report.script))


if __name__ == "__main__":
    main()
