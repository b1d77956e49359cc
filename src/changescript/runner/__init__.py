"""changescript runner module.

Exports the resolution engine, the driver contract, and revert support.
"""
from __future__ import annotations

from changescript.runner.driver import (
    DispatchDriver,
    Driver,
    DriverCall,
    DryRunDriver,
    UnsupportedActionError,
)
from changescript.runner.engine import Change, RunReport, Runner
from changescript.runner.revert import INVERSE_ACTIONS, is_revertible, revert

__all__ = [
    "Driver",
    "DispatchDriver",
    "DryRunDriver",
    "DriverCall",
    "UnsupportedActionError",
    "Runner",
    "RunReport",
    "Change",
    "revert",
    "is_revertible",
    "INVERSE_ACTIONS",
]
