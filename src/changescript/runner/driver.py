"""Executor contract between the resolution engine and resource providers.

A ``Driver`` receives one fully resolved command at a time and returns a
``(result, error)`` pair.  Drivers report failure through the error value
rather than by raising, so the engine can record it on the command and
move on to the next statement.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


class UnsupportedActionError(LookupError):
    """Returned by a driver that has no implementation for an action/entity pair."""

    def __init__(self, action: str, entity: str) -> None:
        self.action = action
        self.entity = entity
        super().__init__(f"Unsupported action '{action} {entity}'")


class Driver(ABC):
    """Abstract base class for command executors.

    The contract for :meth:`execute`:

    * Called only with commands whose holes and refs are all resolved.
    * Returns ``(result, None)`` on success, where ``result`` is exposed to
      later statements through declarations.
    * Returns ``(None, error)`` on failure and does not raise.
    """

    @abstractmethod
    def execute(self, action: str, entity: str, params: dict[str, Any]) -> tuple[Any, Exception | None]:
        """Perform ``action`` on ``entity`` with ``params``."""


class DispatchDriver(Driver):
    """Driver dispatching to methods named ``<action>_<entity>``.

    Subclasses implement one method per supported operation taking the
    params dict and returning the result, e.g.::

        class Ec2Driver(DispatchDriver):
            def create_vpc(self, params):
                return self._client.create_vpc(CidrBlock=params["cidr"])["Vpc"]["VpcId"]

    Exceptions raised by the method are returned as the error value.
    """

    def execute(self, action: str, entity: str, params: dict[str, Any]) -> tuple[Any, Exception | None]:
        method = getattr(self, f"{action}_{entity}".lower(), None)
        if method is None or not callable(method):
            return None, UnsupportedActionError(action, entity)
        try:
            return method(params), None
        except Exception as exc:  # noqa: BLE001
            logger.debug("%s %s raised %r", action, entity, exc)
            return None, exc


@dataclass(frozen=True)
class DriverCall:
    """One call recorded by ``DryRunDriver``."""

    action: str
    entity: str
    params: dict[str, Any]


class DryRunDriver(Driver):
    """Driver that performs nothing and fabricates identifiers.

    Every call is recorded in :attr:`calls` and answered with
    ``"<entity>-<n>"``, ``n`` counting calls per entity from 1.
    """

    def __init__(self) -> None:
        self.calls: list[DriverCall] = []
        self._counters: dict[str, int] = {}

    def execute(self, action: str, entity: str, params: dict[str, Any]) -> tuple[Any, Exception | None]:
        self.calls.append(DriverCall(action=action, entity=entity, params=dict(params)))
        count = self._counters.get(entity, 0) + 1
        self._counters[entity] = count
        return f"{entity}-{count}", None
