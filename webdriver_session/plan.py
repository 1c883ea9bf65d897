"""
Immutable session plans.

A ``Plan`` is what ``SessionBuilder.get_plan`` produces: the chosen execution
target plus the capabilities and metadata that make up the new session
request. It never changes after it is built and holds no reference back to
the builder.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any, Optional, TextIO

from webdriver_session.capabilities import Capabilities
from webdriver_session.errors import SerializationError
from webdriver_session.service import DriverService
from webdriver_session.target import ExecutionTarget, LocalService, RemoteEndpoint


def _freeze(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(copy.deepcopy(dict(mapping)))


class Plan:
    """The resolved inputs of a new session request.

    The payload keeps ``alwaysMatch`` and ``firstMatch`` separate, the
    receiving endpoint performs the authoritative merge. ``list_capabilities``
    shows what that merge produces for each alternative.
    """

    __slots__ = ("_target", "_always_match", "_first_match", "_metadata")

    def __init__(
        self,
        target: Optional[ExecutionTarget],
        always_match: Mapping[str, Any],
        first_match: Sequence[Mapping[str, Any]],
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._target = target
        self._always_match = _freeze(always_match)
        self._first_match = tuple(_freeze(entry) for entry in first_match)
        self._metadata = _freeze(metadata or {})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Plan):
            return NotImplemented
        return self._target == other._target and self.to_payload() == other.to_payload()

    def __repr__(self) -> str:
        return (
            f"Plan(target={self._target!r}, alwaysMatch={dict(self._always_match)!r}, "
            f"firstMatch={[dict(e) for e in self._first_match]!r})"
        )

    @property
    def target(self) -> Optional[ExecutionTarget]:
        """The execution target, or None if the caller must pick one."""
        return self._target

    @property
    def is_using_driver_service(self) -> bool:
        return isinstance(self._target, LocalService)

    @property
    def driver_service(self) -> DriverService:
        """The local driver service.

        Raises:
            RuntimeError: If the plan targets a remote endpoint or nothing
        """
        if not isinstance(self._target, LocalService):
            raise RuntimeError("Plan is not using a driver service")
        return self._target.service

    @property
    def remote_host(self) -> str:
        """The remote endpoint URL, exactly as given to the builder.

        Raises:
            RuntimeError: If the plan targets a driver service or nothing
        """
        if not isinstance(self._target, RemoteEndpoint):
            raise RuntimeError("Plan is not using a remote endpoint")
        return self._target.url

    @property
    def always_match(self) -> Mapping[str, Any]:
        return self._always_match

    @property
    def first_match(self) -> tuple[Mapping[str, Any], ...]:
        return self._first_match

    @property
    def metadata(self) -> Mapping[str, Any]:
        return self._metadata

    def to_payload(self) -> dict[str, Any]:
        """Build the new session request body.

        Returns:
            ``{"capabilities": {"alwaysMatch": ..., "firstMatch": [...]}}``
            with metadata keys alongside ``capabilities``.
        """
        first_match = [copy.deepcopy(dict(entry)) for entry in self._first_match]
        payload: dict[str, Any] = {
            "capabilities": {
                "alwaysMatch": copy.deepcopy(dict(self._always_match)),
                "firstMatch": first_match or [{}],
            }
        }
        for key, value in self._metadata.items():
            payload[key] = copy.deepcopy(value)
        return payload

    def write_payload(self, sink: TextIO) -> None:
        """Write the request body as JSON to a text stream.

        Errors raised by the sink itself propagate unchanged.

        Raises:
            SerializationError: If a capability or metadata value cannot be
                encoded as JSON
        """
        try:
            encoded = json.dumps(self.to_payload(), allow_nan=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Payload is not JSON serializable: {e}") from e
        sink.write(encoded)

    def list_capabilities(self) -> list[Capabilities]:
        """Effective capabilities of each firstMatch alternative.

        Each entry is ``alwaysMatch`` merged over one ``firstMatch`` entry;
        ``alwaysMatch`` wins where both set a key.
        """
        always = Capabilities(self._always_match)
        first_match = self._first_match or (MappingProxyType({}),)
        return [always.merge(entry) for entry in first_match]
