"""
Session builder.

Collects browser options, global capabilities, metadata and an execution
target, then produces an immutable ``Plan`` describing the new session
request.

Example:
    from webdriver_session import ChromeOptions, FirefoxOptions, builder

    plan = (
        builder()
        .add_options(FirefoxOptions())
        .add_options(ChromeOptions())
        .set_capability("se:recordVideo", True)
        .add_metadata("cloud:options", {"build": "1234"})
        .url("http://localhost:4444")
        .get_plan()
    )
    payload = plan.to_payload()

A builder is not thread-safe. Share one between threads only with external
locking.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, Optional

from webdriver_session.capabilities import (
    as_capability_map,
    validate_capabilities,
    validate_capability_name,
)
from webdriver_session.errors import (
    ConfigurationConflictError,
    IncompleteConfigurationError,
)
from webdriver_session.plan import Plan
from webdriver_session.service import DriverService
from webdriver_session.target import (
    ExecutionTarget,
    LocalService,
    RemoteEndpoint,
    parse_remote_url,
)

if TYPE_CHECKING:
    from webdriver_session.config.options import SessionConfig

logger = logging.getLogger(__name__)

# Keys owned by the capabilities object of the payload
RESERVED_METADATA_KEYS = frozenset({"firstMatch", "alwaysMatch", "capabilities"})


class SessionBuilder:
    """Fluent builder for new session requests.

    Every configuring method returns the builder. Capability names are
    validated as they are added, so a bad key fails at the call that
    introduced it and is never stored.

    Capabilities set with ``set_capability`` apply to every options entry,
    including entries added later, and win over the entries' own values.
    """

    def __init__(self) -> None:
        self._options: list[dict[str, Any]] = []
        self._capabilities: dict[str, Any] = {}
        self._metadata: dict[str, Any] = {}
        self._target: Optional[ExecutionTarget] = None
        self._finalized = False

    @classmethod
    def from_config(cls, config: "SessionConfig") -> "SessionBuilder":
        """Create a builder seeded from loaded configuration.

        Global capabilities and metadata are applied, and the remote URL or
        driver service (if configured) is chosen as the target. Options
        entries still have to be added by the caller.
        """
        builder = cls()
        for key, value in config.session.capabilities.items():
            builder.set_capability(key, value)
        for key, value in config.session.metadata.items():
            builder.add_metadata(key, value)

        if config.session.remote_url:
            builder.url(config.session.remote_url)
        service = config.service.to_driver_service()
        if service is not None:
            builder.with_driver_service(service)
        return builder

    def _check_configurable(self) -> None:
        if self._finalized:
            raise ConfigurationConflictError(
                "Builder has already produced a plan and can no longer be changed"
            )

    def add_options(self, options: Any) -> "SessionBuilder":
        """Add a set of options as a new firstMatch alternative.

        Args:
            options: A CapabilitySet (e.g. ChromeOptions) or a mapping

        Raises:
            InvalidCapabilityError: If any key is not W3C compatible
        """
        self._check_configurable()
        caps = as_capability_map(options)
        validate_capabilities(caps)
        self._options.append(caps)
        logger.debug(f"Added options entry {len(self._options)}: {sorted(caps)}")
        return self

    def one_of(self, options: Any, *alternatives: Any) -> "SessionBuilder":
        """Replace all options entries with the given alternatives.

        Either every alternative is valid and replaces the existing entries,
        or nothing changes.
        """
        self._check_configurable()
        entries = [as_capability_map(o) for o in (options, *alternatives)]
        for caps in entries:
            validate_capabilities(caps)
        self._options = entries
        logger.debug(f"Replaced options with {len(entries)} alternatives")
        return self

    def set_capability(self, key: str, value: Any) -> "SessionBuilder":
        """Set a capability on every options entry.

        Raises:
            InvalidCapabilityError: If ``key`` is not W3C compatible
        """
        self._check_configurable()
        validate_capability_name(key)
        self._capabilities[key] = copy.deepcopy(value)
        logger.debug(f"Set global capability {key}")
        return self

    def add_metadata(self, key: str, value: Any) -> "SessionBuilder":
        """Add a top-level key to the request payload.

        Raises:
            ConfigurationConflictError: If ``key`` is not a string or is
                reserved for capabilities
        """
        self._check_configurable()
        if not isinstance(key, str):
            raise ConfigurationConflictError(
                f"Metadata keys must be strings, got {type(key).__name__}"
            )
        if key in RESERVED_METADATA_KEYS:
            raise ConfigurationConflictError(f"Cannot use {key!r} as a metadata key")
        self._metadata[key] = copy.deepcopy(value)
        return self

    def _set_target(self, target: ExecutionTarget) -> None:
        if self._target is not None:
            raise ConfigurationConflictError(
                f"Execution target already chosen: {self._target!r}"
            )
        self._target = target
        logger.debug(f"Execution target: {target!r}")

    def url(self, url: str) -> "SessionBuilder":
        """Create the session on a remote endpoint.

        Raises:
            InvalidURLError: If ``url`` is malformed
            ConfigurationConflictError: If a target was already chosen
        """
        self._check_configurable()
        self._set_target(RemoteEndpoint(parse_remote_url(url)))
        return self

    def with_driver_service(self, service: DriverService) -> "SessionBuilder":
        """Create the session on a local driver service.

        Raises:
            ConfigurationConflictError: If a target was already chosen
        """
        self._check_configurable()
        if service is None:
            raise ValueError("Driver service must not be None")
        self._set_target(LocalService(service))
        return self

    def get_plan(self) -> Plan:
        """Finalize the builder and return the session plan.

        Calling this again returns an equal plan; the builder can no longer
        be configured afterwards.

        Raises:
            IncompleteConfigurationError: If no options were added
        """
        if not self._options:
            raise IncompleteConfigurationError(
                "At least one set of options is required to create a session"
            )

        self._finalized = True
        plan = Plan(
            target=self._target,
            always_match=self._capabilities,
            first_match=self._options,
            metadata=self._metadata,
        )
        logger.debug(
            f"Built plan with {len(self._options)} firstMatch entries, "
            f"{len(self._capabilities)} alwaysMatch capabilities"
        )
        return plan

    def build(self) -> Plan:
        return self.get_plan()


def builder() -> SessionBuilder:
    """Start a new session builder."""
    return SessionBuilder()
