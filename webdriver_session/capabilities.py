"""
W3C capability names and validation.

A capability key is accepted when it is one of the standard names defined by
the WebDriver specification, or an extension key of the form ``vendor:name``.
Pre-standard JSON wire protocol names such as ``platform`` are rejected.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from typing import Any, Optional

from webdriver_session.errors import InvalidCapabilityError

STANDARD_CAPABILITIES: frozenset[str] = frozenset(
    {
        "acceptInsecureCerts",
        "browserName",
        "browserVersion",
        "platformName",
        "pageLoadStrategy",
        "proxy",
        "setWindowRect",
        "strictFileInteractability",
        "timeouts",
        "unhandledPromptBehavior",
        "userAgent",
        "webSocketUrl",
    }
)

# JSON wire protocol names and their standard replacements
LEGACY_CAPABILITIES: dict[str, Optional[str]] = {
    "platform": "platformName",
    "version": "browserVersion",
    "acceptSslCerts": "acceptInsecureCerts",
    "unexpectedAlertBehaviour": "unhandledPromptBehavior",
    "javascriptEnabled": None,
    "cssSelectorsEnabled": None,
    "takesScreenshot": None,
    "nativeEvents": None,
    "handlesAlerts": None,
    "rotatable": None,
}

EXTENSION_SEPARATOR = ":"


def is_standard_capability(key: Any) -> bool:
    """Check whether a key is one of the standard W3C capability names."""
    return isinstance(key, str) and key in STANDARD_CAPABILITIES


def is_extension_capability(key: Any) -> bool:
    """Check whether a key is a namespaced extension capability.

    Args:
        key: Capability name

    Returns:
        True if the key has a non-empty prefix and suffix around a colon
    """
    if not isinstance(key, str):
        return False
    prefix, sep, suffix = key.partition(EXTENSION_SEPARATOR)
    return bool(sep and prefix and suffix)


def is_w3c_capability(key: Any) -> bool:
    return is_standard_capability(key) or is_extension_capability(key)


def validate_capability_name(key: Any) -> None:
    """Validate a single capability name.

    Raises:
        InvalidCapabilityError: If the key is neither standard nor an extension
    """
    if is_w3c_capability(key):
        return

    if isinstance(key, str) and key in LEGACY_CAPABILITIES:
        replacement = LEGACY_CAPABILITIES[key]
        message = f"Legacy JSON wire protocol capability is not allowed: {key!r}"
        if replacement:
            message += f" (use {replacement!r} instead)"
        raise InvalidCapabilityError(key, message)

    raise InvalidCapabilityError(key)


def validate_capabilities(capabilities: Mapping[str, Any]) -> None:
    """Validate every key of a capability map.

    Args:
        capabilities: Mapping of capability name to value

    Raises:
        InvalidCapabilityError: For the first key that fails validation
    """
    for key in capabilities:
        validate_capability_name(key)


def merge_capabilities(
    primary: Mapping[str, Any], secondary: Mapping[str, Any]
) -> dict[str, Any]:
    """Merge two capability maps, values from ``primary`` win.

    Keys present in only one of the maps pass through unchanged. Neither
    input is modified.
    """
    merged = dict(secondary)
    merged.update(primary)
    return merged


class CapabilitySet(ABC):
    """Anything that can be turned into a capability map.

    Browser option classes implement this so the session builder can accept
    them alongside plain mappings.
    """

    @abstractmethod
    def to_capabilities(self) -> dict[str, Any]:
        """Return the capabilities as a new dictionary."""
        ...


class Capabilities(CapabilitySet, Mapping[str, Any]):
    """Immutable capability map.

    Example:
        caps = Capabilities({"browserName": "firefox"}, platformName="linux")
        caps.browser_name  # "firefox"
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        values: dict[str, Any] = {}
        if data is not None:
            values.update(copy.deepcopy(dict(data)))
        values.update(copy.deepcopy(kwargs))
        self._data = values

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(sorted(self._data)))

    def __repr__(self) -> str:
        return f"Capabilities({self._data!r})"

    @property
    def browser_name(self) -> Optional[str]:
        return self._data.get("browserName")

    @property
    def browser_version(self) -> Optional[str]:
        return self._data.get("browserVersion")

    @property
    def platform_name(self) -> Optional[str]:
        return self._data.get("platformName")

    def get_capability(self, key: str) -> Any:
        """Get a capability value, or None if it is not set."""
        return self._data.get(key)

    def merge(self, other: Mapping[str, Any]) -> "Capabilities":
        """Return a new Capabilities where this map wins on conflicts."""
        return Capabilities(merge_capabilities(self._data, other))

    def to_capabilities(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)


def as_capability_map(options: Any) -> dict[str, Any]:
    """Convert a CapabilitySet or mapping into a detached dictionary.

    Raises:
        TypeError: If ``options`` is neither
    """
    if isinstance(options, CapabilitySet):
        return options.to_capabilities()
    if isinstance(options, Mapping):
        return copy.deepcopy(dict(options))
    raise TypeError(
        f"Expected a CapabilitySet or mapping, got {type(options).__name__}"
    )
