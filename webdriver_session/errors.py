"""
Exceptions raised by webdriver-session.

Every error is raised synchronously at the call that caused it so the caller
can correct its configuration before a session is attempted.
"""

from typing import Any


class WebDriverSessionError(Exception):
    """Base class for all webdriver-session errors."""

    pass


class InvalidCapabilityError(WebDriverSessionError, ValueError):
    """A capability name is not W3C compatible."""

    def __init__(self, key: Any, message: str = "") -> None:
        self.key = key
        super().__init__(message or f"Capability is not W3C compatible: {key!r}")


class ConfigurationConflictError(WebDriverSessionError, ValueError):
    """A builder call conflicts with state that is already set."""

    pass


class InvalidURLError(WebDriverSessionError, ValueError):
    """A remote endpoint URL could not be parsed."""

    pass


class SessionNotCreatedError(WebDriverSessionError):
    """A new session request cannot be created."""

    pass


class IncompleteConfigurationError(SessionNotCreatedError):
    """The builder was finalized before any options were added."""

    pass


class SerializationError(WebDriverSessionError, TypeError):
    """A payload value cannot be encoded as JSON."""

    pass


class DriverNotFoundError(WebDriverSessionError):
    """No driver executable could be located."""

    pass
