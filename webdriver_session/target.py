"""
Execution targets.

A session is created either against a remote endpoint (a Selenium Grid, a
cloud provider, a driver started elsewhere) or against a local driver
service. ``ExecutionTarget`` is the union of the two.
"""

from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urlparse

from webdriver_session.errors import InvalidURLError
from webdriver_session.service import DriverService

REMOTE_SCHEMES = ("http", "https")


def parse_remote_url(url: str) -> str:
    """Check that a string is a usable remote endpoint URL.

    Args:
        url: Endpoint URL (e.g. "http://localhost:4444/wd/hub")

    Returns:
        The URL, unchanged

    Raises:
        InvalidURLError: If the URL is malformed
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidURLError(f"Remote URL must be a non-empty string: {url!r}")

    try:
        parsed = urlparse(url)
        # Raises ValueError for an out of range or non-numeric port
        parsed.port
    except ValueError as e:
        raise InvalidURLError(f"Malformed remote URL: {url!r}: {e}") from e

    if parsed.scheme.lower() not in REMOTE_SCHEMES:
        raise InvalidURLError(
            f"Unsupported scheme in remote URL {url!r}, expected one of "
            f"{', '.join(REMOTE_SCHEMES)}"
        )
    if not parsed.hostname:
        raise InvalidURLError(f"Remote URL has no host: {url!r}")

    return url


@dataclass(frozen=True)
class RemoteEndpoint:
    """A remote WebDriver endpoint."""

    url: str

    @property
    def host(self) -> str:
        return urlparse(self.url).hostname or ""

    @property
    def port(self) -> Optional[int]:
        return urlparse(self.url).port


@dataclass(frozen=True)
class LocalService:
    """A driver process running on this machine."""

    service: DriverService

    @property
    def url(self) -> str:
        return self.service.url


ExecutionTarget = Union[RemoteEndpoint, LocalService]
