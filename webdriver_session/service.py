"""
Driver service descriptors.

A ``DriverService`` describes a local driver process (chromedriver,
geckodriver, ...) that a session can be created against. The process itself
is started and supervised by whoever owns the descriptor; this module only
locates executables and records where the driver listens.
"""

from __future__ import annotations

import logging
import os
import shutil
import socket
import subprocess
from dataclasses import dataclass, field
from typing import Optional

from webdriver_session.errors import DriverNotFoundError

logger = logging.getLogger(__name__)

# Driver executable for each W3C browserName
DRIVER_EXECUTABLES: dict[str, str] = {
    "chrome": "chromedriver",
    "firefox": "geckodriver",
    "MicrosoftEdge": "msedgedriver",
    "safari": "safaridriver",
    "internet explorer": "IEDriverServer",
}

EXECUTABLE_PATH_ENV = "WEBDRIVER_SERVICE_EXECUTABLE_PATH"


def find_driver_executable(browser: str) -> Optional[str]:
    """Find the driver executable for a browser.

    Args:
        browser: W3C browser name (e.g. "firefox")

    Returns:
        Path to the driver executable or None if not found.
    """
    name = DRIVER_EXECUTABLES.get(browser)
    if name is None:
        raise ValueError(
            f"Unknown browser: {browser}. "
            f"Known browsers: {', '.join(DRIVER_EXECUTABLES)}"
        )

    candidates = [name]
    if os.name == "nt":
        candidates.insert(0, f"{name}.exe")

    for candidate in candidates:
        path = shutil.which(candidate)
        if path:
            return path

    env_path = os.environ.get(EXECUTABLE_PATH_ENV)
    if env_path and os.path.isfile(env_path) and os.access(env_path, os.X_OK):
        return env_path

    return None


def free_port() -> int:
    """Ask the OS for a currently unused TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("localhost", 0))
        return sock.getsockname()[1]


@dataclass(eq=False)
class DriverService:
    """Where and how a local driver process runs.

    Compared and hashed by identity: a descriptor stands for one driver
    process, not for its settings.
    """

    executable_path: str
    """Path to the driver executable."""

    port: int = 0
    """Port the driver listens on. 0 means pick a free one on first use."""

    host: str = "localhost"
    """Host the driver binds to."""

    args: list[str] = field(default_factory=list)
    """Additional driver arguments."""

    env: Optional[dict[str, str]] = None
    """Environment variables for the driver process."""

    log_path: Optional[str] = None
    """File the driver should log to."""

    _process: Optional[subprocess.Popen[bytes]] = field(
        default=None, init=False, repr=False, compare=False
    )

    @classmethod
    def create_default_service(cls, browser: str = "firefox") -> "DriverService":
        """Create a service for the driver found on this machine.

        Raises:
            DriverNotFoundError: If no driver executable can be located
        """
        executable = find_driver_executable(browser)
        if executable is None:
            raise DriverNotFoundError(
                f"Could not find {DRIVER_EXECUTABLES[browser]} on PATH "
                f"or in ${EXECUTABLE_PATH_ENV}"
            )
        service = cls(executable_path=executable)
        logger.debug(f"Default {browser} driver service: {executable}")
        return service

    def resolve_port(self) -> int:
        """Return the port, picking a free one if none was set.

        The chosen port is kept. It is only known to be free at the moment it
        is picked, so the owner should start the driver soon after.
        """
        if self.port == 0:
            self.port = free_port()
            logger.debug(f"Picked port {self.port} for {self.executable_path}")
        return self.port

    @property
    def url(self) -> str:
        """Base URL of the driver's HTTP endpoint."""
        return f"http://{self.host}:{self.resolve_port()}"

    @property
    def process(self) -> Optional[subprocess.Popen[bytes]]:
        return self._process

    @property
    def is_running(self) -> bool:
        """Whether the attached driver process is still alive."""
        return self._process is not None and self._process.poll() is None

    def attach(self, process: subprocess.Popen[bytes]) -> "DriverService":
        """Record the process started for this service by its owner."""
        self._process = process
        return self

    def command_line(self) -> list[str]:
        """Build the command line the driver should be started with."""
        cmd = [self.executable_path, f"--port={self.resolve_port()}"]
        if self.host != "localhost":
            cmd.append(f"--host={self.host}")
        if self.log_path:
            cmd.append(f"--log-path={self.log_path}")
        cmd.extend(self.args)
        return cmd
