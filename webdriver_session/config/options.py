"""
Configuration option classes for webdriver-session.

These describe what a session request should look like when it is set up
from a config file or the environment rather than in code.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from webdriver_session.capabilities import validate_capabilities
from webdriver_session.service import DRIVER_EXECUTABLES, DriverService
from webdriver_session.target import parse_remote_url

from .defaults import (
    DEFAULT_SERVICE_BROWSER,
    DEFAULT_SERVICE_HOST,
    DEFAULT_SERVICE_PORT,
)


class SessionOptions(BaseModel):
    """Global capabilities, metadata and remote endpoint."""

    remote_url: Optional[str] = Field(None, description="Remote endpoint URL")
    capabilities: dict[str, Any] = Field(
        default_factory=dict, description="Capabilities applied to every options entry"
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Top-level payload metadata"
    )

    @field_validator("remote_url")
    @classmethod
    def check_remote_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return parse_remote_url(v)

    @field_validator("capabilities")
    @classmethod
    def check_capabilities(cls, v: dict[str, Any]) -> dict[str, Any]:
        validate_capabilities(v)
        return v

    def merge(self, other: "SessionOptions") -> "SessionOptions":
        """Merge with another SessionOptions, other takes precedence."""
        return SessionOptions(
            remote_url=other.remote_url or self.remote_url,
            capabilities={**self.capabilities, **other.capabilities},
            metadata={**self.metadata, **other.metadata},
        )


class ServiceOptions(BaseModel):
    """Local driver service configuration."""

    browser: str = Field(DEFAULT_SERVICE_BROWSER, description="W3C browser name")
    executable_path: Optional[str] = Field(
        None, description="Driver executable path"
    )
    host: str = Field(DEFAULT_SERVICE_HOST, description="Host the driver binds to")
    port: int = Field(
        DEFAULT_SERVICE_PORT, ge=0, le=65535, description="Driver port, 0 picks one"
    )
    args: list[str] = Field(default_factory=list, description="Driver arguments")
    log_path: Optional[str] = Field(None, description="Driver log file")

    @field_validator("browser")
    @classmethod
    def check_browser(cls, v: str) -> str:
        if v not in DRIVER_EXECUTABLES:
            raise ValueError(
                f"Unknown browser: {v}. Known browsers: {', '.join(DRIVER_EXECUTABLES)}"
            )
        return v

    def to_driver_service(self) -> Optional[DriverService]:
        """Build the configured driver service, if an executable is set."""
        if not self.executable_path:
            return None
        return DriverService(
            executable_path=self.executable_path,
            port=self.port,
            host=self.host,
            args=list(self.args),
            log_path=self.log_path,
        )

    def merge(self, other: "ServiceOptions") -> "ServiceOptions":
        """Merge with another ServiceOptions, other takes precedence."""
        data = self.model_dump(exclude_none=True)
        other_data = other.model_dump(exclude_none=True, exclude_defaults=True)
        data.update(other_data)
        return ServiceOptions(**data)


class SessionConfig(BaseModel):
    """Main configuration class combining all options."""

    session: SessionOptions = Field(
        default_factory=SessionOptions, description="Session options"
    )
    service: ServiceOptions = Field(
        default_factory=ServiceOptions, description="Driver service options"
    )
    profile: Optional[str] = Field(None, description="Configuration profile name")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionConfig":
        """Create configuration from dictionary."""
        return cls(**data)

    def merge(self, other: "SessionConfig") -> "SessionConfig":
        """Merge with another SessionConfig, other takes precedence."""
        return SessionConfig(
            session=self.session.merge(other.session),
            service=self.service.merge(other.service),
            profile=other.profile or self.profile,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump(exclude_none=True)
