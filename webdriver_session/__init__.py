"""
webdriver-session: build W3C WebDriver new-session requests.

Collects browser options, validates them against the W3C capability naming
rules, applies global capabilities and metadata, and resolves whether the
session runs on a remote endpoint or a local driver service.

Basic usage:
    from webdriver_session import ChromeOptions, FirefoxOptions, builder

    plan = (
        builder()
        .add_options(FirefoxOptions())
        .add_options(ChromeOptions())
        .set_capability("se:name", "checkout flow")
        .url("http://localhost:4444")
        .get_plan()
    )

    plan.remote_host         # "http://localhost:4444"
    plan.to_payload()        # {"capabilities": {"alwaysMatch": ..., "firstMatch": [...]}}

With a local driver:
    from webdriver_session import DriverService

    service = DriverService.create_default_service("firefox")
    plan = builder().add_options(FirefoxOptions()).with_driver_service(service).get_plan()
    plan.is_using_driver_service  # True
"""

__version__ = "0.1.0"
__license__ = "MIT"

from webdriver_session.session_builder import (
    RESERVED_METADATA_KEYS,
    SessionBuilder,
    builder,
)

from webdriver_session.capabilities import (
    LEGACY_CAPABILITIES,
    STANDARD_CAPABILITIES,
    Capabilities,
    CapabilitySet,
    is_extension_capability,
    is_standard_capability,
    is_w3c_capability,
    merge_capabilities,
    validate_capabilities,
    validate_capability_name,
)

from webdriver_session.errors import (
    ConfigurationConflictError,
    DriverNotFoundError,
    IncompleteConfigurationError,
    InvalidCapabilityError,
    InvalidURLError,
    SerializationError,
    SessionNotCreatedError,
    WebDriverSessionError,
)

from webdriver_session.options import (
    BrowserOptions,
    ChromeOptions,
    ChromiumOptions,
    EdgeOptions,
    FirefoxOptions,
    InternetExplorerOptions,
    PageLoadStrategy,
    ProxyOptions,
    ProxyType,
    SafariOptions,
    TimeoutsOptions,
    UnhandledPromptBehavior,
)

from webdriver_session.plan import Plan

from webdriver_session.service import (
    DRIVER_EXECUTABLES,
    DriverService,
    find_driver_executable,
)

from webdriver_session.target import (
    ExecutionTarget,
    LocalService,
    RemoteEndpoint,
    parse_remote_url,
)

__all__ = [
    "__version__",
    "__license__",
    # Builder
    "SessionBuilder",
    "builder",
    "RESERVED_METADATA_KEYS",
    "Plan",
    # Capabilities
    "Capabilities",
    "CapabilitySet",
    "STANDARD_CAPABILITIES",
    "LEGACY_CAPABILITIES",
    "is_standard_capability",
    "is_extension_capability",
    "is_w3c_capability",
    "merge_capabilities",
    "validate_capabilities",
    "validate_capability_name",
    # Errors
    "WebDriverSessionError",
    "InvalidCapabilityError",
    "ConfigurationConflictError",
    "InvalidURLError",
    "SessionNotCreatedError",
    "IncompleteConfigurationError",
    "SerializationError",
    "DriverNotFoundError",
    # Browser options
    "BrowserOptions",
    "ChromiumOptions",
    "ChromeOptions",
    "EdgeOptions",
    "FirefoxOptions",
    "SafariOptions",
    "InternetExplorerOptions",
    "PageLoadStrategy",
    "UnhandledPromptBehavior",
    "ProxyOptions",
    "ProxyType",
    "TimeoutsOptions",
    # Execution targets
    "ExecutionTarget",
    "RemoteEndpoint",
    "LocalService",
    "parse_remote_url",
    "DriverService",
    "DRIVER_EXECUTABLES",
    "find_driver_executable",
]
