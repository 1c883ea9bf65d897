"""
Browser option classes for webdriver-session.

Each option class is a pydantic model that converts itself into a W3C
capability map. They are the usual input to ``SessionBuilder.add_options``:

    from webdriver_session import ChromeOptions, builder

    options = ChromeOptions(args=["--headless=new"])
    options.set_capability("se:name", "smoke test")
    plan = builder().add_options(options).url("http://grid:4444").get_plan()
"""

import copy
from enum import Enum
from typing import Any, ClassVar, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from webdriver_session.capabilities import CapabilitySet


class PageLoadStrategy(str, Enum):
    """When a navigation is considered complete."""

    NONE = "none"
    EAGER = "eager"
    NORMAL = "normal"


class UnhandledPromptBehavior(str, Enum):
    """How user prompts are handled when a command hits one."""

    DISMISS = "dismiss"
    ACCEPT = "accept"
    DISMISS_AND_NOTIFY = "dismiss and notify"
    ACCEPT_AND_NOTIFY = "accept and notify"
    IGNORE = "ignore"


class ProxyType(str, Enum):
    """W3C proxy configuration types."""

    DIRECT = "direct"
    MANUAL = "manual"
    PAC = "pac"
    AUTODETECT = "autodetect"
    SYSTEM = "system"


class ProxyOptions(BaseModel):
    """Proxy configuration, serialized as the ``proxy`` capability."""

    proxy_type: ProxyType = Field(ProxyType.MANUAL, description="Proxy type")
    http_proxy: Optional[str] = Field(None, description="host[:port] for HTTP")
    ssl_proxy: Optional[str] = Field(None, description="host[:port] for HTTPS")
    socks_proxy: Optional[str] = Field(None, description="host[:port] for SOCKS")
    socks_version: Optional[int] = Field(None, ge=0, le=255, description="SOCKS version")
    no_proxy: list[str] = Field(default_factory=list, description="Hosts to bypass")
    proxy_autoconfig_url: Optional[str] = Field(None, description="PAC file URL")

    @classmethod
    def from_url(cls, url: str, bypass: Optional[list[str]] = None) -> "ProxyOptions":
        """Build a manual proxy from URL format.

        Supported formats:
        - http://host:port
        - https://host:port
        - socks5://host:port
        """
        parsed = urlparse(url)
        scheme = parsed.scheme.lower()

        address = parsed.hostname or ""
        if parsed.port:
            address += f":{parsed.port}"

        if scheme in ("socks4", "socks5", "socks5h"):
            return cls(
                socks_proxy=address,
                socks_version=4 if scheme == "socks4" else 5,
                no_proxy=bypass or [],
            )

        return cls(http_proxy=address, ssl_proxy=address, no_proxy=bypass or [])

    def to_capability(self) -> dict[str, Any]:
        """Convert to the W3C proxy object."""
        proxy: dict[str, Any] = {"proxyType": self.proxy_type.value}
        if self.proxy_type == ProxyType.PAC and self.proxy_autoconfig_url:
            proxy["proxyAutoconfigUrl"] = self.proxy_autoconfig_url
        if self.proxy_type == ProxyType.MANUAL:
            if self.http_proxy:
                proxy["httpProxy"] = self.http_proxy
            if self.ssl_proxy:
                proxy["sslProxy"] = self.ssl_proxy
            if self.socks_proxy:
                proxy["socksProxy"] = self.socks_proxy
                proxy["socksVersion"] = self.socks_version or 5
            if self.no_proxy:
                proxy["noProxy"] = list(self.no_proxy)
        return proxy


class TimeoutsOptions(BaseModel):
    """Session timeouts in milliseconds."""

    script: Optional[int] = Field(None, ge=0, description="Script timeout")
    page_load: Optional[int] = Field(None, ge=0, description="Page load timeout")
    implicit: Optional[int] = Field(None, ge=0, description="Implicit wait timeout")

    def to_capability(self) -> dict[str, int]:
        timeouts = {}
        if self.script is not None:
            timeouts["script"] = self.script
        if self.page_load is not None:
            timeouts["pageLoad"] = self.page_load
        if self.implicit is not None:
            timeouts["implicit"] = self.implicit
        return timeouts


class BrowserOptions(BaseModel, CapabilitySet):
    """Options shared by every browser.

    Subclasses set ``browser_name`` and add their vendor-specific block via
    ``vendor_capabilities``. Capabilities without a dedicated field can be set
    with ``set_capability``; those are applied last.
    """

    browser_name: str = Field("", description="W3C browserName")
    browser_version: Optional[str] = Field(None, description="Browser version")
    platform_name: Optional[str] = Field(None, description="Platform name")
    accept_insecure_certs: Optional[bool] = Field(
        None, description="Trust untrusted and self-signed certificates"
    )
    page_load_strategy: Optional[PageLoadStrategy] = Field(
        None, description="Page load strategy"
    )
    unhandled_prompt_behavior: Optional[UnhandledPromptBehavior] = Field(
        None, description="User prompt handler"
    )
    proxy: Optional[ProxyOptions] = Field(None, description="Proxy configuration")
    timeouts: Optional[TimeoutsOptions] = Field(None, description="Session timeouts")
    strict_file_interactability: Optional[bool] = Field(
        None, description="Strict file input interactability checks"
    )
    set_window_rect: Optional[bool] = Field(
        None, description="Window resizing and repositioning support"
    )
    capabilities: dict[str, Any] = Field(
        default_factory=dict, description="Additional capabilities"
    )

    STANDARD_FIELDS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("browser_version", "browserVersion"),
        ("platform_name", "platformName"),
        ("accept_insecure_certs", "acceptInsecureCerts"),
        ("page_load_strategy", "pageLoadStrategy"),
        ("unhandled_prompt_behavior", "unhandledPromptBehavior"),
        ("strict_file_interactability", "strictFileInteractability"),
        ("set_window_rect", "setWindowRect"),
    )

    @field_validator("proxy", mode="before")
    @classmethod
    def parse_proxy(cls, v: Any) -> Any:
        """Parse proxy from URL string or dict."""
        if isinstance(v, str):
            return ProxyOptions.from_url(v)
        return v

    def set_capability(self, key: str, value: Any) -> "BrowserOptions":
        """Set an additional capability, returning self for chaining."""
        self.capabilities[key] = value
        return self

    def vendor_capabilities(self) -> dict[str, Any]:
        """Browser-specific capabilities, e.g. ``goog:chromeOptions``."""
        return {}

    def to_capabilities(self) -> dict[str, Any]:
        caps: dict[str, Any] = {}
        if self.browser_name:
            caps["browserName"] = self.browser_name

        for field_name, capability in self.STANDARD_FIELDS:
            value = getattr(self, field_name)
            if value is None:
                continue
            caps[capability] = value.value if isinstance(value, Enum) else value

        if self.proxy is not None:
            caps["proxy"] = self.proxy.to_capability()
        if self.timeouts is not None:
            caps["timeouts"] = self.timeouts.to_capability()

        caps.update(self.vendor_capabilities())
        caps.update(copy.deepcopy(self.capabilities))
        return caps


class ChromiumOptions(BrowserOptions):
    """Options common to Chromium-based browsers."""

    options_key: ClassVar[str] = "goog:chromeOptions"

    args: list[str] = Field(default_factory=list, description="Command line arguments")
    binary: Optional[str] = Field(None, description="Browser binary path")
    extensions: list[str] = Field(
        default_factory=list, description="Base64-encoded extensions"
    )
    prefs: dict[str, Any] = Field(default_factory=dict, description="User preferences")
    debugger_address: Optional[str] = Field(
        None, description="Attach to a running browser at host:port"
    )
    experimental_options: dict[str, Any] = Field(
        default_factory=dict, description="Other vendor options"
    )

    def add_argument(self, argument: str) -> "ChromiumOptions":
        self.args.append(argument)
        return self

    def vendor_capabilities(self) -> dict[str, Any]:
        block: dict[str, Any] = {}
        if self.args:
            block["args"] = list(self.args)
        if self.binary:
            block["binary"] = self.binary
        if self.extensions:
            block["extensions"] = list(self.extensions)
        if self.prefs:
            block["prefs"] = copy.deepcopy(self.prefs)
        if self.debugger_address:
            block["debuggerAddress"] = self.debugger_address
        block.update(copy.deepcopy(self.experimental_options))
        return {self.options_key: block}


class ChromeOptions(ChromiumOptions):
    browser_name: str = "chrome"


class EdgeOptions(ChromiumOptions):
    options_key: ClassVar[str] = "ms:edgeOptions"

    browser_name: str = "MicrosoftEdge"


class FirefoxOptions(BrowserOptions):
    """Firefox (geckodriver) options."""

    browser_name: str = "firefox"
    args: list[str] = Field(default_factory=list, description="Command line arguments")
    binary: Optional[str] = Field(None, description="Firefox binary path")
    prefs: dict[str, Any] = Field(default_factory=dict, description="about:config prefs")
    profile: Optional[str] = Field(None, description="Base64-encoded profile zip")
    log_level: Optional[str] = Field(None, description="geckodriver log level")

    def add_argument(self, argument: str) -> "FirefoxOptions":
        self.args.append(argument)
        return self

    def vendor_capabilities(self) -> dict[str, Any]:
        block: dict[str, Any] = {}
        if self.args:
            block["args"] = list(self.args)
        if self.binary:
            block["binary"] = self.binary
        if self.prefs:
            block["prefs"] = copy.deepcopy(self.prefs)
        if self.profile:
            block["profile"] = self.profile
        if self.log_level:
            block["log"] = {"level": self.log_level}
        return {"moz:firefoxOptions": block}


class SafariOptions(BrowserOptions):
    browser_name: str = "safari"
    automatic_inspection: Optional[bool] = Field(
        None, description="Open Web Inspector for new tabs"
    )
    automatic_profiling: Optional[bool] = Field(
        None, description="Start timeline recording for new tabs"
    )
    use_technology_preview: bool = Field(
        False, description="Drive Safari Technology Preview"
    )

    def to_capabilities(self) -> dict[str, Any]:
        caps = super().to_capabilities()
        if self.use_technology_preview:
            caps["browserName"] = "Safari Technology Preview"
        return caps

    def vendor_capabilities(self) -> dict[str, Any]:
        caps: dict[str, Any] = {}
        if self.automatic_inspection is not None:
            caps["safari:automaticInspection"] = self.automatic_inspection
        if self.automatic_profiling is not None:
            caps["safari:automaticProfiling"] = self.automatic_profiling
        return caps


class InternetExplorerOptions(BrowserOptions):
    """Internet Explorer (IEDriverServer) options."""

    browser_name: str = "internet explorer"
    platform_name: Optional[str] = "windows"
    ignore_protected_mode_settings: Optional[bool] = None
    ignore_zoom_setting: Optional[bool] = None
    initial_browser_url: Optional[str] = None
    require_window_focus: Optional[bool] = None
    ensure_clean_session: Optional[bool] = None
    attach_to_edge_chrome: Optional[bool] = None
    edge_executable_path: Optional[str] = None

    IE_FIELDS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("ignore_protected_mode_settings", "ignoreProtectedModeSettings"),
        ("ignore_zoom_setting", "ignoreZoomSetting"),
        ("initial_browser_url", "initialBrowserUrl"),
        ("require_window_focus", "requireWindowFocus"),
        ("ensure_clean_session", "ie.ensureCleanSession"),
        ("attach_to_edge_chrome", "ie.edgechromium"),
        ("edge_executable_path", "ie.edgepath"),
    )

    def vendor_capabilities(self) -> dict[str, Any]:
        block = {
            key: getattr(self, name)
            for name, key in self.IE_FIELDS
            if getattr(self, name) is not None
        }
        return {"se:ieOptions": block}
