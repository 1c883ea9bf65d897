"""
Configuration module for webdriver-session.

This module lets a session request be described outside of code:
- Strongly-typed option classes (SessionOptions, ServiceOptions)
- Configuration file loading (JSON, YAML, TOML)
- Environment variable support
- Built-in profiles (grid, insecure, eager)

Example usage:
    from webdriver_session import FirefoxOptions, SessionBuilder
    from webdriver_session.config import load_config

    config = load_config("webdriver.config.yaml")
    plan = (
        SessionBuilder.from_config(config)
        .add_options(FirefoxOptions())
        .get_plan()
    )

Environment variables:
    WEBDRIVER_SESSION_REMOTE_URL=http://grid:4444
    WEBDRIVER_SESSION_CAPABILITIES=se:name=smoke,se:build=42
    WEBDRIVER_SERVICE_EXECUTABLE_PATH=/usr/local/bin/geckodriver
    WEBDRIVER_SERVICE_PORT=4445
"""

from .defaults import (
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_GRID_URL,
    ENV_PREFIX,
)
from .env import (
    ENV_MAPPINGS,
    get_env_key,
    load_env_config,
    parse_value,
)
from .loader import (
    PROFILES,
    ConfigLoader,
    ConfigurationError,
    find_config_file,
    load_config,
    load_config_with_profile,
    load_file,
    load_profile,
    merge_configs,
    save_config,
)
from .options import (
    ServiceOptions,
    SessionConfig,
    SessionOptions,
)

__all__ = [
    # Main configuration class
    "SessionConfig",
    # Option classes
    "SessionOptions",
    "ServiceOptions",
    # Loader functions
    "load_config",
    "load_config_with_profile",
    "load_file",
    "load_profile",
    "save_config",
    "find_config_file",
    "merge_configs",
    "ConfigLoader",
    "ConfigurationError",
    "PROFILES",
    # Environment
    "ENV_MAPPINGS",
    "ENV_PREFIX",
    "get_env_key",
    "load_env_config",
    "parse_value",
    # Defaults
    "DEFAULT_CONFIG_FILENAME",
    "DEFAULT_GRID_URL",
]
