"""
Environment variable support for webdriver-session configuration.

Variables are named after the configuration key they set, e.g.
``session.remote_url`` is read from ``WEBDRIVER_SESSION_REMOTE_URL``.
"""

import os
from typing import Any, Union, get_args, get_origin

from .defaults import ENV_PREFIX


def get_env_key(key: str, prefix: str = ENV_PREFIX) -> str:
    """Convert a configuration key to environment variable name.

    Args:
        key: Configuration key (e.g., "service.executable_path")
        prefix: Environment variable prefix

    Returns:
        Environment variable name (e.g., "WEBDRIVER_SERVICE_EXECUTABLE_PATH")
    """
    return f"{prefix}{key.upper().replace('.', '_').replace('-', '_')}"


def parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on", "enabled")


def parse_list(value: str, item_type: type = str) -> list[Any]:
    """Parse a comma-separated string to a list."""
    if not value:
        return []

    items = [item.strip() for item in value.split(",")]

    if item_type == int:
        return [int(item) for item in items]
    elif item_type == bool:
        return [parse_bool(item) for item in items]

    return items


def parse_dict(value: str) -> dict[str, str]:
    """Parse a string to dictionary.

    Format: "key1=value1,key2=value2"
    """
    if not value:
        return {}

    result = {}
    for pair in value.split(","):
        if "=" in pair:
            k, v = pair.split("=", 1)
            result[k.strip()] = v.strip()

    return result


def parse_value(value: str, target_type: Any) -> Any:
    """Parse string value to target type.

    Args:
        value: String value
        target_type: Target type, e.g. ``int`` or ``list[str]``

    Returns:
        Parsed value
    """
    origin = get_origin(target_type)

    if origin is Union:
        non_none_types = [t for t in get_args(target_type) if t is not type(None)]
        if non_none_types:
            return parse_value(value, non_none_types[0])
        return value

    if origin is list:
        item_type = get_args(target_type)[0] if get_args(target_type) else str
        return parse_list(value, item_type)

    if origin is dict or target_type is dict:
        return parse_dict(value)

    if target_type == bool:
        return parse_bool(value)

    if target_type == int:
        return int(value)

    return value


# Configuration keys read from the environment, with their types
ENV_MAPPINGS = {
    # Session options
    "session.remote_url": str,
    "session.capabilities": dict,
    "session.metadata": dict,
    # Driver service options
    "service.browser": str,
    "service.executable_path": str,
    "service.host": str,
    "service.port": int,
    "service.args": list[str],
    "service.log_path": str,
}


def load_env_config() -> dict[str, Any]:
    """Load configuration from predefined environment variables.

    Returns:
        Nested dictionary with only the sections and keys that are set
    """
    result: dict[str, Any] = {}

    for key, target_type in ENV_MAPPINGS.items():
        value = os.environ.get(get_env_key(key))
        if value is not None:
            section, option = key.split(".", 1)
            result.setdefault(section, {})[option] = parse_value(value, target_type)

    return result
