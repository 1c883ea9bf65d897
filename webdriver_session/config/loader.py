"""
Configuration file loader for webdriver-session.

This module loads session configuration from JSON, YAML or TOML files,
layers environment variables and programmatic overrides on top, and
provides a few built-in profiles.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from webdriver_session.errors import WebDriverSessionError

from .defaults import (
    DEFAULT_CONFIG_EXTENSIONS,
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_CONFIG_SEARCH_PATHS,
    DEFAULT_GRID_URL,
)
from .env import load_env_config
from .options import SessionConfig

logger = logging.getLogger(__name__)


class ConfigurationError(WebDriverSessionError):
    """Configuration loading or parsing error."""

    pass


def _load_json(path: Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        import yaml
    except ImportError:
        raise ConfigurationError(
            "PyYAML is required to load YAML config files. "
            "Install with: pip install pyyaml"
        )

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _load_toml(path: Path) -> dict[str, Any]:
    import tomllib

    with open(path, "rb") as f:
        return tomllib.load(f)


def load_file(path: Union[str, Path]) -> dict[str, Any]:
    """Load configuration from file based on extension.

    Args:
        path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If the file is missing, unreadable or in an
            unsupported format
    """
    path = Path(path)

    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()

    try:
        if suffix == ".json":
            data = _load_json(path)
        elif suffix in (".yaml", ".yml"):
            data = _load_yaml(path)
        elif suffix == ".toml":
            data = _load_toml(path)
        else:
            raise ConfigurationError(f"Unsupported configuration format: {suffix}")
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Could not parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {path} must be a mapping")

    return data


def find_config_file(
    filename: str = DEFAULT_CONFIG_FILENAME,
    search_paths: Optional[list[str]] = None,
    extensions: Optional[list[str]] = None,
) -> Optional[Path]:
    """Find configuration file in search paths.

    Returns:
        Path to the first config file found, or None
    """
    if search_paths is None:
        search_paths = DEFAULT_CONFIG_SEARCH_PATHS

    if extensions is None:
        extensions = DEFAULT_CONFIG_EXTENSIONS

    for search_path in search_paths:
        search_dir = Path(search_path).expanduser()

        for ext in extensions:
            config_path = search_dir / f"{filename}{ext}"
            if config_path.exists():
                return config_path

    return None


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Deep merge multiple configuration dictionaries.

    Later configs take precedence over earlier ones.
    """
    result: dict[str, Any] = {}

    for config in configs:
        _deep_merge(result, config)

    return result


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)


def _build_config(data: dict[str, Any]) -> SessionConfig:
    try:
        return SessionConfig.from_dict(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


class ConfigLoader:
    """Configuration loader with support for multiple sources.

    Priority (highest to lowest):
    1. Programmatic overrides
    2. Environment variables
    3. Configuration file
    4. Default values
    """

    def __init__(
        self,
        config_file: Optional[Union[str, Path]] = None,
        search_paths: Optional[list[str]] = None,
        load_env: bool = True,
        auto_find: bool = True,
    ):
        self.config_file = Path(config_file) if config_file else None
        self.search_paths = search_paths or DEFAULT_CONFIG_SEARCH_PATHS
        self.load_env = load_env
        self.auto_find = auto_find
        self._file_config: Optional[dict[str, Any]] = None
        self._env_config: Optional[dict[str, Any]] = None

    def load(self, overrides: Optional[dict[str, Any]] = None) -> SessionConfig:
        """Load configuration from all sources.

        Raises:
            ConfigurationError: If an explicit config file cannot be loaded
                or the merged configuration is invalid
        """
        configs = []

        file_config = self._load_file_config()
        if file_config:
            configs.append(file_config)

        if self.load_env:
            env_config = self._load_env_config()
            if env_config:
                configs.append(env_config)

        if overrides:
            configs.append(overrides)

        merged = merge_configs(*configs) if configs else {}

        return _build_config(merged)

    def _load_file_config(self) -> Optional[dict[str, Any]]:
        if self._file_config is not None:
            return self._file_config

        if self.config_file is not None:
            self._file_config = load_file(self.config_file)
        elif self.auto_find:
            found = find_config_file(search_paths=self.search_paths)
            if found is not None:
                logger.debug(f"Using configuration file {found}")
                self._file_config = load_file(found)

        return self._file_config

    def _load_env_config(self) -> Optional[dict[str, Any]]:
        if self._env_config is None:
            self._env_config = load_env_config()
        return self._env_config

    def reload(self) -> SessionConfig:
        """Reload configuration from all sources."""
        self._file_config = None
        self._env_config = None
        return self.load()


def load_config(
    config_file: Optional[Union[str, Path]] = None,
    overrides: Optional[dict[str, Any]] = None,
    load_env: bool = True,
) -> SessionConfig:
    """Convenience function to load configuration."""
    loader = ConfigLoader(config_file=config_file, load_env=load_env)
    return loader.load(overrides=overrides)


def save_config(
    config: SessionConfig,
    path: Union[str, Path],
    format: str = "json",
) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save
        path: Output file path
        format: Output format (json, yaml)

    Raises:
        ConfigurationError: If format is not supported
    """
    path = Path(path)
    data = config.to_dict()

    if format == "json":
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    elif format in ("yaml", "yml"):
        try:
            import yaml
        except ImportError:
            raise ConfigurationError(
                "PyYAML is required to save YAML config files. "
                "Install with: pip install pyyaml"
            )
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False)

    else:
        raise ConfigurationError(f"Unsupported output format: {format}")


# Built-in configuration profiles
PROFILES = {
    "grid": {
        "session": {
            "remote_url": DEFAULT_GRID_URL,
        },
    },
    "insecure": {
        "session": {
            "capabilities": {"acceptInsecureCerts": True},
        },
    },
    "eager": {
        "session": {
            "capabilities": {
                "pageLoadStrategy": "eager",
                "timeouts": {"pageLoad": 30000, "script": 30000},
            },
        },
    },
}


def load_profile(name: str) -> dict[str, Any]:
    """Load a built-in configuration profile.

    Raises:
        ConfigurationError: If profile not found
    """
    if name not in PROFILES:
        raise ConfigurationError(
            f"Unknown profile: {name}. "
            f"Available profiles: {', '.join(PROFILES.keys())}"
        )

    return copy.deepcopy(PROFILES[name])


def load_config_with_profile(
    profile: str,
    config_file: Optional[Union[str, Path]] = None,
    overrides: Optional[dict[str, Any]] = None,
) -> SessionConfig:
    """Load configuration with a profile as base.

    Merge order: defaults < profile < file < env < overrides
    """
    profile_config = load_profile(profile)

    loader = ConfigLoader(config_file=config_file, load_env=True)
    file_config = loader._load_file_config() or {}
    env_config = loader._load_env_config() or {}

    merged = merge_configs(
        profile_config,
        file_config,
        env_config,
        overrides or {},
        {"profile": profile},
    )

    return _build_config(merged)
