"""
Default configuration values for webdriver-session.
"""

# Session defaults
DEFAULT_GRID_URL = "http://localhost:4444"

# Service defaults
DEFAULT_SERVICE_BROWSER = "firefox"
DEFAULT_SERVICE_HOST = "localhost"
DEFAULT_SERVICE_PORT = 0

# File config defaults
DEFAULT_CONFIG_FILENAME = "webdriver.config"
DEFAULT_CONFIG_EXTENSIONS = [".json", ".yaml", ".yml", ".toml"]
DEFAULT_CONFIG_SEARCH_PATHS = [
    ".",
    "~/.config/webdriver-session",
    "~",
]

# Environment variable prefix
ENV_PREFIX = "WEBDRIVER_"
