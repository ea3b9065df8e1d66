"""Configuration errors."""


class ConfigError(Exception):
    """Raised when configuration data cannot be loaded, merged, or validated."""
