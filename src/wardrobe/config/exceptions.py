"""Custom exceptions for configuration management."""

from wardrobe.errors import WardrobeError


class ConfigError(WardrobeError):
    """Raised when configuration data cannot be processed."""


class MissingConfigError(ConfigError):
    """Raised when no usable configuration (or collection root) exists yet."""
