"""Custom exceptions for configuration management."""

from cidview.errors import CidviewError


class ConfigError(CidviewError):
    """Raised when configuration data cannot be processed."""
