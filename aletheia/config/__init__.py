"""Configuration for the secret resolver."""

from aletheia.config.exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
)
from aletheia.config.loader import AletheiaConfig, ConfigLoader

__all__ = [
    "AletheiaConfig",
    "ConfigLoader",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ConfigValidationError",
]
