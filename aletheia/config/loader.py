"""Configuration loader - YAML file plus environment overrides."""

import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from aletheia.config.exceptions import (
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
)
from aletheia.config.merger import deep_merge
from aletheia.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_FILE = "aletheia.yaml"
DEFAULT_TTL_SECONDS = 3600

CONFIG_PATH_ENV_VAR = "ALETHEIA_CONFIG"
PROVIDERS_ENV_VAR = "ALETHEIA_PROVIDERS"
TTL_ENV_VAR = "ALETHEIA_CACHE_TTL_SECONDS"


def parse_providers(raw: Any) -> list[str]:
    """
    Normalize a provider list.

    Accepts a comma separated string ("file, env") or a list. Blank
    entries are dropped; order is preserved.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    return [str(name).strip() for name in raw if name is not None and str(name).strip()]


def parse_ttl(raw: Any) -> float:
    """Parse the cache TTL in seconds, falling back to the default."""
    if raw is None or raw == "":
        return DEFAULT_TTL_SECONDS
    try:
        ttl = float(raw)
    except (TypeError, ValueError):
        ttl = math.nan

    if not math.isfinite(ttl):
        logger.warning(f"Invalid TTL '{raw}'; defaulting to {DEFAULT_TTL_SECONDS}s")
        return DEFAULT_TTL_SECONDS
    return ttl


@dataclass
class AletheiaConfig:
    """
    Resolver settings.

    YAML layout:
        providers: [file, vault, env]
        cache:
          ttl_seconds: 600
        backends:
          file:
            path: /run/secrets/app.json
          vault:
            url: http://vault:8200
    """

    providers: list[str] = field(default_factory=lambda: ["env"])
    cache_ttl_seconds: float = DEFAULT_TTL_SECONDS
    backends: dict[str, dict] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "AletheiaConfig":
        """
        Build config from a parsed mapping.

        Raises:
            ConfigValidationError: If cache or backends have the wrong shape
        """
        cache = data.get("cache") or {}
        if not isinstance(cache, dict):
            raise ConfigValidationError("'cache' must be a mapping")

        backends = data.get("backends") or {}
        if not isinstance(backends, dict) or not all(
            isinstance(v, dict) or v is None for v in backends.values()
        ):
            raise ConfigValidationError("'backends' must map backend names to mappings")

        return cls(
            providers=parse_providers(data.get("providers")),
            cache_ttl_seconds=parse_ttl(cache.get("ttl_seconds")),
            backends={str(k).strip().lower(): dict(v or {}) for k, v in backends.items()},
        )

    def backend_settings(self, name: str) -> dict:
        """Constructor keyword arguments for backend ``name``."""
        return dict(self.backends.get(name.strip().lower(), {}))


class ConfigLoader:
    """
    Loads resolver configuration.

    Load order (later wins):
        1. aletheia.yaml (explicit path, $ALETHEIA_CONFIG, or ./aletheia.yaml)
        2. $ALETHEIA_PROVIDERS and $ALETHEIA_CACHE_TTL_SECONDS

    Usage:
        config = ConfigLoader().load()
        resolver = SecretResolver(config)
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        explicit = config_path or os.environ.get(CONFIG_PATH_ENV_VAR)
        self.required = bool(explicit)
        self.config_path = Path(explicit) if explicit else Path.cwd() / DEFAULT_CONFIG_FILE

    def _load_yaml(self, path: Path) -> dict:
        """Load and parse a YAML file."""
        if not path.exists():
            raise ConfigNotFoundError(f"Config file not found: {path}")

        try:
            with open(path) as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigParseError(f"Invalid YAML in {path}: {e}")

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigValidationError(f"Expected a mapping at the top of {path}")

        logger.debug(f"Loaded config: {path}")
        return content

    @staticmethod
    def _env_overrides() -> dict:
        return {
            "providers": os.environ.get(PROVIDERS_ENV_VAR) or None,
            "cache": {"ttl_seconds": os.environ.get(TTL_ENV_VAR) or None},
        }

    def load(self) -> AletheiaConfig:
        """
        Load configuration.

        Returns:
            AletheiaConfig with defaults for anything not set

        Raises:
            ConfigNotFoundError: If an explicitly given file doesn't exist
            ConfigParseError: If the file is not valid YAML
            ConfigValidationError: If the file has the wrong shape
        """
        if self.required or self.config_path.exists():
            data = self._load_yaml(self.config_path)
            logger.info(f"Loaded resolver config: {self.config_path}")
        else:
            data = {}

        data = deep_merge(data, self._env_overrides())
        config = AletheiaConfig.from_dict(data)
        if not config.providers:
            config.providers = ["env"]
        return config
