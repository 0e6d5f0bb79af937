"""Environment variable secret backend."""

import os
from typing import Optional

from aletheia.secrets.base import SecretBackend
from aletheia.secrets.registry import register_backend
from aletheia.utils.logging import get_logger

logger = get_logger(__name__)


@register_backend("env")
class EnvSecretBackend(SecretBackend):
    """
    Reads secrets from environment variables.

    Uses exact key match - no conversion. An empty variable counts as unset.

    Examples:
        DB_PASSWORD -> env var DB_PASSWORD
        DB_PASSWORD with prefix 'APP_' -> env var APP_DB_PASSWORD
    """

    def __init__(self, prefix: str = ""):
        """
        Args:
            prefix: Optional prefix for env vars (e.g., 'APP_' -> APP_DB_PASSWORD)
        """
        self.prefix = prefix

    def get_secret(self, key: str) -> Optional[str]:
        """
        Get secret from environment variable.

        Args:
            key: Secret key (exact match to env var name)

        Returns:
            Secret value, or None if the variable is unset or empty
        """
        env_key = f"{self.prefix}{key}"
        value = os.environ.get(env_key)

        if not value:
            return None

        logger.debug(f"Resolved secret '{key}' from env var '{env_key}'")
        return value

    def health_check(self) -> bool:
        """Environment backend is always available."""
        return True
