"""HashiCorp Vault secret backend."""

import os
from typing import Optional

import hvac
import requests
from hvac.exceptions import InvalidPath, VaultError

from aletheia.secrets.base import SecretBackend
from aletheia.secrets.exceptions import SecretBackendError
from aletheia.secrets.registry import register_backend
from aletheia.utils.logging import get_logger

logger = get_logger(__name__)


@register_backend("vault")
class VaultSecretBackend(SecretBackend):
    """
    Reads secrets from Vault through hvac.

    The key is the path read under /v1/, e.g. ``secret/data/db`` for a
    KV v2 mount or ``secret/db`` for KV v1. The payload's ``key`` field is
    returned, or its only field when it has exactly one.

    Without both url and token the backend is inactive and has no secrets.

    Usage:
        backend = VaultSecretBackend(url="http://vault:8200", token="s.xxx")
        backend.get_secret("secret/data/db")
    """

    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 5.0,
        verify: bool = True,
        client: Optional[hvac.Client] = None,
    ):
        """
        Args:
            url: Vault address (default: $VAULT_ADDR)
            token: Vault token (default: $VAULT_TOKEN)
            timeout: Request timeout in seconds
            verify: Verify TLS certificates
            client: Preconfigured hvac client
        """
        self.url = (url or os.environ.get("VAULT_ADDR") or "").rstrip("/")
        token = token or os.environ.get("VAULT_TOKEN") or ""
        self.active = bool(self.url and token)

        if not self.active:
            logger.warning("VaultSecretBackend inactive - missing VAULT_ADDR or VAULT_TOKEN")
            self._client = client
        else:
            self._client = client or hvac.Client(
                url=self.url, token=token, timeout=timeout, verify=verify
            )

    def get_secret(self, key: str) -> Optional[str]:
        """
        Read ``key`` from Vault.

        Returns:
            Secret value, or None if inactive or the path doesn't exist

        Raises:
            SecretBackendError: If Vault is unreachable, refuses the request,
                or returns an unreadable payload
        """
        if not self.active:
            return None

        try:
            payload = self._client.read(key.lstrip("/"))
        except InvalidPath:
            return None
        except VaultError as e:
            raise SecretBackendError(f"Vault refused '{key}': {type(e).__name__}: {e}")
        except requests.exceptions.RequestException as e:
            raise SecretBackendError(f"Vault unreachable at {self.url}: {e}")

        if payload is None:
            return None
        if not isinstance(payload, dict):
            raise SecretBackendError(f"Unexpected Vault payload for '{key}'")

        return self._extract(payload, key)

    @staticmethod
    def _extract(payload: dict, key: str) -> Optional[str]:
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise SecretBackendError(f"Unexpected Vault payload for '{key}'")
        # KV v2 nests the secret one level deeper
        if isinstance(data.get("data"), dict):
            data = data["data"]

        if key in data:
            value = data[key]
        elif len(data) == 1:
            value = next(iter(data.values()))
        else:
            return None

        return None if value is None else str(value)

    def health_check(self) -> bool:
        """Check that Vault answers and is initialized."""
        if not self.active:
            return False
        try:
            return bool(self._client.sys.is_initialized())
        except (VaultError, requests.exceptions.RequestException) as e:
            logger.debug(f"Vault health check failed: {e}")
            return False

    def close(self) -> None:
        if self._client is not None:
            self._client.adapter.close()
            logger.info("Closed VaultSecretBackend client session")
