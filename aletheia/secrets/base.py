"""Abstract base class for secret backends."""

from abc import ABC, abstractmethod
from typing import Optional


class SecretBackend(ABC):
    """
    Abstract base class that all secret backends must implement.

    This ensures consistent interface across:
    - Environment variables
    - File-based secrets
    - HashiCorp Vault
    - AWS Secrets Manager
    - GCP Secret Manager
    """

    #: Registry identifier, set by @register_backend
    name: str = "backend"

    @abstractmethod
    def get_secret(self, key: str) -> Optional[str]:
        """
        Retrieve a secret by key.

        Args:
            key: The secret key name

        Returns:
            The secret value as string, or None if this backend
            doesn't have it

        Raises:
            SecretBackendError: If backend fails (unreachable, denied, ...)
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """
        Check if backend is accessible.

        Returns:
            True if healthy, False otherwise
        """
        pass

    def close(self) -> None:
        """Release clients and connections. No-op by default."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
