"""GCP Secret Manager secret backend."""

import os
from typing import Any, Optional

from google.api_core import exceptions as gcp_exceptions
from google.auth.exceptions import DefaultCredentialsError
from google.cloud import secretmanager

from aletheia.secrets.base import SecretBackend
from aletheia.secrets.exceptions import SecretBackendError
from aletheia.secrets.registry import register_backend
from aletheia.utils.logging import get_logger

logger = get_logger(__name__)


@register_backend("gcp")
class GcpSecretBackend(SecretBackend):
    """
    Reads secrets from Google Cloud Secret Manager.

    The key is the secret id inside the configured project. Without a
    project id or application default credentials the backend is inactive.
    """

    def __init__(
        self,
        project_id: Optional[str] = None,
        version: str = "latest",
        client: Any = None,
    ):
        """
        Args:
            project_id: GCP project (default: $GOOGLE_CLOUD_PROJECT or $GCP_PROJECT_ID)
            version: Secret version to read
            client: Preconfigured SecretManagerServiceClient
        """
        self.project_id = (
            project_id
            or os.environ.get("GOOGLE_CLOUD_PROJECT")
            or os.environ.get("GCP_PROJECT_ID")
        )
        self.version = version
        self._client = client

        if self._client is None and self.project_id:
            try:
                self._client = secretmanager.SecretManagerServiceClient()
            except DefaultCredentialsError as e:
                logger.warning(f"GcpSecretBackend initialization failed: {e}")

        self.active = self.project_id is not None and self._client is not None
        if not self.active:
            logger.warning(
                f"GcpSecretBackend inactive: project_id={self.project_id}, "
                f"client={'ok' if self._client else 'missing'}"
            )

    def _version_name(self, key: str) -> str:
        return f"projects/{self.project_id}/secrets/{key}/versions/{self.version}"

    def get_secret(self, key: str) -> Optional[str]:
        """
        Access secret ``key`` at the configured version.

        Returns:
            Decoded payload, or None if inactive or the secret doesn't exist

        Raises:
            SecretBackendError: On API errors (permission denied, unavailable, ...)
                or a payload that is not UTF-8 text
        """
        if not self.active:
            return None

        try:
            response = self._client.access_secret_version(name=self._version_name(key))
        except gcp_exceptions.NotFound:
            return None
        except (gcp_exceptions.GoogleAPICallError, gcp_exceptions.RetryError) as e:
            raise SecretBackendError(f"GCP error retrieving '{key}': {e}")

        if response is None or not response.payload.data:
            return None
        try:
            return response.payload.data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SecretBackendError(f"GCP secret '{key}' is not valid UTF-8: {e}")

    def health_check(self) -> bool:
        return self.active

    def close(self) -> None:
        if self._client is not None:
            self._client.transport.close()
            logger.info("Closed GCP SecretManager client")
