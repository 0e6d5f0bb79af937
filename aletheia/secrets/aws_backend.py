"""AWS Secrets Manager secret backend."""

import os
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from aletheia.secrets.base import SecretBackend
from aletheia.secrets.exceptions import SecretBackendError
from aletheia.secrets.registry import register_backend
from aletheia.utils.logging import get_logger

logger = get_logger(__name__)


@register_backend("aws")
class AwsSecretBackend(SecretBackend):
    """
    Reads secrets from AWS Secrets Manager.

    The key is the secret id (name or ARN); SecretString is returned as-is.
    Credentials come from the explicit keys, then the named profile, then
    boto3's default chain. Without a region the backend is inactive.
    """

    def __init__(
        self,
        region: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        profile_name: Optional[str] = None,
        client: Any = None,
    ):
        """
        Args:
            region: AWS region (default: $AWS_REGION or $AWS_DEFAULT_REGION)
            access_key_id: Static access key
            secret_access_key: Static secret key
            profile_name: Named profile from ~/.aws
            client: Preconfigured secretsmanager client
        """
        self.region = region or os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION")
        self._client = client

        if self._client is None and self.region:
            try:
                session = boto3.Session(
                    aws_access_key_id=access_key_id,
                    aws_secret_access_key=secret_access_key,
                    profile_name=profile_name,
                )
                self._client = session.client("secretsmanager", region_name=self.region)
            except BotoCoreError as e:
                logger.warning(f"AwsSecretBackend initialization failed: {e}")
        elif self._client is None:
            logger.warning("AwsSecretBackend inactive - missing region configuration")

        self.active = self._client is not None
        if self.active:
            logger.debug(f"AwsSecretBackend active in region: {self.region}")

    def get_secret(self, key: str) -> Optional[str]:
        """
        Fetch the current version of secret ``key``.

        Returns:
            SecretString, or None if inactive, missing, or binary-only

        Raises:
            SecretBackendError: On AWS service or client errors
        """
        if not self.active:
            return None

        try:
            response = self._client.get_secret_value(SecretId=key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code == "ResourceNotFoundException":
                return None
            raise SecretBackendError(f"AWS error retrieving '{key}': {code}")
        except BotoCoreError as e:
            raise SecretBackendError(f"AWS client error retrieving '{key}': {e}")

        return response.get("SecretString")

    def health_check(self) -> bool:
        return self.active

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.info("Closed AWS SecretsManager client")
