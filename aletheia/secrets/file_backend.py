"""File-based secret backend."""

import json
import os
import threading
from pathlib import Path
from typing import Optional

from aletheia.secrets.base import SecretBackend
from aletheia.secrets.exceptions import SecretBackendError
from aletheia.secrets.registry import register_backend
from aletheia.utils.logging import get_logger

logger = get_logger(__name__)

PATH_ENV_VAR = "ALETHEIA_FILE_PATH"


@register_backend("file")
class FileSecretBackend(SecretBackend):
    """
    Reads secrets from a JSON file.

    File format:
        {
            "DB_PASSWORD": "secret123",
            "KAFKA_HOST": "localhost:9092"
        }

    The file is read on first lookup and kept in memory until close().
    A backend without a path, or whose file doesn't exist, has no secrets.
    """

    def __init__(self, path: Optional[str] = None):
        """
        Args:
            path: Path to JSON secrets file (default: $ALETHEIA_FILE_PATH)
        """
        path = path or os.environ.get(PATH_ENV_VAR)
        self.file_path = Path(path) if path else None
        self._secrets: Optional[dict] = None
        self._lock = threading.Lock()

    def _load_secrets(self) -> Optional[dict]:
        """Load secrets from file, or None if there is no file yet."""
        if self.file_path is None:
            return None

        if not self.file_path.exists():
            logger.debug(f"Secret file not found: {self.file_path}")
            return None

        try:
            with open(self.file_path) as f:
                secrets = json.load(f)
        except json.JSONDecodeError as e:
            raise SecretBackendError(f"Invalid JSON in {self.file_path}: {e}")
        except OSError as e:
            raise SecretBackendError(f"Cannot read {self.file_path}: {e}")

        if not isinstance(secrets, dict):
            raise SecretBackendError(f"Expected a JSON object in {self.file_path}")

        logger.info(f"Loaded {len(secrets)} secrets from {self.file_path}")
        return secrets

    def get_secret(self, key: str) -> Optional[str]:
        """
        Get secret from loaded file.

        Args:
            key: Secret key (exact match)

        Returns:
            Secret value, or None if key not in file

        Raises:
            SecretBackendError: If the file is unreadable or not a JSON object
        """
        with self._lock:
            if self._secrets is None:
                self._secrets = self._load_secrets()
            secrets = self._secrets

        if secrets is None:
            return None

        value = secrets.get(key)
        if value is None:
            return None

        return str(value)

    def health_check(self) -> bool:
        """Check if file exists and is readable."""
        return self.file_path is not None and self.file_path.is_file()

    def close(self) -> None:
        """Forget loaded secrets; the next lookup rereads the file."""
        with self._lock:
            self._secrets = None
