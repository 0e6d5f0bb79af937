"""Tests for environment variable secret backend."""

from aletheia.secrets.env_backend import EnvSecretBackend


class TestEnvSecretBackend:
    """Tests for EnvSecretBackend."""

    def test_get_secret_success(self, monkeypatch):
        """Should return value when env var exists."""
        # Arrange
        monkeypatch.setenv("TEST_SECRET", "my_secret_value")
        backend = EnvSecretBackend()

        # Act
        result = backend.get_secret("TEST_SECRET")

        # Assert
        assert result == "my_secret_value"

    def test_get_secret_with_prefix(self, monkeypatch):
        """Should prepend prefix to key."""
        # Arrange
        monkeypatch.setenv("APP_DB_PASSWORD", "secret123")
        backend = EnvSecretBackend(prefix="APP_")

        # Act
        result = backend.get_secret("DB_PASSWORD")

        # Assert
        assert result == "secret123"

    def test_get_secret_not_found(self, monkeypatch):
        """Should return None when env var missing."""
        # Arrange
        monkeypatch.delenv("NONEXISTENT_SECRET", raising=False)
        backend = EnvSecretBackend()

        # Act & Assert
        assert backend.get_secret("NONEXISTENT_SECRET") is None

    def test_empty_variable_counts_as_missing(self, monkeypatch):
        """An empty env var should be treated as unset."""
        # Arrange
        monkeypatch.setenv("EMPTY_SECRET", "")
        backend = EnvSecretBackend()

        # Act & Assert
        assert backend.get_secret("EMPTY_SECRET") is None

    def test_health_check_always_true(self):
        """Health check should always return True for env backend."""
        assert EnvSecretBackend().health_check() is True

    def test_registered_name(self):
        """The backend is registered as 'env'."""
        assert EnvSecretBackend.name == "env"
