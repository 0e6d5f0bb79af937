"""Shared fixtures for unit tests."""

import pytest

from aletheia.secrets.base import SecretBackend


class FakeBackend(SecretBackend):
    """In-memory backend that records every lookup."""

    def __init__(self, secrets=None, error=None, name="fake", healthy=True):
        self.secrets = dict(secrets or {})
        self.error = error
        self.name = name
        self.healthy = healthy
        self.calls = []
        self.close_calls = 0

    def get_secret(self, key):
        self.calls.append(key)
        if self.error is not None:
            raise self.error
        return self.secrets.get(key)

    def health_check(self):
        return self.healthy

    def close(self):
        self.close_calls += 1


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def make_backend():
    """Factory for FakeBackend instances."""
    return FakeBackend


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def clean_secret_env(monkeypatch):
    """Keep resolver settings from the developer's shell out of tests."""
    for var in (
        "ALETHEIA_CONFIG",
        "ALETHEIA_PROVIDERS",
        "ALETHEIA_CACHE_TTL_SECONDS",
        "ALETHEIA_FILE_PATH",
        "VAULT_ADDR",
        "VAULT_TOKEN",
        "AWS_REGION",
        "AWS_DEFAULT_REGION",
        "GOOGLE_CLOUD_PROJECT",
        "GCP_PROJECT_ID",
    ):
        monkeypatch.delenv(var, raising=False)
