"""TTL cache decorator applied to every secret backend."""

import threading
import time
from typing import Callable, NamedTuple, Optional

from aletheia.monitoring import Metrics
from aletheia.secrets.base import SecretBackend
from aletheia.utils.logging import get_logger

logger = get_logger(__name__)


class CacheEntry(NamedTuple):
    value: str
    expires_at: float


class CachedSecretBackend(SecretBackend):
    """
    Wraps one backend with a per-key TTL cache.

    Entries are never evicted proactively; an expired entry is simply
    ignored and replaced by the next successful fetch. Only non-empty
    values are cached, and backend errors are never cached.

    Usage:
        cached = CachedSecretBackend(EnvSecretBackend(), ttl_seconds=300)
        cached.get_secret("DB_PASSWORD")  # hits os.environ
        cached.get_secret("DB_PASSWORD")  # served from cache
    """

    def __init__(
        self,
        delegate: SecretBackend,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            delegate: Backend to cache
            ttl_seconds: Lifetime of a cached value; <= 0 disables caching
            clock: Monotonic time source in seconds
        """
        self.delegate = delegate
        self.ttl_seconds = ttl_seconds
        self.name = delegate.name
        self._clock = clock
        self._cache: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get_secret(self, key: str) -> Optional[str]:
        """
        Return the cached value or fetch it from the delegate.

        Raises:
            Whatever the delegate raises, unmodified
        """
        now = self._clock()

        if self.enabled:
            with self._lock:
                entry = self._cache.get(key)
            if entry is not None and entry.expires_at > now:
                Metrics.cache_hit(self.name)
                return entry.value

        Metrics.cache_miss(self.name)
        value = self.delegate.get_secret(key)

        if value and self.enabled:
            with self._lock:
                self._cache[key] = CacheEntry(value, now + self.ttl_seconds)

        return value

    def invalidate(self, key: str) -> None:
        """Drop a single cached key."""
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        """Drop every cached value."""
        with self._lock:
            self._cache.clear()

    def health_check(self) -> bool:
        return self.delegate.health_check()

    def close(self) -> None:
        self.clear()
        self.delegate.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __repr__(self) -> str:
        return f"CachedSecretBackend({self.delegate!r}, ttl_seconds={self.ttl_seconds})"
