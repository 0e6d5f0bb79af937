"""Ordered backend chain with fallback and circular-reference protection."""

import threading
from typing import Iterable, Optional

from aletheia.monitoring import Metrics, track_time
from aletheia.secrets.cache import CachedSecretBackend
from aletheia.secrets.context import ResolutionContext
from aletheia.secrets.exceptions import (
    InvalidSecretKeyError,
    SecretBackendError,
    SecretNotFoundError,
    SecretProviderError,
)
from aletheia.utils.logging import get_logger

logger = get_logger(__name__)


class SecretChain:
    """
    Resolves a key against cached backends in priority order.

    The first backend returning a non-empty value wins. Backends that
    don't have the key, or fail with SecretBackendError, are skipped.
    Any other exception aborts the lookup as SecretProviderError.

    The backend tuple is never mutated; SecretResolver swaps whole
    chains on reinitialization. Callers hold a lease (acquire/release)
    while resolving so a replaced chain is only closed once the lookups
    running on it have finished.

    Usage:
        chain = SecretChain([CachedSecretBackend(EnvSecretBackend(), 3600)])
        password = chain.resolve("DB_PASSWORD")
    """

    def __init__(self, backends: Iterable[CachedSecretBackend]):
        self._backends = tuple(backends)
        if not self._backends:
            raise ValueError("SecretChain requires at least one backend")

        self._lease_lock = threading.Lock()
        self._leases = 0
        self._retired = False
        self._close_pending = False
        self._closed = False

    @property
    def backends(self) -> tuple[CachedSecretBackend, ...]:
        return self._backends

    def resolve(self, key: str, context: Optional[ResolutionContext] = None) -> str:
        """
        Resolve ``key`` through the chain.

        Args:
            key: Secret key, must not be blank
            context: In-flight keys of the caller; defaults to the
                current thread's context

        Returns:
            The first non-empty value found

        Raises:
            InvalidSecretKeyError: If key is None or blank
            CircularSecretReferenceError: If key is already being resolved
            SecretProviderError: If a backend fails unexpectedly
            SecretNotFoundError: If no backend has the key
        """
        if not isinstance(key, str) or not key.strip():
            raise InvalidSecretKeyError("Secret key cannot be None or blank")

        if context is None:
            context = ResolutionContext.current()

        outcome = "error"
        timer = {}
        try:
            with track_time() as timer:
                with context.enter(key):
                    value = self._first_match(key)
            outcome = "found"
            return value
        except SecretNotFoundError:
            outcome = "not_found"
            raise
        finally:
            Metrics.resolution(outcome, latency=timer.get("duration"))

    def _first_match(self, key: str) -> str:
        for backend in self._backends:
            try:
                value = backend.get_secret(key)
            except SecretBackendError as e:
                Metrics.backend_error(backend.name)
                logger.debug(f"{backend.name} error for '{key}': {e}")
                continue
            except Exception as e:
                raise SecretProviderError(backend.name) from e

            if value:
                logger.debug(f"Resolved secret '{key}' from {backend.name}")
                return value

            logger.debug(f"Secret '{key}' not in {backend.name}")

        raise SecretNotFoundError(key)

    def clear_caches(self) -> None:
        """Drop cached values in every backend."""
        for backend in self._backends:
            backend.clear()

    # ------------------------------------------------------------
    # Leases and release
    # ------------------------------------------------------------

    def acquire(self) -> bool:
        """
        Take a lease for one lookup.

        Returns:
            False if the chain has been retired; the caller should use
            the chain that replaced it
        """
        with self._lease_lock:
            if self._retired:
                return False
            self._leases += 1
            return True

    def release(self) -> None:
        """Return a lease taken with acquire()."""
        with self._lease_lock:
            self._leases -= 1
            close_now = self._claim_close()
        if close_now:
            self._close_backends()

    def retire(self) -> None:
        """Refuse new leases and close the backends once current ones end."""
        with self._lease_lock:
            self._retired = True
        self.close()

    def close(self) -> None:
        """
        Close every backend exactly once.

        While leases are out the close is deferred to the last release().
        Calling it again is a no-op.
        """
        with self._lease_lock:
            self._close_pending = True
            close_now = self._claim_close()
        if close_now:
            self._close_backends()

    @property
    def closed(self) -> bool:
        return self._closed

    def _claim_close(self) -> bool:
        # caller holds _lease_lock
        if self._close_pending and not self._closed and self._leases == 0:
            self._closed = True
            return True
        return False

    def _close_backends(self) -> None:
        for backend in self._backends:
            try:
                backend.close()
            except Exception as e:
                logger.warning(f"Failed to close backend {backend.name}: {e}")

    def __len__(self) -> int:
        return len(self._backends)

    def __repr__(self) -> str:
        names = ", ".join(backend.name for backend in self._backends)
        return f"SecretChain([{names}])"
