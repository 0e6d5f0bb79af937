"""Main secret resolver - owns the backend chain and its lifecycle."""

import re
import threading
from typing import Any, Iterable, Optional

# Import backends to trigger registration
from aletheia.secrets import (  # noqa: F401
    aws_backend,
    env_backend,
    file_backend,
    gcp_backend,
    vault_backend,
)
from aletheia.config.loader import AletheiaConfig
from aletheia.secrets.base import SecretBackend
from aletheia.secrets.cache import CachedSecretBackend
from aletheia.secrets.chain import SecretChain
from aletheia.secrets.context import ResolutionContext
from aletheia.secrets.env_backend import EnvSecretBackend
from aletheia.secrets.exceptions import AletheiaInitializationError, SecretBackendError
from aletheia.secrets.injection import SecretInjector
from aletheia.secrets.registry import get_backend
from aletheia.utils.logging import get_logger

logger = get_logger(__name__)

SECRET_PATTERN = re.compile(r"\$\{secret:([^}]+)\}")


class SecretResolver:
    """
    Resolves secrets through an ordered chain of cached backends.

    Create one resolver at startup and pass it to the code that needs
    secrets. ``reinitialize`` swaps in a new chain atomically; lookups
    already running finish against the chain they started with.

    Usage:
        resolver = SecretResolver(ConfigLoader().load())
        password = resolver.get_secret("DB_PASSWORD")
        resolver.inject(settings)
        resolver.shutdown()
    """

    def __init__(
        self,
        config: Optional[AletheiaConfig] = None,
        backends: Optional[Iterable[SecretBackend]] = None,
    ):
        """
        Args:
            config: Provider order, cache TTL and backend settings
            backends: Backend instances to use instead of config.providers
                (the TTL still comes from config)
        """
        self._lifecycle_lock = threading.RLock()
        self._chain = self._build_chain(config, backends)
        self._injector = SecretInjector(self.get_secret)
        logger.info(f"Initialized SecretResolver with backends: {self.provider_names}")

    # ------------------------------------------------------------
    # Chain construction
    # ------------------------------------------------------------

    def _build_chain(
        self,
        config: Optional[AletheiaConfig],
        backends: Optional[Iterable[SecretBackend]],
    ) -> SecretChain:
        config = config or AletheiaConfig()

        if backends is not None:
            instances = list(backends)
        else:
            instances = [
                self._create_backend(name.strip(), config)
                for name in config.providers
                if name and name.strip()
            ]

        if not instances:
            logger.info("No secret backends configured; using env")
            instances = [EnvSecretBackend(**config.backend_settings("env"))]

        ttl = config.cache_ttl_seconds
        return SecretChain(CachedSecretBackend(backend, ttl) for backend in instances)

    def _create_backend(self, name: str, config: AletheiaConfig) -> SecretBackend:
        """Create backend using registry."""
        try:
            backend_cls = get_backend(name)
        except KeyError:
            logger.warning(f"Unknown provider type '{name}'; defaulting to env")
            backend_cls = EnvSecretBackend

        settings = config.backend_settings(backend_cls.name)
        try:
            return backend_cls(**settings)
        except (TypeError, SecretBackendError) as e:
            raise AletheiaInitializationError(
                f"Backend '{backend_cls.name}' config error: {e}"
            ) from e

    # ------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------

    def resolve(self, key: str, context: Optional[ResolutionContext] = None) -> str:
        """
        Resolve a secret through the current chain.

        Raises:
            InvalidSecretKeyError, CircularSecretReferenceError,
            SecretProviderError, SecretNotFoundError
        """
        chain = self._acquire_chain()
        try:
            return chain.resolve(key, context)
        finally:
            chain.release()

    def get_secret(self, key: str) -> str:
        """Resolve a secret using the calling thread's context."""
        return self.resolve(key)

    def _acquire_chain(self) -> SecretChain:
        # reinitialize publishes the new chain before retiring the old one
        while True:
            chain = self._chain
            if chain.acquire():
                return chain

    def inject(self, target: Any) -> None:
        """Populate Secret-annotated attributes of ``target``."""
        self._injector.inject(target)

    def resolve_value(self, value: Any, context: Optional[ResolutionContext] = None) -> Any:
        """Resolve ${secret:KEY} patterns in a string."""
        if not isinstance(value, str):
            return value

        def replace_match(match):
            return self.resolve(match.group(1), context)

        return SECRET_PATTERN.sub(replace_match, value)

    def resolve_config(self, config: Any, context: Optional[ResolutionContext] = None) -> Any:
        """Recursively resolve all secrets in a config structure."""
        if isinstance(config, dict):
            return {k: self.resolve_config(v, context) for k, v in config.items()}
        elif isinstance(config, list):
            return [self.resolve_config(item, context) for item in config]
        elif isinstance(config, str):
            return self.resolve_value(config, context)
        else:
            return config

    # ------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------

    @property
    def providers(self) -> tuple[CachedSecretBackend, ...]:
        """Snapshot of the configured backends, in priority order."""
        return self._chain.backends

    @property
    def provider_names(self) -> list[str]:
        return [backend.name for backend in self._chain.backends]

    def health_check(self) -> dict[str, bool]:
        """Readiness of every backend, keyed by position and name."""
        status = {}
        for index, backend in enumerate(self._chain.backends):
            try:
                healthy = bool(backend.health_check())
            except Exception as e:
                logger.warning(f"Health check failed for {backend.name}: {e}")
                healthy = False
            status[f"{index}:{backend.name}"] = healthy
        return status

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    def reinitialize(
        self,
        config: Optional[AletheiaConfig] = None,
        backends: Optional[Iterable[SecretBackend]] = None,
    ) -> None:
        """
        Replace the chain and release the old one.

        Lookups already running on the old chain finish on it; its backends
        are closed when the last of them returns.

        Raises:
            AletheiaInitializationError: If the new chain cannot be built;
                the current chain stays in place
        """
        with self._lifecycle_lock:
            new_chain = self._build_chain(config, backends)
            old_chain, self._chain = self._chain, new_chain
            old_chain.clear_caches()
            old_chain.retire()
            logger.info(f"Reinitialized SecretResolver with backends: {self.provider_names}")

    def shutdown(self) -> None:
        """Release every backend once. Failures are logged and skipped."""
        with self._lifecycle_lock:
            if self._chain.closed:
                return
            self._chain.close()
            logger.info("SecretResolver shut down")

    def __enter__(self) -> "SecretResolver":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
