"""Secrets management module."""

# Public API
from aletheia.secrets.base import SecretBackend
from aletheia.secrets.cache import CachedSecretBackend
from aletheia.secrets.chain import SecretChain
from aletheia.secrets.context import ResolutionContext
from aletheia.secrets.exceptions import (
    AletheiaError,
    AletheiaInitializationError,
    CircularSecretReferenceError,
    ErrorKind,
    InvalidSecretKeyError,
    NullTargetError,
    SecretBackendError,
    SecretInjectionError,
    SecretNotFoundError,
    SecretProviderError,
)
from aletheia.secrets.injection import Secret, SecretInjector, secret_fields
from aletheia.secrets.registry import available_backends, get_backend, register_backend
from aletheia.secrets.resolver import SecretResolver

__all__ = [
    "SecretResolver",
    "SecretChain",
    "SecretBackend",
    "CachedSecretBackend",
    "ResolutionContext",
    "Secret",
    "SecretInjector",
    "secret_fields",
    "ErrorKind",
    "AletheiaError",
    "AletheiaInitializationError",
    "CircularSecretReferenceError",
    "InvalidSecretKeyError",
    "NullTargetError",
    "SecretBackendError",
    "SecretInjectionError",
    "SecretNotFoundError",
    "SecretProviderError",
    "register_backend",
    "get_backend",
    "available_backends",
]
