"""Custom exceptions for secret management."""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification carried by every Aletheia exception."""

    INVALID_KEY = "invalid_key"
    CIRCULAR_REFERENCE = "circular_reference"
    SOURCE_FAILURE = "source_failure"
    NOT_FOUND = "not_found"
    INJECTION_FAILURE = "injection_failure"
    NULL_TARGET = "null_target"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    INITIALIZATION = "initialization"


class AletheiaError(Exception):
    """Base exception for all secret resolution errors."""

    kind: ErrorKind = ErrorKind.SOURCE_FAILURE


class InvalidSecretKeyError(AletheiaError):
    """Raised when a secret key is None, empty or blank."""

    kind = ErrorKind.INVALID_KEY


class CircularSecretReferenceError(AletheiaError):
    """Raised when a key is requested while it is already being resolved."""

    kind = ErrorKind.CIRCULAR_REFERENCE

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Circular reference detected for key: {key}")


class SecretNotFoundError(AletheiaError):
    """Raised when no backend in the chain has the secret."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Missing required secret: {key}")


class SecretProviderError(AletheiaError):
    """
    Raised when a backend fails in an unexpected way.

    Unlike SecretBackendError, this aborts the whole chain. The original
    exception is available as __cause__.
    """

    kind = ErrorKind.SOURCE_FAILURE

    def __init__(self, backend_name: str):
        self.backend_name = backend_name
        super().__init__(f"Provider failure: {backend_name}")


class SecretInjectionError(AletheiaError):
    """Raised when a resolved secret cannot be written to a target attribute."""

    kind = ErrorKind.INJECTION_FAILURE

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Failed to inject secret into field '{field_name}'")


class NullTargetError(AletheiaError):
    """Raised when injection is requested for a None target."""

    kind = ErrorKind.NULL_TARGET


class SecretBackendError(AletheiaError):
    """
    Raised when there's an issue with the secret backend itself.

    Network outages, denied permissions and unreadable files belong here.
    The chain logs these and moves on to the next backend.
    """

    kind = ErrorKind.BACKEND_UNAVAILABLE


class AletheiaInitializationError(AletheiaError):
    """Raised when the backend chain cannot be built from configuration."""

    kind = ErrorKind.INITIALIZATION
