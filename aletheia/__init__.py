"""Aletheia - secret resolution and injection for Python applications."""

from aletheia.secrets import (
    AletheiaError,
    Secret,
    SecretNotFoundError,
    SecretResolver,
)

__version__ = "1.0.0"

__all__ = [
    "AletheiaError",
    "Secret",
    "SecretNotFoundError",
    "SecretResolver",
    "__version__",
]
