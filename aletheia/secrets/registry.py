"""Backend registry with decorator pattern."""

BACKENDS = {}


def register_backend(name: str):
    """
    Decorator to register a backend class.

    Names are case-insensitive; the registered class gets a ``name``
    attribute so backends can be identified in logs and metrics.

    Usage:
        @register_backend("env")
        class EnvSecretBackend(SecretBackend):
            ...
    """

    def decorator(cls):
        key = name.strip().lower()
        cls.name = key
        BACKENDS[key] = cls
        return cls

    return decorator


def get_backend(name: str):
    """
    Get backend class by name.

    Args:
        name: Backend identifier (env, file, vault, aws, gcp)

    Returns:
        Backend class (not instance)

    Raises:
        KeyError: If backend not registered
    """
    key = name.strip().lower()
    if key not in BACKENDS:
        available = ", ".join(sorted(BACKENDS)) or "none"
        raise KeyError(f"Unknown backend: '{name}'. Available: {available}")
    return BACKENDS[key]


def available_backends() -> list[str]:
    """Names of all registered backends, sorted."""
    return sorted(BACKENDS)
