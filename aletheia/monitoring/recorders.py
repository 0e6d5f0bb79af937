"""Metrics recorder - stateless functions to record metrics."""

import time
from contextlib import contextmanager
from typing import Generator, Optional

from aletheia.monitoring.definitions import (
    BACKEND_ERRORS,
    CACHE_REQUESTS,
    RESOLUTION_LATENCY,
    RESOLUTIONS,
)


@contextmanager
def track_time() -> Generator[dict, None, None]:
    """
    Context manager to track execution time.

    Usage:
        with track_time() as t:
            do_work()
        print(t["duration"])  # seconds
    """
    result = {"duration": 0.0}
    start = time.perf_counter()
    try:
        yield result
    finally:
        result["duration"] = time.perf_counter() - start


class Metrics:
    """
    Stateless metrics recorder.

    Usage:
        from aletheia.monitoring import Metrics, track_time

        with track_time() as t:
            value = chain.resolve("DB_PASSWORD")
        Metrics.resolution("found", latency=t["duration"])
    """

    @staticmethod
    def cache_hit(backend: str) -> None:
        """Record a lookup served from cache."""
        CACHE_REQUESTS.labels(backend=backend, result="hit").inc()

    @staticmethod
    def cache_miss(backend: str) -> None:
        """Record a lookup that went to the backend."""
        CACHE_REQUESTS.labels(backend=backend, result="miss").inc()

    @staticmethod
    def backend_error(backend: str) -> None:
        """Record a classified backend failure."""
        BACKEND_ERRORS.labels(backend=backend).inc()

    @staticmethod
    def resolution(outcome: str, latency: Optional[float] = None) -> None:
        """Record the outcome of a chain resolution (found, not_found, error)."""
        RESOLUTIONS.labels(outcome=outcome).inc()
        if latency:
            RESOLUTION_LATENCY.observe(latency)
