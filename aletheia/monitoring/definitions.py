"""Prometheus metric definitions."""

from prometheus_client import Counter, Histogram

# ============================================================
# CACHE METRICS
# ============================================================

CACHE_REQUESTS = Counter(
    "secret_cache_requests_total",
    "Cached backend lookups",
    ["backend", "result"],
)

# ============================================================
# RESOLUTION METRICS
# ============================================================

RESOLUTIONS = Counter(
    "secret_resolutions_total", "Secret resolutions by outcome", ["outcome"]
)

RESOLUTION_LATENCY = Histogram(
    "secret_resolution_seconds",
    "Time to resolve a secret through the chain",
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0],
)

# ============================================================
# BACKEND METRICS
# ============================================================

BACKEND_ERRORS = Counter(
    "secret_backend_errors_total",
    "Classified backend failures skipped by the chain",
    ["backend"],
)
