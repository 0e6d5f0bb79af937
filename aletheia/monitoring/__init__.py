"""Monitoring module - Prometheus metrics for secret resolution."""

from aletheia.monitoring.recorders import Metrics, track_time

__all__ = [
    "Metrics",
    "track_time",
]
