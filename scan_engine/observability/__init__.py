"""Observability layer: in-process metrics. No external SaaS."""

from scan_engine.observability.metrics import MetricsCollector

__all__ = [
    "MetricsCollector",
]
