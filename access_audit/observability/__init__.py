"""Observability layer: in-process metrics. No external SaaS."""

from access_audit.observability.metrics import MetricsCollector

__all__ = [
    "MetricsCollector",
]
