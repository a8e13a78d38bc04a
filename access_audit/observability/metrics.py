"""In-process counters and latency histograms for the audit pipeline. Thread-safe."""

import threading
from typing import Any


class MetricsCollector:
    """
    Prometheus-style registry kept in memory. Counters may carry an org label;
    histograms may carry a route label. Exposed as a dict by GET /metrics.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, float] = {}
        self._counters_by_org: dict[str, dict[str, float]] = {}
        self._histograms: dict[str, list[float]] = {}

    def increment(
        self,
        name: str,
        value: float = 1.0,
        *,
        org_id: str | None = None,
    ) -> None:
        """Increment a counter. The unlabelled total is always updated; org_id adds a labelled series."""
        with self._lock:
            self._counters[name] = self._counters.get(name, 0) + value
            if org_id is not None:
                series = self._counters_by_org.setdefault(name, {})
                key = f"{name}:org={org_id}"
                series[key] = series.get(key, 0) + value

    def observe_latency(
        self,
        name: str,
        latency_ms: float,
        *,
        route: str | None = None,
    ) -> None:
        with self._lock:
            bucket = name if route is None else f"{name}:route={route}"
            self._histograms.setdefault(bucket, []).append(latency_ms)

    def counter(self, name: str) -> float:
        with self._lock:
            return self._counters.get(name, 0)

    def export_metrics(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": dict(self._counters),
                "counters_by_org": {k: dict(v) for k, v in self._counters_by_org.items()},
                "histograms": {
                    k: {
                        "count": len(v),
                        "sum": sum(v),
                        "max": max(v) if v else 0.0,
                    }
                    for k, v in self._histograms.items()
                },
            }

    def reset(self) -> None:
        """Reset all metrics (for tests)."""
        with self._lock:
            self._counters.clear()
            self._counters_by_org.clear()
            self._histograms.clear()


# Process-wide collector used by the API wiring.
metrics = MetricsCollector()
