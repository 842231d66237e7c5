"""Prometheus-style metrics collector. Thread-safe, in-memory. No real Prometheus dependency."""

import threading
from typing import Any

# Counter names used by the scan processor and fleet service
SCANS_SUBMITTED = "scans_submitted"
SCANS_DROPPED = "scans_dropped"
SCANS_NOT_FOUND = "scans_not_found"
SCANS_DIVERTED = "scans_diverted"
SCANS_IGNORED = "scans_ignored"
MUTATIONS_APPLIED = "mutations_applied"
STORE_FAILURES = "store_failures"
AUDIT_FAILURES = "audit_failures"
SCAN_LATENCY = "scan_latency_ms"


class MetricsCollector:
    """
    In-memory Prometheus-style registry. Tracks counters and histograms.
    Thread-safe. Exposes increment, observe_latency, export_metrics.
    A disabled collector drops every observation.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._lock = threading.Lock()
        # Counters: name -> value or name -> {labels_key -> value}
        self._counters: dict[str, float] = {}
        self._counters_by_labels: dict[str, dict[str, float]] = {}
        # Histograms: name -> list of observed values (for latency)
        self._histograms: dict[str, list[float]] = {}

    def increment(
        self,
        name: str,
        value: float = 1.0,
        *,
        field: str | None = None,
        mode: str | None = None,
    ) -> None:
        """Increment a counter. Optional field or mode label for dimensional metrics."""
        if not self.enabled:
            return
        with self._lock:
            if field is not None or mode is not None:
                parts = []
                if field is not None:
                    parts.append(f"field={field}")
                if mode is not None:
                    parts.append(f"mode={mode}")
                key = f"{name}:{','.join(parts)}"
                labelled = self._counters_by_labels.setdefault(name, {})
                labelled[key] = labelled.get(key, 0) + value
            self._counters[name] = self._counters.get(name, 0) + value

    def observe_latency(self, name: str, latency_ms: float) -> None:
        """Record a latency observation (histogram-style)."""
        if not self.enabled:
            return
        with self._lock:
            self._histograms.setdefault(name, []).append(latency_ms)

    def get_counter(self, name: str) -> float:
        with self._lock:
            return self._counters.get(name, 0)

    def export_metrics(self) -> dict[str, Any]:
        """Export all metrics as a dict (simulated Prometheus-style)."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "counters_by_labels": {
                    k: dict(v) for k, v in self._counters_by_labels.items()
                },
                "histograms": {
                    k: {
                        "count": len(v),
                        "sum": sum(v),
                        "values": list(v),
                    }
                    for k, v in self._histograms.items()
                },
            }

    def reset(self) -> None:
        """Reset all metrics (for tests)."""
        with self._lock:
            self._counters.clear()
            self._counters_by_labels.clear()
            self._histograms.clear()
