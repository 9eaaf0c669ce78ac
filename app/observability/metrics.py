"""Prometheus-style metrics collector for the capture and submission pipeline. Thread-safe, in-memory."""

import threading
from typing import Any


class MetricsCollector:
    """
    In-memory registry of counters and latency histograms.
    Counters may carry one label (category, e.g. an error code or media kind).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, float] = {}
        # name -> {"name:category=<c>" -> value}
        self._counters_by_labels: dict[str, dict[str, float]] = {}
        self._histograms: dict[str, list[float]] = {}

    def increment(
        self,
        name: str,
        value: float = 1.0,
        *,
        category: str | None = None,
    ) -> None:
        """Increment a counter, optionally labelled by category."""
        with self._lock:
            if category is None:
                self._counters[name] = self._counters.get(name, 0) + value
                return
            key = f"{name}:category={category}"
            labelled = self._counters_by_labels.setdefault(name, {})
            labelled[key] = labelled.get(key, 0) + value

    def observe_latency(
        self,
        name: str,
        latency_ms: float,
        *,
        stage: str | None = None,
    ) -> None:
        """Record a latency observation. Optional stage label (upload, persist, ...)."""
        with self._lock:
            bucket = name if stage is None else f"{name}:stage={stage}"
            self._histograms.setdefault(bucket, []).append(latency_ms)

    def counter(self, name: str, category: str | None = None) -> float:
        with self._lock:
            if category is None:
                return self._counters.get(name, 0)
            return self._counters_by_labels.get(name, {}).get(f"{name}:category={category}", 0)

    def export_metrics(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": dict(self._counters),
                "counters_by_labels": {
                    k: dict(v) for k, v in self._counters_by_labels.items()
                },
                "histograms": {
                    k: {"count": len(v), "sum": sum(v), "values": list(v)}
                    for k, v in self._histograms.items()
                },
            }

    def reset(self) -> None:
        """Reset all metrics (for tests)."""
        with self._lock:
            self._counters.clear()
            self._counters_by_labels.clear()
            self._histograms.clear()
