"""
Metrics collection for the switchboard.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Any, Iterator


class Counter:
    """Counter metric (monotonically increasing).

    Example:
        remote_calls = Counter("remote_calls_total", "Remote requests issued")
        remote_calls.inc(operation="tts")
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        labels: list[str] | None = None,
    ):
        self.name = name
        self.description = description
        self._labels = labels or []
        self._values: dict[tuple, float] = {}
        self._lock = threading.Lock()

    def inc(self, value: float = 1, **labels: str) -> None:
        """Increment the counter.

        Args:
            value: Amount to increment by.
            **labels: Label values.
        """
        key = tuple(sorted(labels.items()))
        with self._lock:
            self._values[key] = self._values.get(key, 0) + value

    def get(self, **labels: str) -> float:
        """Value for one label combination."""
        key = tuple(sorted(labels.items()))
        return self._values.get(key, 0)

    def total(self) -> float:
        """Sum over every label combination."""
        with self._lock:
            return sum(self._values.values())

    def values(self) -> Iterator[tuple[dict[str, str], float]]:
        """Iterate over all values with labels."""
        with self._lock:
            items = list(self._values.items())
        for key, value in items:
            yield dict(key), value


class Histogram:
    """Histogram metric for measuring distributions.

    Example:
        latency = Histogram("synthesis_latency_ms", buckets=[10, 100, 1000])
        latency.observe(145.2, path="remote")
    """

    DEFAULT_BUCKETS = [10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000]

    def __init__(
        self,
        name: str,
        description: str = "",
        buckets: list[float] | None = None,
        labels: list[str] | None = None,
    ):
        self.name = name
        self.description = description
        self._buckets = sorted(buckets or self.DEFAULT_BUCKETS)
        self._labels = labels or []

        self._counts: dict[tuple, list[int]] = {}
        self._sums: dict[tuple, float] = {}
        self._totals: dict[tuple, int] = {}
        self._samples: dict[tuple, deque] = {}

        self._lock = threading.Lock()

    def observe(self, value: float, **labels: str) -> None:
        key = tuple(sorted(labels.items()))

        with self._lock:
            if key not in self._counts:
                self._counts[key] = [0] * len(self._buckets)
                self._sums[key] = 0
                self._totals[key] = 0
                self._samples[key] = deque(maxlen=1000)

            for i, bucket in enumerate(self._buckets):
                if value <= bucket:
                    self._counts[key][i] += 1

            self._sums[key] += value
            self._totals[key] += 1
            self._samples[key].append(value)

    def get_stats(self, **labels: str) -> dict[str, float]:
        """Count, sum, mean and p50/p95/p99 for one label combination."""
        key = tuple(sorted(labels.items()))

        with self._lock:
            if self._totals.get(key, 0) == 0:
                return {"count": 0, "sum": 0, "mean": 0, "p50": 0, "p95": 0, "p99": 0}

            sorted_samples = sorted(self._samples[key])
            n = len(sorted_samples)

            return {
                "count": self._totals[key],
                "sum": self._sums[key],
                "mean": self._sums[key] / self._totals[key],
                "p50": sorted_samples[int(n * 0.5)],
                "p95": sorted_samples[min(n - 1, int(n * 0.95))],
                "p99": sorted_samples[min(n - 1, int(n * 0.99))],
            }

    def label_sets(self) -> list[dict[str, str]]:
        with self._lock:
            return [dict(key) for key in self._counts]


class MetricsCollector:
    """Routing metrics for one switchboard instance.

    Example:
        metrics = MetricsCollector()
        metrics.record_remote_call("tts", engine="azure")
        metrics.snapshot()["remote_calls"]
    """

    def __init__(self):
        self.remote_calls = Counter(
            "tts_switchboard_remote_calls_total",
            "Requests sent to the remote endpoint",
            labels=["operation", "engine"],
        )
        self.in_process_calls = Counter(
            "tts_switchboard_in_process_calls_total",
            "Requests served by an in-process adapter",
            labels=["operation", "engine"],
        )
        self.fallbacks = Counter(
            "tts_switchboard_fallbacks_total",
            "Synthesis retries in a fallback mode",
            labels=["engine", "mode"],
        )
        self.mode_fallbacks = Counter(
            "tts_switchboard_mode_fallbacks_total",
            "Requested modes replaced by auto-resolution",
            labels=["requested", "effective"],
        )
        self.errors = Counter(
            "tts_switchboard_errors_total",
            "Failed attempts by error type",
            labels=["type"],
        )
        self.synthesis_latency = Histogram(
            "tts_switchboard_synthesis_duration_ms",
            "Successful synthesis duration in milliseconds",
            buckets=[10, 25, 50, 100, 250, 500, 1000, 2500, 5000],
            labels=["path"],
        )

    def record_remote_call(self, operation: str, engine: str = "") -> None:
        self.remote_calls.inc(operation=operation, engine=engine)

    def record_in_process_call(self, operation: str, engine: str = "") -> None:
        self.in_process_calls.inc(operation=operation, engine=engine)

    def record_fallback(self, engine: str, mode: str) -> None:
        self.fallbacks.inc(engine=engine, mode=mode)

    def record_mode_fallback(self, requested: str, effective: str) -> None:
        self.mode_fallbacks.inc(requested=requested, effective=effective)

    def record_error(self, error_type: str) -> None:
        self.errors.inc(type=error_type)

    def record_synthesis(self, latency_ms: float, path: str) -> None:
        self.synthesis_latency.observe(latency_ms, path=path)

    def snapshot(self) -> dict[str, Any]:
        """Plain-dict report of every metric."""
        return {
            "remote_calls": self.remote_calls.total(),
            "in_process_calls": self.in_process_calls.total(),
            "fallbacks": self.fallbacks.total(),
            "mode_fallbacks": self.mode_fallbacks.total(),
            "errors": {
                "total": self.errors.total(),
                "by_type": {labels["type"]: value for labels, value in self.errors.values()},
            },
            "latency": {
                labels["path"]: self.synthesis_latency.get_stats(**labels)
                for labels in self.synthesis_latency.label_sets()
            },
        }
