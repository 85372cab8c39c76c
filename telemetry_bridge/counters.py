"""
Monotonic Metric Counters

Per-name running totals for reported metric values. Values are truncated
toward zero before they are added, so the counter is a coarse aggregate;
the exact value travels on the metric occurrence itself.
"""

import math
import threading


def truncate_metric_value(value: float) -> int:
    """Truncate a metric value toward zero for counter accumulation."""
    if not math.isfinite(value):
        return 0
    return math.trunc(value)


class MetricCounters:
    """Thread-safe monotonic counters keyed by metric name."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._totals: dict[str, int] = {}

    def add(self, name: str, value: float) -> int:
        """
        Add a metric value to the named counter.

        Returns:
            The delta actually added (0 for negative or non-finite values,
            which would break monotonicity)
        """
        delta = truncate_metric_value(value)
        if delta < 0:
            delta = 0
        with self._lock:
            self._totals[name] = self._totals.get(name, 0) + delta
        return delta

    def get(self, name: str) -> int:
        with self._lock:
            return self._totals.get(name, 0)

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._totals)

    def reset(self) -> None:
        with self._lock:
            self._totals.clear()
