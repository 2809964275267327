"""Lightweight in-process metrics for the intake service."""

from __future__ import annotations

from collections import defaultdict, deque
from threading import Lock

INTAKE_OUTCOMES = ("created", "validation_error", "configuration_error", "store_error")


class IntakeMetrics:
    def __init__(self, latency_window: int = 2000) -> None:
        self._lock = Lock()
        self._requests_total = 0
        self._status_counts: dict[str, int] = defaultdict(int)
        self._path_counts: dict[str, int] = defaultdict(int)
        self._outcomes: dict[str, int] = {name: 0 for name in INTAKE_OUTCOMES}
        self._latencies_ms: deque[float] = deque(maxlen=latency_window)

    def observe_request(self, path: str, status_code: int, duration_ms: float) -> None:
        bucket = f"{status_code // 100}xx"
        with self._lock:
            self._requests_total += 1
            self._status_counts[bucket] += 1
            self._path_counts[path] += 1
            self._latencies_ms.append(float(duration_ms))

    def record_outcome(self, outcome: str) -> None:
        if outcome not in self._outcomes:
            raise ValueError(f"Unknown intake outcome: {outcome}")
        with self._lock:
            self._outcomes[outcome] += 1

    def snapshot(self) -> dict:
        with self._lock:
            ordered = sorted(self._latencies_ms)

            def percentile(p: float) -> float:
                if not ordered:
                    return 0.0
                return round(ordered[int((len(ordered) - 1) * p)], 2)

            return {
                "requests_total": self._requests_total,
                "status_counts": dict(self._status_counts),
                "path_counts": dict(self._path_counts),
                "incidents": dict(self._outcomes),
                "latency_ms": {
                    "samples": len(ordered),
                    "p50": percentile(0.50),
                    "p95": percentile(0.95),
                    "p99": percentile(0.99),
                },
            }


metrics = IntakeMetrics()
