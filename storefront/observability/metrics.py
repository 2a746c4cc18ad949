from __future__ import annotations

from dataclasses import asdict, dataclass
from threading import Lock
from typing import Any


@dataclass
class _LatencyAgg:
    count: int = 0
    sum_ms: float = 0.0
    max_ms: float = 0.0

    def observe(self, elapsed_ms: float) -> None:
        self.count += 1
        self.sum_ms += float(elapsed_ms)
        if elapsed_ms > self.max_ms:
            self.max_ms = float(elapsed_ms)


class InMemoryMetrics:
    """Thread-safe, process-local metrics (resets on restart)."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._init_state()

    def _init_state(self) -> None:
        self.http_requests_total: int = 0
        self.correlation_ids_generated_total: int = 0
        self.correlation_ids_provided_total: int = 0
        self.store_operations_total: dict[str, int] = {}
        self.store_failures_total: dict[str, int] = {}
        self.http_request_ms = _LatencyAgg()
        self.store_operation_ms = _LatencyAgg()

    def observe_http_request(self, elapsed_ms: float) -> None:
        with self._lock:
            self.http_requests_total += 1
            self.http_request_ms.observe(elapsed_ms)

    def observe_correlation_id(self, generated: bool) -> None:
        with self._lock:
            if generated:
                self.correlation_ids_generated_total += 1
            else:
                self.correlation_ids_provided_total += 1

    def observe_store_operation(self, store: str, operation: str, elapsed_ms: float, failed: bool = False) -> None:
        key = f"{store}.{operation}"
        with self._lock:
            self.store_operations_total[key] = self.store_operations_total.get(key, 0) + 1
            if failed:
                self.store_failures_total[key] = self.store_failures_total.get(key, 0) + 1
            self.store_operation_ms.observe(elapsed_ms)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": {
                    "http_requests_total": self.http_requests_total,
                    "correlation_ids_generated_total": self.correlation_ids_generated_total,
                    "correlation_ids_provided_total": self.correlation_ids_provided_total,
                    "store_operations_total": dict(self.store_operations_total),
                    "store_failures_total": dict(self.store_failures_total),
                },
                "latency_ms": {
                    "http_request_ms": asdict(self.http_request_ms),
                    "store_operation_ms": asdict(self.store_operation_ms),
                },
            }

    def reset(self) -> None:
        with self._lock:
            self._init_state()


_METRICS: InMemoryMetrics | None = None


def get_metrics() -> InMemoryMetrics:
    global _METRICS
    if _METRICS is None:
        _METRICS = InMemoryMetrics()
    return _METRICS


def reset_metrics() -> None:
    """Reset metrics counters/aggregates (used by tests)."""

    get_metrics().reset()
