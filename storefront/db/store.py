from __future__ import annotations

import asyncio
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock
from time import perf_counter
from typing import Generic, TypeVar

from storefront.observability.metrics import get_metrics

T = TypeVar("T")

# Uniform artificial latency per operation, in milliseconds.
DEFAULT_LATENCY_MS: dict[str, tuple[float, float]] = {
    "get": (10.0, 50.0),
    "create": (50.0, 200.0),
    "update": (50.0, 150.0),
    "delete": (20.0, 100.0),
    "list": (20.0, 100.0),
}

# Operations that roll the transient-failure chance.
FAULTY_OPERATIONS = frozenset({"create"})

_MISSING = object()


class StoreTimeoutError(TimeoutError):
    """Simulated transient backend failure on a store write."""

    def __init__(self, message: str = "Database connection timeout") -> None:
        super().__init__(message)


@dataclass
class LatencyProfile:
    """Artificial I/O latency and write-failure injection for an in-memory store.

    Attributes:
        ranges_ms: (low, high) latency bounds per operation name.
        failure_rate: Probability that a faulty operation raises StoreTimeoutError.
        scale: Multiplier applied to every sampled latency (0 disables latency).
        rng: Random source; seed it for reproducible runs.
    """

    ranges_ms: dict[str, tuple[float, float]] = field(default_factory=lambda: dict(DEFAULT_LATENCY_MS))
    failure_rate: float = 0.0
    scale: float = 1.0
    rng: random.Random = field(default_factory=random.Random)

    def __post_init__(self) -> None:
        if not 0.0 <= self.failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be between 0.0 and 1.0, got {self.failure_rate}")
        if self.scale < 0.0:
            raise ValueError(f"scale must be >= 0.0, got {self.scale}")

    @classmethod
    def instant(cls) -> LatencyProfile:
        """No latency and no failures."""
        return cls(failure_rate=0.0, scale=0.0)

    def sample_ms(self, operation: str) -> float:
        low, high = self.ranges_ms.get(operation, (0.0, 0.0))
        return self.rng.uniform(low, high) * self.scale

    async def delay(self, operation: str) -> float:
        delay_ms = self.sample_ms(operation)
        # sleep(0) still yields to the event loop.
        await asyncio.sleep(delay_ms / 1000.0)
        return delay_ms

    def should_fail(self, operation: str) -> bool:
        if operation not in FAULTY_OPERATIONS or self.failure_rate <= 0.0:
            return False
        return self.rng.random() < self.failure_rate


class InMemoryStore(Generic[T]):
    """Key-value map standing in for a database table.

    Map access happens under a lock with no await inside it, so every
    mutation is atomic per key and the last writer wins.
    """

    def __init__(self, name: str, profile: LatencyProfile | None = None) -> None:
        self.name = name
        self.profile = profile or LatencyProfile()
        self._items: dict[str, T] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def _observe(self, operation: str, start: float, failed: bool = False) -> None:
        elapsed_ms = (perf_counter() - start) * 1000.0
        get_metrics().observe_store_operation(self.name, operation, elapsed_ms=elapsed_ms, failed=failed)

    async def get(self, key: str) -> T | None:
        start = perf_counter()
        await self.profile.delay("get")
        with self._lock:
            value = self._items.get(key)
        self._observe("get", start)
        return value

    async def create(self, key: str, value: T) -> T:
        start = perf_counter()
        await self.profile.delay("create")
        # Fail before touching the map so a timeout leaves nothing behind.
        if self.profile.should_fail("create"):
            self._observe("create", start, failed=True)
            raise StoreTimeoutError()
        with self._lock:
            self._items[key] = value
        self._observe("create", start)
        return value

    async def update(self, key: str, value: T) -> T | None:
        start = perf_counter()
        await self.profile.delay("update")
        with self._lock:
            if key in self._items:
                self._items[key] = value
                updated: T | None = value
            else:
                updated = None
        self._observe("update", start)
        return updated

    async def delete(self, key: str) -> bool:
        start = perf_counter()
        await self.profile.delay("delete")
        with self._lock:
            removed = self._items.pop(key, _MISSING) is not _MISSING
        self._observe("delete", start)
        return removed

    async def list(self, predicate: Callable[[T], bool] | None = None) -> list[T]:
        start = perf_counter()
        await self.profile.delay("list")
        with self._lock:
            values = list(self._items.values())
        self._observe("list", start)
        if predicate is None:
            return values
        return [value for value in values if predicate(value)]
