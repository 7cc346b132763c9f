"""Time-boxed in-memory cache for the last loaded dataset."""
from __future__ import annotations

import threading
import time
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class DatasetCache(Generic[T]):
    """Holds one value for ``ttl_seconds``; inject it where a dataset is loaded."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds cannot be negative")
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._value: T | None = None
        self._stored_at: float | None = None

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self) -> T | None:
        with self._lock:
            if self._stored_at is None:
                return None
            if self._clock() - self._stored_at >= self._ttl:
                self._value = None
                self._stored_at = None
                return None
            return self._value

    def put(self, value: T) -> T:
        with self._lock:
            self._value = value
            self._stored_at = self._clock()
        return value

    def invalidate(self) -> None:
        with self._lock:
            self._value = None
            self._stored_at = None

    def get_or_load(self, loader: Callable[[], T]) -> tuple[T, bool]:
        """Return ``(value, cached)``; ``loader`` runs only on a miss."""
        cached = self.get()
        if cached is not None:
            return cached, True
        return self.put(loader()), False
