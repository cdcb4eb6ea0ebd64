"""Memoization of trip orderings keyed by trip ID and stop-set fingerprint."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Protocol

from .models import OptimizationResult

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "trip_route"


class CacheStore(Protocol):
    def get(self, key: str) -> Any | None:
        ...

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        ...


class InMemoryCacheStore:
    """Process-local TTL store. ``clock`` is injectable for tests."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        with self._lock:
            now = self._clock()
            # Superseded fingerprints are never read again, so expiry can't rely on get().
            self._entries = {k: entry for k, entry in self._entries.items() if entry[0] > now}
            self._entries[key] = (now + ttl_seconds, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def cache_key(trip_id: int, fingerprint: str) -> str:
    return f"{CACHE_KEY_PREFIX}:{trip_id}:{fingerprint}"


class OptimizationCache:
    """Compute-once cache in front of the ordering strategies.

    Concurrent callers asking for the same key inside this process wait for
    a single computation; different keys proceed independently. A failing
    backend never blocks optimization, results are then computed directly.
    """

    def __init__(self, store: CacheStore, ttl_seconds: int = 600) -> None:
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._registry_lock = threading.Lock()
        # key -> [lock, number of callers holding or waiting on it]
        self._key_locks: dict[str, list] = {}

    def _acquire(self, key: str) -> threading.Lock:
        with self._registry_lock:
            slot = self._key_locks.setdefault(key, [threading.Lock(), 0])
            slot[1] += 1
        slot[0].acquire()
        return slot[0]

    def _release(self, key: str, lock: threading.Lock) -> None:
        lock.release()
        with self._registry_lock:
            slot = self._key_locks[key]
            slot[1] -= 1
            if slot[1] == 0:
                del self._key_locks[key]

    def _lookup(self, key: str) -> OptimizationResult | None:
        try:
            cached = self.store.get(key)
        except Exception as exc:
            logger.warning(f"Optimization cache read failed for {key}: {exc}")
            return None
        if cached is None:
            return None
        try:
            return OptimizationResult.from_dict(cached)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(f"Ignoring malformed cache entry {key}: {exc}")
            return None

    def _store(self, key: str, result: OptimizationResult) -> None:
        try:
            self.store.set(key, result.to_dict(), self.ttl_seconds)
        except Exception as exc:
            logger.warning(f"Optimization cache write failed for {key}: {exc}")

    def get_or_compute(
        self,
        trip_id: int,
        fingerprint: str,
        compute_fn: Callable[[], OptimizationResult],
    ) -> tuple[OptimizationResult, bool]:
        """Return ``(result, hit)`` for the key, computing at most once on a miss."""
        key = cache_key(trip_id, fingerprint)
        lock = self._acquire(key)
        try:
            cached = self._lookup(key)
            if cached is not None:
                logger.debug(f"Optimization cache hit for {key}")
                return cached, True

            result = compute_fn()
            self._store(key, result)
            return result, False
        finally:
            self._release(key, lock)
