from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

QueryKey = Tuple[Hashable, ...]
KeyLike = Union[str, Sequence[Hashable]]


def as_key(key: KeyLike) -> QueryKey:
    """"services" -> ("services",); lists become tuples."""
    if isinstance(key, str):
        return (key,)
    return tuple(key)


@dataclass
class CacheEntry:
    data: Any
    updated_at: float
    last_used: float
    stale: bool = False


class QueryCache:
    """Client-side cache of server responses, keyed by query key tuples.

    Entries are fresh for ``stale_time`` seconds after they were stored.
    Entries not read for ``cache_time`` seconds are dropped by
    ``collect_garbage``. Every key read through ``fetch`` keeps its fetcher
    as an observer, so invalidation can schedule a refetch for it.
    """

    def __init__(
        self,
        stale_time: float = 120.0,
        cache_time: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.stale_time = stale_time
        self.cache_time = cache_time
        self._clock = clock
        self._entries: Dict[QueryKey, CacheEntry] = {}
        self._observers: Dict[QueryKey, Callable[[], Any]] = {}
        self._pending: List[QueryKey] = []
        self._lock = threading.RLock()

    # --------------- Reads ---------------
    def get(self, key: KeyLike) -> Any:
        """Cached data for ``key``, fresh or not (None when absent)."""
        with self._lock:
            entry = self._entries.get(as_key(key))
            return entry.data if entry else None

    def has(self, key: KeyLike) -> bool:
        with self._lock:
            return as_key(key) in self._entries

    def is_fresh(self, key: KeyLike) -> bool:
        with self._lock:
            entry = self._entries.get(as_key(key))
            if entry is None or entry.stale:
                return False
            return self._clock() - entry.updated_at < self.stale_time

    def keys(self) -> List[QueryKey]:
        with self._lock:
            return list(self._entries)

    def fetch(self, key: KeyLike, fetcher: Callable[[], Any]) -> Any:
        """
        Serve fresh cached data, or call ``fetcher`` and store its result.

        ``fetcher`` becomes the observer of ``key`` and is what a later
        invalidation refetches with.
        """
        key = as_key(key)
        with self._lock:
            self._observers[key] = fetcher
            if self.is_fresh(key):
                entry = self._entries[key]
                entry.last_used = self._clock()
                return entry.data

        data = fetcher()
        self.set(key, data)
        return data

    # --------------- Writes ---------------
    def set(self, key: KeyLike, data: Any) -> None:
        key = as_key(key)
        with self._lock:
            now = self._clock()
            self._entries[key] = CacheEntry(data=data, updated_at=now, last_used=now)
            if key in self._pending:
                self._pending.remove(key)

    def matching(self, base: KeyLike) -> List[QueryKey]:
        """Known keys (cached or observed) starting with ``base``."""
        base = as_key(base)
        with self._lock:
            known = list(self._entries) + [key for key in self._observers if key not in self._entries]
        return [key for key in known if key[:len(base)] == base]

    def invalidate(self, base: KeyLike) -> List[QueryKey]:
        """
        Mark every entry under ``base`` stale and schedule observed keys for refetch.

        Returns:
            Keys that were invalidated
        """
        keys = self.matching(base)
        with self._lock:
            for key in keys:
                entry = self._entries.get(key)
                if entry is not None:
                    entry.stale = True
                if key in self._observers and key not in self._pending:
                    self._pending.append(key)
        return keys

    def remove(self, base: KeyLike) -> List[QueryKey]:
        """Evict every entry under ``base``. Observers are kept."""
        base = as_key(base)
        with self._lock:
            removed = [key for key in self._entries if key[:len(base)] == base]
            for key in removed:
                del self._entries[key]
        return removed

    def unobserve(self, key: KeyLike) -> None:
        with self._lock:
            self._observers.pop(as_key(key), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._observers.clear()
            self._pending.clear()

    # --------------- Refetch & garbage collection ---------------
    @property
    def pending(self) -> List[QueryKey]:
        with self._lock:
            return list(self._pending)

    def refetch_pending(self) -> List[QueryKey]:
        """
        Run the scheduled refetches.

        A failing fetcher is logged and its key stays without fresh data.

        Returns:
            Keys refetched successfully
        """
        with self._lock:
            scheduled = list(self._pending)
            self._pending.clear()

        refetched = []
        for key in scheduled:
            fetcher = self._observers.get(key)
            if fetcher is None:
                continue
            try:
                self.set(key, fetcher())
            except Exception:
                logger.exception(f"Refetch failed for {key}")
                continue
            refetched.append(key)
        return refetched

    def collect_garbage(self) -> List[QueryKey]:
        """Drop entries unused for longer than ``cache_time``."""
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if now - entry.last_used >= self.cache_time]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(f"Dropped {len(expired)} unused cache entries")
        return expired


class CacheCoordinator:
    """Keeps cached views of a resource consistent after a mutation."""

    def __init__(self, cache: QueryCache) -> None:
        self._cache = cache

    @property
    def cache(self) -> QueryCache:
        return self._cache

    def invalidate_and_refetch(self, resource_name: str) -> List[QueryKey]:
        """
        Evict and invalidate every query of ``resource_name`` whatever its scope.

        Observed queries are scheduled for refetch; no request is made here.
        Never raises: on failure the stale state is left in place.

        Returns:
            Keys that were invalidated
        """
        try:
            evicted = self._cache.remove(resource_name)
            invalidated = self._cache.invalidate(resource_name)
        except Exception:
            logger.exception(f"Cache invalidation failed for {resource_name}")
            return []

        keys = list(dict.fromkeys(evicted + invalidated))
        logger.debug(f"Invalidated {len(keys)} queries for {resource_name}")
        return keys


def scoped_key(resource: str, scope: Optional[Hashable] = None, *extra: Hashable) -> QueryKey:
    """("services",) or ("services", "admin") or ("services", "detail", id)."""
    parts = (resource,) if scope is None else (resource, scope)
    return parts + tuple(extra)
