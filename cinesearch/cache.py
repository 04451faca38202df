"""
In-memory response cache for upstream documents.

Entries are keyed on a canonical encoding of (path, params) and expire a
fixed time after insertion. Expired entries read as misses even before the
periodic sweep removes them.
"""

import json
import time
from threading import Lock
from typing import Any, Callable, Mapping, Optional

from cachetools import TTLCache

from .models import CacheEntry


def make_cache_key(path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """
    Build a deterministic cache key for an upstream request.

    Parameter names are sorted and values stringified, so two requests that
    differ only in argument order or int-vs-str spelling share a key.
    Parameters set to None are dropped.

    Args:
        path: Upstream API path (e.g. '/search/movie')
        params: Query parameters

    Returns:
        Canonical key string
    """
    canonical = {
        str(name): str(value)
        for name, value in (params or {}).items()
        if value is not None
    }
    encoded = json.dumps(canonical, sort_keys=True, separators=(",", ":"))
    return f"{path}|{encoded}"


class ResponseCache:
    """
    Time-bounded key/value store shared by concurrent requests.

    Backed by a cachetools TTLCache. Thread-safe: upstream fetches run in
    worker threads.
    """

    def __init__(
        self,
        ttl_seconds: float = 600,
        clock: Callable[[], float] = time.monotonic,
        maxsize: int = 10000,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=clock)
        self._lock = Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached document, or None on miss or expiry."""
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self.misses += 1
            else:
                self.hits += 1
            return value

    def set(self, key: str, value: Any) -> CacheEntry:
        """Store a document, replacing any previous entry for the key."""
        with self._lock:
            self._entries[key] = value
            return CacheEntry(key=key, value=value, expires_at=self._clock() + self.ttl_seconds)

    def sweep(self) -> int:
        """
        Purge expired entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            return len(self._entries.expire())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def stats(self) -> dict:
        with self._lock:
            return {
                "entries": len(self._entries),
                "hits": self.hits,
                "misses": self.misses,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
