#!/usr/bin/env python3
"""In-process TTL caches: per-job operation lists and rendered feeds per URL."""

import hashlib
import logging
import threading
import time
from typing import Callable, Dict, Generic, List, NamedTuple, Optional, Tuple, TypeVar

from jobcal.schemas.jobs import OperationEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TTLCache(Generic[T]):
    """
    Map of key → (created_at, value).  Entries older than ``ttl_seconds``
    read as absent and are evicted on that read.  Insertion order doubles
    as age order: a re-put moves the key to the back.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, T]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            hit = self._entries.get(key)
            if hit is None:
                return None
            created_at, value = hit
            if self._clock() - created_at >= self.ttl_seconds:
                del self._entries[key]
                logger.debug("cache entry expired: %s", key)
                return None
            return value

    def put(self, key: str, value: T) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._make_room()
            self._entries[key] = (self._clock(), value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _make_room(self) -> None:
        """Hook run under the lock before an insert."""


class OperationCache(TTLCache[List[OperationEntry]]):
    """Operation listings by job id, bounded to ``max_entries``."""

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(ttl_seconds, clock)
        self.max_entries = max_entries

    def _make_room(self) -> None:
        # One insert at a time, so dropping the single oldest entry is enough.
        if self._entries and len(self._entries) >= self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("operation cache full, evicted job %s", oldest)


class CachedFeed(NamedTuple):
    body: str
    etag: str


def make_etag(body: str) -> str:
    """Weak validator over the rendered document."""
    return 'W/"' + hashlib.sha1(body.encode("utf-8")).hexdigest() + '"'


class ResponseCache(TTLCache[CachedFeed]):
    """Rendered calendar documents keyed by request URL (path + query)."""

    def store(self, url: str, body: str) -> CachedFeed:
        feed = CachedFeed(body, make_etag(body))
        self.put(url, feed)
        return feed
