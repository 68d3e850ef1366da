"""Query-result cache for the client store.

Results are keyed by ``(query_name, params)``. Each fetch takes a sequence
number when it is issued; a result is only stored when its sequence is
newer than the stored one, so a slow response for an older request never
replaces a newer page. Invalidating a query name marks every key under it
stale, including results of fetches that were issued before the
invalidation and resolve after it. Entries that stay stale for longer
than the retention window are dropped on the next store.
"""
import itertools
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Tuple

PROPERTIES = "properties"
FEATURED = "featured-properties"
SAVED = "saved-properties"
MY_PROPERTIES = "my-properties"

STALE_TIMES = {
    PROPERTIES: 5 * 60,
    FEATURED: 10 * 60,
    SAVED: 2 * 60,
    MY_PROPERTIES: 5 * 60,
}

CacheKey = Tuple[str, Hashable]

RETENTION = 30 * 60

@dataclass
class CacheEntry:
    data: Any
    fetched_at: float
    seq: int

class QueryCache:
    def __init__(self, stale_times: Dict[str, float] | None = None, clock: Callable[[], float] = time.monotonic,
                 retention: float = RETENTION):
        self.stale_times = {**STALE_TIMES, **(stale_times or {})}
        self.retention = retention
        self._clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._invalidated_seq: Dict[str, int] = {}
        self._seq = itertools.count(1)

    def now(self) -> float:
        return self._clock()

    def next_seq(self) -> int:
        return next(self._seq)

    def get_any(self, key: CacheKey) -> CacheEntry | None:
        return self._entries.get(key)

    def is_fresh(self, key: CacheKey) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        name = key[0]
        if entry.seq < self._invalidated_seq.get(name, 0):
            return False
        return self.now() - entry.fetched_at < self.stale_times.get(name, 0)

    def get_fresh(self, key: CacheKey) -> Any:
        if self.is_fresh(key):
            return self._entries[key].data
        return None

    def store(self, key: CacheKey, data: Any, seq: int, issued_at: float) -> bool:
        """Keep ``data`` unless a newer request already stored its result."""
        current = self._entries.get(key)
        if current is not None and current.seq > seq:
            return False
        self._entries[key] = CacheEntry(data=data, fetched_at=issued_at, seq=seq)
        self.evict()
        return True

    def evict(self) -> int:
        """Drop entries that have been stale for longer than the retention window."""
        now = self.now()
        expired = [
            key for key, entry in self._entries.items()
            if now - entry.fetched_at >= self.stale_times.get(key[0], 0) + self.retention
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def invalidate(self, name: str):
        # Fetches issued from here on get a larger sequence number
        self._invalidated_seq[name] = self.next_seq()

    def clear(self):
        self._entries.clear()
        self._invalidated_seq.clear()
