"""In-memory cache for enriched event batches.

Entries go stale after a TTL but are never evicted; a fresh fetch for the
same key overwrites them. The map grows for the life of the process.
"""

import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

CACHE_TTL_SECONDS = 3600  # One hour

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A cached batch and the epoch-millis time it was stored."""

    data: T
    timestamp: int


def cache_key(keyword: str, date: str) -> str:
    """Key for one (keyword, YYYYMMDD) query."""
    return f"{keyword}_{date}"


class ExpiringCache(Generic[T]):
    """Map with a per-entry time-to-live.

    Args:
        ttl_seconds: Age after which an entry is ignored
        clock: Returns the current time in epoch seconds; injectable for tests
    """

    def __init__(
        self,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def get_entry(self, key: str) -> Optional[CacheEntry[T]]:
        """Entry for `key` if present and fresh, else None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        age_ms = self._now_ms() - entry.timestamp
        if age_ms >= self.ttl_seconds * 1000:
            return None
        return entry

    def get(self, key: str) -> Optional[T]:
        entry = self.get_entry(key)
        return entry.data if entry else None

    def set(self, key: str, data: T) -> CacheEntry[T]:
        """Store `data` stamped with the current time, replacing any entry."""
        entry = CacheEntry(data=data, timestamp=self._now_ms())
        self._entries[key] = entry
        return entry

    def __contains__(self, key: str) -> bool:
        return self.get_entry(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
