import threading
import time
from dataclasses import dataclass
from typing import Any, Optional

DEFAULT_TTL_SECONDS = 60 * 60 * 24


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: float


class LookupCache:
    """Process-local store of normalized lookups with logical TTL expiry.

    Expired entries are reported as misses but stay in the map until the same
    key is written again; nothing sweeps them.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock=None):
        self.ttl = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self.ttl:
            return None
        return entry

    def put(self, key: str, value) -> CacheEntry:
        entry = CacheEntry(value=value, stored_at=self._clock())
        with self._lock:
            self._entries[key] = entry
        return entry

    def __len__(self):
        with self._lock:
            return len(self._entries)
