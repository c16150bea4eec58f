"""In-memory quota cache.

Per-process only: entries are lost on restart and not shared between workers.
Used when the file-backed cache is unavailable or explicitly disabled.
"""

from __future__ import annotations

import threading
import time
from typing import Callable

from idea_validator.adapters.quota_cache.base import AbstractQuotaCache, CacheEntry


class InMemoryQuotaCache(AbstractQuotaCache):
    """Dict-backed cache whose entries expire after ``max_age_seconds``.

    Expired entries are dropped when read, and swept on every write so ids
    that are never read again do not accumulate.
    """

    def __init__(
        self,
        *,
        max_age_seconds: float = 7 * 24 * 3600.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._max_age = max_age_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, user_id: str) -> CacheEntry | None:
        with self._lock:
            entry = self._entries.get(user_id)
            if entry is None:
                return None
            if entry.age(self._clock()) > self._max_age:
                del self._entries[user_id]
                return None
            return entry

    def set(self, user_id: str, entry: CacheEntry) -> None:
        with self._lock:
            self._evict_expired_locked()
            self._entries[user_id] = entry

    def delete(self, user_id: str) -> None:
        with self._lock:
            self._entries.pop(user_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _evict_expired_locked(self) -> None:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.age(now) > self._max_age]
        for key in expired:
            del self._entries[key]
