"""Local quota cache interface.

The quota tracker depends on this abstraction; which implementation backs it
(persistent files or process memory) is decided once, at construction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CacheEntry:
    """Shadow copy of a user's credit count.

    Attributes:
        count: Credits consumed as last seen by this process.
        cached_at: UNIX time in seconds when the entry was written.
    """

    count: int
    cached_at: float

    def age(self, now: float) -> float:
        return now - self.cached_at


class AbstractQuotaCache(ABC):
    """Key/value store for per-user cache entries."""

    @abstractmethod
    def get(self, user_id: str) -> CacheEntry | None:
        """Return the entry for ``user_id`` regardless of its age, or None."""
        raise NotImplementedError

    @abstractmethod
    def set(self, user_id: str, entry: CacheEntry) -> None:
        """Store or replace the entry for ``user_id``."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, user_id: str) -> None:
        """Drop the entry for ``user_id`` if present."""
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        """Drop every entry owned by this cache."""
        raise NotImplementedError
