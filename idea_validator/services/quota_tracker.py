"""Per-user question-credit tracking.

Submitting an idea and asking a follow-up question each consume one credit.
Counts live in the remote ``users`` collection; this tracker fronts them with
a local cache (read-through) and coalesces increments into one additive
write per user per debounce window (write-behind).

Guarantees are best effort only:
- A refresh adds the increments this process has queued or is still
  writing, so a re-read count does not drop below one already returned.
  The exception is a failed flush: its batch is dropped, not retried.
- Separate processes (tabs, devices, workers) each keep their own cache and
  pending accumulator, so their local views can disagree until refreshed.
- Increments are only held in memory until the debounce timer fires;
  ``flush_all()`` should run on shutdown.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import time
from typing import Callable

from idea_validator.adapters.quota_cache.base import AbstractQuotaCache, CacheEntry
from idea_validator.adapters.store.base import (
    SERVER_TIMESTAMP,
    AbstractDocumentStore,
    Increment,
    StoredDocument,
)
from idea_validator.core.config import QuotaSettings
from idea_validator.core.errors import NotFoundAppError, StoreAppError
from idea_validator.schemas.idea import QuotaStatus

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
COUNT_FIELD = "questionCount"


def _user_hash(user_id: str) -> str:
    """Hash a user id for logging."""
    return hashlib.sha256(user_id.encode()).hexdigest()[:16]


def _count_of(snapshot: StoredDocument | None) -> int:
    if snapshot is None:
        return 0
    return int(snapshot.get(COUNT_FIELD) or 0)


class QuotaTracker:
    """Read-through, write-behind credit counter.

    Construct one per process and share it; the pending accumulators and
    debounce timers are held on the instance.

    Attributes:
        freshness_seconds: Maximum cache age served by plain reads.
        debounce_seconds: Quiet period after the last increment before flushing.
        near_limit_margin: Distance below the limit that triggers re-verification.
        reverify_after_seconds: Cache age after which near-limit checks go remote.
    """

    def __init__(
        self,
        store: AbstractDocumentStore,
        cache: AbstractQuotaCache,
        *,
        freshness_seconds: float = 7200.0,
        debounce_seconds: float = 2.0,
        near_limit_margin: int = 2,
        reverify_after_seconds: float = 900.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if debounce_seconds < 0:
            raise ValueError("debounce_seconds must be >= 0")
        if near_limit_margin < 0:
            raise ValueError("near_limit_margin must be >= 0")

        self._store = store
        self._cache = cache
        self.freshness_seconds = freshness_seconds
        self.debounce_seconds = debounce_seconds
        self.near_limit_margin = near_limit_margin
        self.reverify_after_seconds = reverify_after_seconds
        self._clock = clock

        self._pending: dict[str, int] = {}
        self._in_flight: dict[str, int] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._flush_tasks: set[asyncio.Task[None]] = set()

    @classmethod
    def from_settings(
        cls,
        store: AbstractDocumentStore,
        cache: AbstractQuotaCache,
        quota_settings: QuotaSettings,
    ) -> "QuotaTracker":
        return cls(
            store,
            cache,
            freshness_seconds=quota_settings.freshness_seconds,
            debounce_seconds=quota_settings.debounce_seconds,
            near_limit_margin=quota_settings.near_limit_margin,
            reverify_after_seconds=quota_settings.reverify_after_seconds,
        )

    def pending(self, user_id: str) -> int:
        """Return increments queued for the next flush."""
        return self._pending.get(user_id, 0)

    def _unconfirmed(self, user_id: str) -> int:
        # Queued plus being written; neither is visible in a remote read yet
        return self.pending(user_id) + self._in_flight.get(user_id, 0)

    def invalidate(self, user_id: str) -> None:
        """Drop the cached count so the next read goes to the remote store."""
        self._cache.delete(user_id)

    async def get_count(self, user_id: str, *, force_refresh: bool = False) -> int:
        """Return the number of credits ``user_id`` has consumed.

        Serves the cached count while it is fresh. Otherwise reads the remote
        record (creating a zero record if none exists), adds this process's
        unflushed increments, and refreshes the cache.

        Args:
            user_id: User identifier.
            force_refresh: Skip the freshness check and always read remotely.

        Returns:
            Best-known credit count.

        Raises:
            StoreAppError: If the remote read fails and nothing is cached.
        """
        entry = self._cache.get(user_id)
        if (
            entry is not None
            and not force_refresh
            and entry.age(self._clock()) < self.freshness_seconds
        ):
            return entry.count

        try:
            remote_count = await self._fetch_or_seed(user_id)
        except StoreAppError as exc:
            if entry is None:
                logger.error(
                    "quota.fetch_failed",
                    extra={"user_hash": _user_hash(user_id), "error_code": exc.code},
                )
                raise
            logger.warning(
                "quota.fetch_failed_using_cache",
                extra={
                    "user_hash": _user_hash(user_id),
                    "error_code": exc.code,
                    "cache_age_s": round(entry.age(self._clock()), 1),
                },
            )
            return entry.count

        count = remote_count + self._unconfirmed(user_id)
        self._cache.set(user_id, CacheEntry(count=count, cached_at=self._clock()))
        return count

    async def increment(self, user_id: str) -> int:
        """Consume one credit for ``user_id``.

        The cache is updated before returning; the remote write happens when
        the user's debounce timer fires, batched with any further increments.

        Returns:
            The optimistic new count.

        Raises:
            StoreAppError: If nothing is cached and the remote read fails.
        """
        entry = self._cache.get(user_id)
        if entry is not None:
            current = entry.count
        else:
            try:
                snapshot = await self._store.get(USERS_COLLECTION, user_id)
            except StoreAppError as exc:
                logger.error(
                    "quota.increment_failed",
                    extra={"user_hash": _user_hash(user_id), "error_code": exc.code},
                )
                raise
            current = _count_of(snapshot) + self._unconfirmed(user_id)

        new_count = current + 1
        self._cache.set(user_id, CacheEntry(count=new_count, cached_at=self._clock()))
        self._pending[user_id] = self.pending(user_id) + 1
        self._arm_timer(user_id)

        logger.debug(
            "quota.incremented",
            extra={
                "user_hash": _user_hash(user_id),
                "count": new_count,
                "pending": self._pending[user_id],
            },
        )
        return new_count

    async def check_limit(self, user_id: str, limit: int) -> bool:
        """Return True when ``user_id`` has consumed ``limit`` credits or more.

        A cached count at or over the limit answers immediately. A cached
        count just under the limit (within ``near_limit_margin``) that is older
        than ``reverify_after_seconds`` is re-checked against the remote store,
        so a stale under-count cannot let a user past the limit.
        """
        entry = self._cache.get(user_id)
        if entry is None:
            return await self.get_count(user_id) >= limit

        if entry.count >= limit:
            return True

        near_limit = entry.count >= limit - self.near_limit_margin
        if near_limit and entry.age(self._clock()) > self.reverify_after_seconds:
            logger.info(
                "quota.reverify",
                extra={
                    "user_hash": _user_hash(user_id),
                    "cached_count": entry.count,
                    "limit": limit,
                },
            )
            server_count = await self.get_count(user_id, force_refresh=True)
            return server_count >= limit

        return False

    async def status(self, user_id: str, limit: int) -> QuotaStatus:
        """Summarise ``user_id``'s credits against ``limit``."""
        count = await self.get_count(user_id)
        return QuotaStatus(
            count=count,
            limit=limit,
            remaining=max(limit - count, 0),
            limit_reached=count >= limit,
        )

    async def flush(self, user_id: str) -> None:
        """Write ``user_id``'s pending increments now instead of waiting."""
        timer = self._timers.pop(user_id, None)
        if timer is not None:
            timer.cancel()
        await self._flush_pending(user_id)

    async def flush_all(self) -> None:
        """Flush every user with pending increments and wait for in-flight writes."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

        user_ids = [user_id for user_id, amount in self._pending.items() if amount > 0]
        await asyncio.gather(*(self._flush_pending(user_id) for user_id in user_ids))

        if self._flush_tasks:
            await asyncio.gather(*list(self._flush_tasks))

    async def _fetch_or_seed(self, user_id: str) -> int:
        snapshot = await self._store.get(USERS_COLLECTION, user_id)
        if snapshot is not None:
            return _count_of(snapshot)

        await self._store.set(
            USERS_COLLECTION,
            user_id,
            {
                COUNT_FIELD: 0,
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            },
        )
        logger.info("quota.record_created", extra={"user_hash": _user_hash(user_id)})
        return 0

    def _arm_timer(self, user_id: str) -> None:
        # One timer per user: a new increment restarts the quiet period
        existing = self._timers.pop(user_id, None)
        if existing is not None:
            existing.cancel()

        loop = asyncio.get_running_loop()
        self._timers[user_id] = loop.call_later(self.debounce_seconds, self._on_timer, user_id)

    def _on_timer(self, user_id: str) -> None:
        self._timers.pop(user_id, None)
        task = asyncio.get_running_loop().create_task(self._flush_pending(user_id))
        self._flush_tasks.add(task)
        task.add_done_callback(self._flush_tasks.discard)

    async def _flush_pending(self, user_id: str) -> None:
        amount = self._pending.pop(user_id, 0)
        if amount <= 0:
            return

        self._in_flight[user_id] = self._in_flight.get(user_id, 0) + amount
        try:
            await self._write_increment(user_id, amount)
        except Exception as exc:
            # Callers already have their optimistic count; the batch is dropped
            logger.error(
                "quota.flush_failed",
                extra={
                    "user_hash": _user_hash(user_id),
                    "amount": amount,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return
        finally:
            remaining = self._in_flight.pop(user_id, 0) - amount
            if remaining > 0:
                self._in_flight[user_id] = remaining

        logger.info(
            "quota.flushed",
            extra={"user_hash": _user_hash(user_id), "amount": amount},
        )

    async def _write_increment(self, user_id: str, amount: int) -> None:
        try:
            await self._store.update(
                USERS_COLLECTION,
                user_id,
                {COUNT_FIELD: Increment(amount), "updatedAt": SERVER_TIMESTAMP},
            )
        except NotFoundAppError:
            await self._store.set(
                USERS_COLLECTION,
                user_id,
                {
                    COUNT_FIELD: amount,
                    "createdAt": SERVER_TIMESTAMP,
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
