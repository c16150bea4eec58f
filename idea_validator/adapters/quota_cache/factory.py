"""Factory selecting the local quota cache implementation."""

from __future__ import annotations

import logging

from idea_validator.adapters.quota_cache.base import AbstractQuotaCache
from idea_validator.adapters.quota_cache.file_cache import FileQuotaCache
from idea_validator.adapters.quota_cache.in_memory import InMemoryQuotaCache
from idea_validator.core.config import QuotaSettings, settings
from idea_validator.core.errors import ConfigurationAppError

logger = logging.getLogger(__name__)


def create_quota_cache(quota_settings: QuotaSettings | None = None) -> AbstractQuotaCache:
    """Build the quota cache once, based on QUOTA_CACHE_BACKEND.

    ``auto`` prefers the persistent file cache and falls back to memory when
    the cache directory fails the capability probe. ``file`` requires the
    probe to pass.

    Raises:
        ConfigurationAppError: For an unknown backend, or ``file`` on a host
            where the directory is not writable.
    """
    cfg = quota_settings or settings.quota
    backend = cfg.cache_backend.lower()

    if backend == "memory":
        return InMemoryQuotaCache(max_age_seconds=cfg.cache_max_age_seconds)

    if backend not in ("auto", "file"):
        raise ConfigurationAppError(
            code="quota_cache_unknown_backend",
            message=f"Unknown quota cache backend: '{backend}'. Supported backends: auto, file, memory",
        )

    if FileQuotaCache.probe(cfg.cache_dir):
        logger.info("quota_cache.selected", extra={"backend": "file", "directory": cfg.cache_dir})
        return FileQuotaCache(cfg.cache_dir, max_age_seconds=cfg.cache_max_age_seconds)

    if backend == "file":
        raise ConfigurationAppError(
            code="quota_cache_unavailable",
            message=f"Quota cache directory is not writable: {cfg.cache_dir}",
        )

    logger.info("quota_cache.selected", extra={"backend": "memory", "reason": "probe_failed"})
    return InMemoryQuotaCache(max_age_seconds=cfg.cache_max_age_seconds)
