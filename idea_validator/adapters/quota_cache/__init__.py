"""Local quota cache adapters.

A persistent file-backed cache is preferred; an in-memory cache is used when
the host cannot persist files. The choice is made once by the factory.
"""

from idea_validator.adapters.quota_cache.base import AbstractQuotaCache, CacheEntry
from idea_validator.adapters.quota_cache.factory import create_quota_cache
from idea_validator.adapters.quota_cache.file_cache import FileQuotaCache
from idea_validator.adapters.quota_cache.in_memory import InMemoryQuotaCache

__all__ = [
    "AbstractQuotaCache",
    "CacheEntry",
    "FileQuotaCache",
    "InMemoryQuotaCache",
    "create_quota_cache",
]
