"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It sets TESTING so the .env file is not loaded, and points every backend at
its in-memory implementation.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"

os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("LLM_MODEL", "gpt-4o-mini")
os.environ.setdefault("LLM_API_KEY", "test-key-123")
os.environ.setdefault("NEWS_API_KEY", "test-news-key")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("QUOTA_CACHE_BACKEND", "memory")
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "test-api-key-123,test-api-key-456")

import pytest  # noqa: E402

from idea_validator.adapters.quota_cache.in_memory import InMemoryQuotaCache  # noqa: E402
from idea_validator.adapters.store.memory import InMemoryDocumentStore  # noqa: E402


class FakeClock:
    """Manually advanced clock returning seconds since the epoch."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def cache(clock: FakeClock) -> InMemoryQuotaCache:
    return InMemoryQuotaCache(clock=clock)
