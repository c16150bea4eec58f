"""Unit tests for local quota cache adapters and their factory."""

import json
from unittest.mock import patch

import pytest

from idea_validator.adapters.quota_cache.base import CacheEntry
from idea_validator.adapters.quota_cache.factory import create_quota_cache
from idea_validator.adapters.quota_cache.file_cache import FileQuotaCache
from idea_validator.adapters.quota_cache.in_memory import InMemoryQuotaCache
from idea_validator.core.config import QuotaSettings
from idea_validator.core.errors import ConfigurationAppError

WEEK = 7 * 24 * 3600.0


class TestInMemoryQuotaCache:
    """Test the per-process cache."""

    def test_set_get_delete(self, clock) -> None:
        cache = InMemoryQuotaCache(clock=clock)
        entry = CacheEntry(count=3, cached_at=clock())

        cache.set("u1", entry)
        assert cache.get("u1") == entry
        assert len(cache) == 1

        cache.delete("u1")
        assert cache.get("u1") is None

    def test_delete_missing_key_is_noop(self) -> None:
        cache = InMemoryQuotaCache()
        cache.delete("nobody")
        assert len(cache) == 0

    def test_clear(self, clock) -> None:
        cache = InMemoryQuotaCache(clock=clock)
        cache.set("u1", CacheEntry(count=1, cached_at=clock()))
        cache.set("u2", CacheEntry(count=2, cached_at=clock()))

        cache.clear()

        assert len(cache) == 0

    def test_expired_entry_is_dropped_on_read(self, clock) -> None:
        cache = InMemoryQuotaCache(clock=clock)
        cache.set("u1", CacheEntry(count=2, cached_at=clock()))

        clock.advance(WEEK + 1)

        assert cache.get("u1") is None
        assert len(cache) == 0

    def test_write_sweeps_entries_never_read_again(self, clock) -> None:
        cache = InMemoryQuotaCache(max_age_seconds=60.0, clock=clock)
        for index in range(5):
            cache.set(f"user-{index}", CacheEntry(count=index, cached_at=clock()))

        clock.advance(61.0)
        cache.set("fresh", CacheEntry(count=1, cached_at=clock()))

        assert len(cache) == 1
        assert cache.get("fresh") == CacheEntry(count=1, cached_at=clock())

    def test_factory_applies_configured_max_age(self) -> None:
        cache = create_quota_cache(
            QuotaSettings(cache_backend="memory", cache_max_age_seconds=30.0)
        )

        cache.set("u1", CacheEntry(count=1, cached_at=0.0))

        assert cache.get("u1") is None


class TestFileQuotaCache:
    """Test the persistent file-backed cache."""

    def test_entries_survive_new_instances(self, tmp_path, clock) -> None:
        """Test that a second cache over the same directory sees the entry."""
        FileQuotaCache(tmp_path, clock=clock).set("u1", CacheEntry(count=4, cached_at=clock()))

        reopened = FileQuotaCache(tmp_path, clock=clock)

        assert reopened.get("u1") == CacheEntry(count=4, cached_at=clock())

    def test_file_names_do_not_contain_user_id(self, tmp_path, clock) -> None:
        cache = FileQuotaCache(tmp_path, clock=clock)
        cache.set("../evil/user", CacheEntry(count=1, cached_at=clock()))

        files = [path.name for path in tmp_path.iterdir()]
        assert len(files) == 1
        assert files[0].startswith("quota_")
        assert "evil" not in files[0]

    def test_expired_entry_is_removed(self, tmp_path, clock) -> None:
        """Test that entries older than the max age disappear like expired cookies."""
        cache = FileQuotaCache(tmp_path, max_age_seconds=WEEK, clock=clock)
        cache.set("u1", CacheEntry(count=2, cached_at=clock()))

        clock.advance(WEEK + 1)

        assert cache.get("u1") is None
        assert list(tmp_path.glob("quota_*.json")) == []

    def test_entry_within_max_age_is_returned_even_if_old(self, tmp_path, clock) -> None:
        cache = FileQuotaCache(tmp_path, max_age_seconds=WEEK, clock=clock)
        cache.set("u1", CacheEntry(count=2, cached_at=clock()))

        clock.advance(3 * 24 * 3600)

        assert cache.get("u1").count == 2

    def test_corrupt_entry_is_discarded(self, tmp_path, clock) -> None:
        cache = FileQuotaCache(tmp_path, clock=clock)
        cache.set("u1", CacheEntry(count=2, cached_at=clock()))
        (path,) = tmp_path.glob("quota_*.json")
        path.write_text("{not json", encoding="utf-8")

        assert cache.get("u1") is None
        assert not path.exists()

    def test_entry_is_written_as_json(self, tmp_path, clock) -> None:
        cache = FileQuotaCache(tmp_path, clock=clock)
        cache.set("u1", CacheEntry(count=6, cached_at=123.5))

        (path,) = tmp_path.glob("quota_*.json")
        assert json.loads(path.read_text(encoding="utf-8")) == {"count": 6, "cached_at": 123.5}

    def test_delete_and_clear(self, tmp_path, clock) -> None:
        cache = FileQuotaCache(tmp_path, clock=clock)
        cache.set("u1", CacheEntry(count=1, cached_at=clock()))
        cache.set("u2", CacheEntry(count=2, cached_at=clock()))

        cache.delete("u1")
        assert cache.get("u1") is None
        assert cache.get("u2") is not None

        cache.clear()
        assert cache.get("u2") is None

    def test_get_from_missing_directory_returns_none(self, tmp_path, clock) -> None:
        cache = FileQuotaCache(tmp_path / "not-created", clock=clock)

        assert cache.get("u1") is None
        cache.clear()

    def test_probe_succeeds_on_writable_directory(self, tmp_path) -> None:
        target = tmp_path / "quota"

        assert FileQuotaCache.probe(target) is True
        assert target.is_dir()
        assert list(target.iterdir()) == []

    def test_probe_fails_when_path_is_a_file(self, tmp_path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")

        assert FileQuotaCache.probe(blocker / "quota") is False


class TestCreateQuotaCache:
    """Test backend selection by the factory."""

    def test_memory_backend(self) -> None:
        cache = create_quota_cache(QuotaSettings(cache_backend="memory"))
        assert isinstance(cache, InMemoryQuotaCache)

    def test_auto_prefers_file_cache(self, tmp_path) -> None:
        cache = create_quota_cache(
            QuotaSettings(cache_backend="auto", cache_dir=str(tmp_path / "q"))
        )
        assert isinstance(cache, FileQuotaCache)

    def test_auto_falls_back_to_memory_when_probe_fails(self, tmp_path) -> None:
        with patch.object(FileQuotaCache, "probe", return_value=False):
            cache = create_quota_cache(
                QuotaSettings(cache_backend="auto", cache_dir=str(tmp_path))
            )
        assert isinstance(cache, InMemoryQuotaCache)

    def test_file_backend_requires_probe(self, tmp_path) -> None:
        with patch.object(FileQuotaCache, "probe", return_value=False):
            with pytest.raises(ConfigurationAppError) as exc_info:
                create_quota_cache(QuotaSettings(cache_backend="file", cache_dir=str(tmp_path)))

        assert exc_info.value.code == "quota_cache_unavailable"

    def test_unknown_backend(self) -> None:
        with pytest.raises(ConfigurationAppError) as exc_info:
            create_quota_cache(QuotaSettings(cache_backend="redis"))

        assert exc_info.value.code == "quota_cache_unknown_backend"
