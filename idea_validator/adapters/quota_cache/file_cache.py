"""File-backed quota cache.

Each user's entry is a small JSON document in ``directory``; file names are
hashed so arbitrary user ids are safe on disk. Entries older than
``max_age_seconds`` are treated as absent and removed, the same way an
expiring browser cookie disappears.
"""

from __future__ import annotations

import json
import logging
import os
import time
import uuid
from hashlib import sha256
from pathlib import Path
from typing import Callable

from idea_validator.adapters.quota_cache.base import AbstractQuotaCache, CacheEntry

logger = logging.getLogger(__name__)

FILE_PREFIX = "quota_"


class FileQuotaCache(AbstractQuotaCache):
    """Persistent cache surviving process restarts on the same host."""

    def __init__(
        self,
        directory: str | Path,
        *,
        max_age_seconds: float = 7 * 24 * 3600.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._directory = Path(directory)
        self._max_age = max_age_seconds
        self._clock = clock

    @staticmethod
    def probe(directory: str | Path) -> bool:
        """Check that ``directory`` can be created, written, read and cleaned.

        Returns:
            True if the file-backed cache is usable on this host.
        """
        path = Path(directory)
        probe_file = path / f".probe-{uuid.uuid4().hex}"
        try:
            path.mkdir(parents=True, exist_ok=True)
            probe_file.write_text("probe", encoding="utf-8")
            ok = probe_file.read_text(encoding="utf-8") == "probe"
            probe_file.unlink()
            return ok
        except OSError as exc:
            logger.info(
                "quota_cache.probe_failed",
                extra={"directory": str(path), "error_type": type(exc).__name__},
            )
            return False

    def _path_for(self, user_id: str) -> Path:
        digest = sha256(user_id.encode("utf-8")).hexdigest()[:32]
        return self._directory / f"{FILE_PREFIX}{digest}.json"

    def get(self, user_id: str) -> CacheEntry | None:
        path = self._path_for(user_id)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            entry = CacheEntry(count=int(raw["count"]), cached_at=float(raw["cached_at"]))
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning(
                "quota_cache.unreadable_entry",
                extra={"path": path.name, "error_type": type(exc).__name__},
            )
            self._unlink(path)
            return None

        if entry.age(self._clock()) > self._max_age:
            self._unlink(path)
            return None
        return entry

    def set(self, user_id: str, entry: CacheEntry) -> None:
        path = self._path_for(user_id)
        tmp_path = path.parent / f"{path.name}.{uuid.uuid4().hex}.tmp"
        payload = json.dumps({"count": entry.count, "cached_at": entry.cached_at})
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            logger.warning(
                "quota_cache.write_failed",
                extra={"path": path.name, "error_type": type(exc).__name__},
            )
            self._unlink(tmp_path)

    def delete(self, user_id: str) -> None:
        self._unlink(self._path_for(user_id))

    def clear(self) -> None:
        if not self._directory.is_dir():
            return
        for path in self._directory.glob(f"{FILE_PREFIX}*.json"):
            self._unlink(path)

    @staticmethod
    def _unlink(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.debug("quota_cache.unlink_failed", extra={"path": path.name})
