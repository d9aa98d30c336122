"""
Best-effort result cache for the orchestration layer.

The cache is never a source of truth: every storage failure is logged and
treated as a miss on read, or dropped on write.
"""

import asyncio
import os
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any, Dict, Optional

import orjson

from stackr_ai.models import AISettings, CacheEntry
from stackr_ai.telemetry import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]


class CacheStore(ABC):
    """Keyed store of ``{data, timestamp}`` records with TTL expiry."""

    def __init__(self, clock: Clock = time.time):
        self.clock = clock

    @abstractmethod
    async def _load(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the raw record for ``key`` or None if there is none."""

    @abstractmethod
    async def _save(self, key: str, record: Dict[str, Any]) -> None:
        """Persist the raw record for ``key``, replacing any previous one."""

    @abstractmethod
    async def _delete(self, key: str) -> None:
        """Remove the record for ``key`` if present."""

    @abstractmethod
    async def _clear(self) -> int:
        """Remove every record and return how many were removed."""

    async def get(self, key: str, settings: AISettings) -> Optional[CacheEntry]:
        """
        Look up a live entry.

        Returns None when caching is disabled, the entry is missing or older
        than ``settings.cache_ttl`` (stale entries are removed), or storage
        fails in any way.
        """
        if not settings.cache_enabled:
            return None

        try:
            record = await self._load(key)
            if record is None:
                logger.debug("cache_miss", key=key)
                return None
            entry = CacheEntry(key=key, data=record["data"], timestamp=record["timestamp"])
        except Exception as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            return None

        if entry.age_seconds(self.clock()) > settings.cache_ttl:
            logger.debug("cache_expired", key=key)
            try:
                await self._delete(key)
            except Exception as e:
                logger.warning("cache_evict_failed", key=key, error=str(e))
            return None

        logger.debug("cache_hit", key=key)
        return entry

    async def put(self, key: str, data: Any, settings: AISettings) -> None:
        """Store ``data`` under ``key`` stamped with the current time."""
        if not settings.cache_enabled:
            return

        record = {"data": data, "timestamp": int(self.clock() * 1000)}
        try:
            await self._save(key, record)
        except Exception as e:
            logger.error("cache_write_failed", key=key, error=str(e))

    async def clear(self) -> int:
        """Remove every entry; failures are logged and counted as nothing removed."""
        try:
            removed = await self._clear()
        except Exception as e:
            logger.error("cache_clear_failed", error=str(e))
            return 0
        logger.info("cache_cleared", removed=removed)
        return removed


class FileCacheStore(CacheStore):
    """One ``<key>.json`` file per entry under ``cache_dir``."""

    def __init__(self, cache_dir: str | os.PathLike = "./.cache", clock: Clock = time.time):
        super().__init__(clock)
        self.cache_dir = Path(cache_dir)

    def _path(self, key: str) -> Path:
        return self.cache_dir / f"{key}.json"

    def _read(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            raw = self._path(key).read_bytes()
        except FileNotFoundError:
            return None
        return orjson.loads(raw)

    def _write(self, key: str, record: Dict[str, Any]) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        content = orjson.dumps(record)
        # Readers never see a partially written file; concurrent writers: last one wins
        tmp_path = self.cache_dir / f".{key}.{uuid.uuid4().hex}.tmp"
        try:
            tmp_path.write_bytes(content)
            os.replace(tmp_path, self._path(key))
        finally:
            tmp_path.unlink(missing_ok=True)

    def _remove_all(self) -> int:
        if not self.cache_dir.exists():
            return 0
        removed = 0
        for path in self.cache_dir.glob("*.json"):
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
        return removed

    async def _load(self, key: str) -> Optional[Dict[str, Any]]:
        return await asyncio.to_thread(self._read, key)

    async def _save(self, key: str, record: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._write, key, record)

    async def _delete(self, key: str) -> None:
        await asyncio.to_thread(self._path(key).unlink, missing_ok=True)

    async def _clear(self) -> int:
        return await asyncio.to_thread(self._remove_all)


class InMemoryCacheStore(CacheStore):
    """Process-local cache, used for tests and deployments without a writable disk."""

    def __init__(self, clock: Clock = time.time):
        super().__init__(clock)
        self.records: Dict[str, Dict[str, Any]] = {}

    async def _load(self, key: str) -> Optional[Dict[str, Any]]:
        record = self.records.get(key)
        # Round-trip through JSON so callers cannot mutate stored data
        return orjson.loads(orjson.dumps(record)) if record is not None else None

    async def _save(self, key: str, record: Dict[str, Any]) -> None:
        self.records[key] = orjson.loads(orjson.dumps(record))

    async def _delete(self, key: str) -> None:
        self.records.pop(key, None)

    async def _clear(self) -> int:
        removed = len(self.records)
        self.records.clear()
        return removed
