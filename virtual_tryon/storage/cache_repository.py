"""Generic key-value cache collection with lazy TTL expiry."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from ..errors import StorageError
from ..utils.logging import get_logger, log_event
from .database import Database

LOGGER = get_logger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class CacheEntry:
    """A cached value and the time it was written."""
    key: str
    value: Any
    timestamp: float


class CacheRepository:
    """TTL-bounded cache; expired entries are removed when read."""

    def __init__(
        self,
        database: Database,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.database = database
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self.clock() - entry.timestamp < self.ttl_seconds

    async def get_entry(self, key: str) -> CacheEntry | None:
        """Raw entry lookup without TTL enforcement."""
        row = self.database.run(
            lambda conn: conn.execute("SELECT key, value, timestamp FROM cache WHERE key = ?", (key,)).fetchone()
        )
        if row is None:
            return None
        try:
            value = json.loads(row["value"])
        except ValueError as exc:
            raise StorageError(f"Cache entry {key!r} is corrupt: {exc}") from exc
        return CacheEntry(key=row["key"], value=value, timestamp=row["timestamp"])

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None when missing or expired."""
        entry = await self.get_entry(key)
        if entry is None:
            return None
        if self._is_fresh(entry):
            return entry.value

        try:
            await self.delete(key)
        except StorageError as exc:
            log_event(LOGGER, logging.ERROR, "cache_expiry_delete_failed", key=key, error=str(exc))
        return None

    async def put(self, key: str, value: Any) -> None:
        """Write a value, replacing any previous entry wholesale."""
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Cache value for {key!r} is not serializable: {exc}") from exc

        timestamp = self.clock()
        self.database.run(
            lambda conn: conn.execute(
                "INSERT OR REPLACE INTO cache (key, value, timestamp) VALUES (?, ?, ?)",
                (key, payload, timestamp),
            )
        )

    async def delete(self, key: str) -> None:
        self.database.run(lambda conn: conn.execute("DELETE FROM cache WHERE key = ?", (key,)))
