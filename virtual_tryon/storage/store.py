"""Persistent store facade over the three collections."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable

from ..config import StoreConfig
from .cache_repository import DEFAULT_TTL_SECONDS, CacheRepository
from .database import SCHEMA_VERSION, Database
from .user_model_repository import UserModelRepository
from .wardrobe_repository import WardrobeRepository


class PersistentStore:
    """Owns the database handle and exposes one repository per collection.

    The connection is opened on first use; ``open`` forces it early and
    ``close`` releases it. Usable as an async context manager.
    """

    def __init__(
        self,
        database_path: str | Path,
        cache_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        schema_version: int = SCHEMA_VERSION,
    ) -> None:
        self.database = Database(database_path, schema_version=schema_version)
        self.user_model = UserModelRepository(self.database)
        self.wardrobe = WardrobeRepository(self.database)
        self.cache = CacheRepository(self.database, ttl_seconds=cache_ttl_seconds, clock=clock)

    @classmethod
    def from_config(cls, config: StoreConfig) -> "PersistentStore":
        return cls(config.database_path, cache_ttl_seconds=config.cache_ttl_seconds)

    async def open(self) -> "PersistentStore":
        self.database.connection
        return self

    async def close(self) -> None:
        self.database.close()

    async def __aenter__(self) -> "PersistentStore":
        return await self.open()

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


_store: PersistentStore | None = None


def get_store(config: StoreConfig | None = None) -> PersistentStore:
    """Get or create the process-wide store."""
    global _store
    if _store is None:
        _store = PersistentStore.from_config(config or StoreConfig())
    return _store


async def reset_store() -> None:
    """Close and forget the process-wide store."""
    global _store
    if _store is not None:
        await _store.close()
        _store = None
