"""Versioned key-value persistence."""

from .database import SCHEMA_VERSION, Database
from .cache_repository import CacheEntry, CacheRepository
from .user_model_repository import UserModelRepository
from .wardrobe_repository import WardrobeRepository
from .store import PersistentStore, get_store, reset_store

__all__ = [
    "SCHEMA_VERSION",
    "Database",
    "CacheEntry",
    "CacheRepository",
    "UserModelRepository",
    "WardrobeRepository",
    "PersistentStore",
    "get_store",
    "reset_store",
]
