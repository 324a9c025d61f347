"""Versioned SQLite database backing the persistent store."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Callable, TypeVar

from ..errors import StorageError
from ..utils.logging import get_logger, log_event

LOGGER = get_logger(__name__)
T = TypeVar("T")

# Additive migrations only: each step creates a collection and never rewrites rows.
MIGRATIONS: dict[int, list[str]] = {
    1: [
        """
        CREATE TABLE IF NOT EXISTS user_model (
            id TEXT PRIMARY KEY,
            image_url TEXT NOT NULL
        )
        """,
    ],
    2: [
        """
        CREATE TABLE IF NOT EXISTS wardrobe (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            url TEXT NOT NULL,
            category TEXT NOT NULL,
            position INTEGER NOT NULL DEFAULT 0
        )
        """,
    ],
    3: [
        """
        CREATE TABLE IF NOT EXISTS cache (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            timestamp REAL NOT NULL
        )
        """,
    ],
}
SCHEMA_VERSION = max(MIGRATIONS)


class Database:
    """Lazily opened, memoized SQLite connection with schema migrations."""

    def __init__(self, database_path: str | Path, schema_version: int = SCHEMA_VERSION) -> None:
        if schema_version not in MIGRATIONS:
            raise ValueError(f"Unknown schema version {schema_version}")
        self.database_path = Path(database_path)
        self.schema_version = schema_version
        self._conn: sqlite3.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or open the shared connection."""
        if self._conn is None:
            self._conn = self._open()
        return self._conn

    def _open(self) -> sqlite3.Connection:
        try:
            if self.database_path.parent and not self.database_path.parent.exists():
                self.database_path.parent.mkdir(parents=True, exist_ok=True)
            # All access is serialized by the event loop, which may sit on any thread.
            conn = sqlite3.connect(self.database_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            self._migrate(conn)
        except (sqlite3.Error, OSError) as exc:
            raise StorageError(f"Could not open database {self.database_path}: {exc}") from exc
        return conn

    def _migrate(self, conn: sqlite3.Connection) -> None:
        current = self.current_version(conn)
        if current >= self.schema_version:
            return

        with conn:
            for version in sorted(MIGRATIONS):
                if current < version <= self.schema_version:
                    for statement in MIGRATIONS[version]:
                        conn.execute(statement)
            conn.execute(f"PRAGMA user_version = {int(self.schema_version)}")

        log_event(
            LOGGER,
            logging.INFO,
            "schema_migrated",
            from_version=current,
            to_version=self.schema_version,
            path=str(self.database_path),
        )

    @staticmethod
    def current_version(conn: sqlite3.Connection) -> int:
        return int(conn.execute("PRAGMA user_version").fetchone()[0])

    def table_names(self) -> set[str]:
        rows = self.run(lambda conn: conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall())
        return {row["name"] for row in rows}

    def run(self, operation: Callable[[sqlite3.Connection], T]) -> T:
        """Run an operation in one transaction, committing on success."""
        conn = self.connection
        try:
            with conn:
                return operation(conn)
        except sqlite3.Error as exc:
            raise StorageError(f"Database operation failed: {exc}") from exc

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
