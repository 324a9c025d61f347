"""Wardrobe catalog collection."""

from __future__ import annotations

import sqlite3
from typing import Iterable

from ..models.wardrobe import WardrobeItem
from .database import Database

_UPSERT = """
    INSERT INTO wardrobe (id, name, url, category, position)
    VALUES (:id, :name, :url, :category, :position)
    ON CONFLICT(id) DO UPDATE SET
        name = excluded.name,
        url = excluded.url,
        category = excluded.category
"""


class WardrobeRepository:
    """Wardrobe items keyed by id, listed in insertion order."""

    def __init__(self, database: Database) -> None:
        self.database = database

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> WardrobeItem:
        return WardrobeItem(id=row["id"], name=row["name"], url=row["url"], category=row["category"])

    @staticmethod
    def _params(item: WardrobeItem, position: int) -> dict:
        return {
            "id": item.id,
            "name": item.name,
            "url": item.url,
            "category": item.category.value,
            "position": position,
        }

    @staticmethod
    def _next_position(conn: sqlite3.Connection) -> int:
        return int(conn.execute("SELECT COALESCE(MAX(position), -1) + 1 FROM wardrobe").fetchone()[0])

    async def get(self, item_id: str) -> WardrobeItem | None:
        row = self.database.run(
            lambda conn: conn.execute("SELECT * FROM wardrobe WHERE id = ?", (item_id,)).fetchone()
        )
        return self._row_to_item(row) if row else None

    async def get_all(self) -> list[WardrobeItem]:
        rows = self.database.run(
            lambda conn: conn.execute("SELECT * FROM wardrobe ORDER BY position, id").fetchall()
        )
        return [self._row_to_item(row) for row in rows]

    async def put(self, item: WardrobeItem) -> None:
        """Insert or overwrite one item; existing items keep their position."""

        def upsert(conn: sqlite3.Connection) -> None:
            conn.execute(_UPSERT, self._params(item, self._next_position(conn)))

        self.database.run(upsert)

    async def put_all(self, items: Iterable[WardrobeItem]) -> None:
        """Write every item in one transaction: either all land or none do."""
        items = list(items)

        def upsert_all(conn: sqlite3.Connection) -> None:
            start = self._next_position(conn)
            conn.executemany(_UPSERT, [self._params(item, start + offset) for offset, item in enumerate(items)])

        self.database.run(upsert_all)

    async def delete(self, item_id: str) -> None:
        self.database.run(lambda conn: conn.execute("DELETE FROM wardrobe WHERE id = ?", (item_id,)))

    async def clear(self) -> None:
        self.database.run(lambda conn: conn.execute("DELETE FROM wardrobe"))
