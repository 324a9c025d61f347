"""Wardrobe catalog service: load, seed, edit and save with graceful degradation."""

import logging
import uuid
from typing import Iterable

from ..errors import StorageError
from ..models.wardrobe import DEFAULT_WARDROBE, ItemCategory, WardrobeItem
from ..storage.wardrobe_repository import WardrobeRepository
from ..utils.logging import get_logger, log_event

LOGGER = get_logger(__name__)


class WardrobeCatalog:
    """In-memory wardrobe mirrored to the wardrobe collection.

    The store is off the critical path: when it fails, the error is logged and
    the in-memory catalog keeps working.
    """

    def __init__(self, repository: WardrobeRepository, defaults: Iterable[WardrobeItem] = DEFAULT_WARDROBE):
        self.repository = repository
        self.defaults = list(defaults)
        self._items: dict[str, WardrobeItem] = {}
        self.loaded = False

    @property
    def items(self) -> list[WardrobeItem]:
        return list(self._items.values())

    def get(self, item_id: str) -> WardrobeItem | None:
        return self._items.get(item_id)

    async def load(self) -> list[WardrobeItem]:
        """Load the catalog, seeding the defaults atomically when it is empty."""
        try:
            items = await self.repository.get_all()
            if not items:
                await self.repository.put_all(self.defaults)
                items = list(self.defaults)
                log_event(LOGGER, logging.INFO, "wardrobe_seeded", count=len(items))
        except StorageError as exc:
            log_event(LOGGER, logging.ERROR, "wardrobe_load_failed", error=str(exc))
            items = list(self.defaults)

        self._items = {item.id: item for item in items}
        self.loaded = True
        return self.items

    async def _save(self, item: WardrobeItem) -> None:
        try:
            await self.repository.put(item)
        except StorageError as exc:
            log_event(LOGGER, logging.ERROR, "wardrobe_save_failed", item_id=item.id, error=str(exc))

    async def add(self, name: str, url: str, category: ItemCategory, item_id: str | None = None) -> WardrobeItem:
        """Add a new garment (e.g. an upload) to the catalog."""
        item = WardrobeItem(
            id=item_id or f"custom-{uuid.uuid4().hex[:12]}",
            name=name,
            url=url,
            category=category,
        )
        self._items[item.id] = item
        await self._save(item)
        return item

    async def update(
        self,
        item_id: str,
        name: str | None = None,
        category: ItemCategory | None = None,
    ) -> WardrobeItem | None:
        """Rename and/or recategorize an item."""
        current = self._items.get(item_id)
        if current is None:
            return None
        updated = current.renamed(name=name, category=category)
        self._items[item_id] = updated
        await self._save(updated)
        return updated

    async def remove(self, item_id: str) -> bool:
        if self._items.pop(item_id, None) is None:
            return False
        try:
            await self.repository.delete(item_id)
        except StorageError as exc:
            log_event(LOGGER, logging.ERROR, "wardrobe_delete_failed", item_id=item_id, error=str(exc))
        return True
