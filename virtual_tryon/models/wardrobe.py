"""Wardrobe catalog models."""

from enum import Enum

from pydantic import BaseModel, Field


class ItemCategory(str, Enum):
    """Category slot a garment occupies in an outfit."""
    TOP = "top"
    BOTTOM = "bottom"
    OUTERWEAR = "outerwear"
    SHOES = "shoes"
    ACCESSORY = "accessory"


class WardrobeItem(BaseModel):
    """A garment in the user's wardrobe."""

    id: str = Field(min_length=1)
    name: str
    url: str = Field(description="Image reference: data URL or http(s) URL")
    category: ItemCategory

    model_config = {"frozen": True}

    def renamed(self, name: str | None = None, category: ItemCategory | None = None) -> "WardrobeItem":
        """Return a copy with a new name and/or category."""
        updates: dict = {}
        if name is not None:
            updates["name"] = name
        if category is not None:
            updates["category"] = ItemCategory(category)
        return self.model_copy(update=updates)


_EXAMPLES_BASE = "https://raw.githubusercontent.com/daniele21/smart-wardrobe"

# Seed catalog used when the wardrobe collection is empty
DEFAULT_WARDROBE: list[WardrobeItem] = [
    WardrobeItem(
        id="white-tshirt",
        name="White T-shirt",
        url=f"{_EXAMPLES_BASE}/main/examples/tshirt.png",
        category=ItemCategory.TOP,
    ),
    WardrobeItem(
        id="lightblue-shirt",
        name="Lightblue",
        url=f"{_EXAMPLES_BASE}/refs/heads/main/examples/shirt.png",
        category=ItemCategory.TOP,
    ),
    WardrobeItem(
        id="polo-shirt",
        name="Polo",
        url=f"{_EXAMPLES_BASE}/refs/heads/main/examples/polo.png",
        category=ItemCategory.TOP,
    ),
    WardrobeItem(
        id="jeans-main",
        name="Jeans",
        url=f"{_EXAMPLES_BASE}/refs/heads/main/examples/pant1.png",
        category=ItemCategory.BOTTOM,
    ),
    WardrobeItem(
        id="pants-blue",
        name="Pants1",
        url=f"{_EXAMPLES_BASE}/refs/heads/main/examples/pant2.png",
        category=ItemCategory.BOTTOM,
    ),
    WardrobeItem(
        id="pants-brown",
        name="Pants2",
        url=f"{_EXAMPLES_BASE}/refs/heads/main/examples/pant3.png",
        category=ItemCategory.BOTTOM,
    ),
]
