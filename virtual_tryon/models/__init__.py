"""Data models for the virtual try-on studio."""

from .wardrobe import DEFAULT_WARDROBE, ItemCategory, WardrobeItem
from .outfit import OutfitLayer, OutfitStack
from .user_model import CURRENT_USER_ID, UserModel

__all__ = [
    "DEFAULT_WARDROBE",
    "ItemCategory",
    "WardrobeItem",
    "OutfitLayer",
    "OutfitStack",
    "CURRENT_USER_ID",
    "UserModel",
]
