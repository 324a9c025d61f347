"""Outfit layer and stack models."""

import uuid

from pydantic import BaseModel, Field

from .wardrobe import WardrobeItem


class OutfitLayer(BaseModel):
    """One applied outfit state with its pose-keyed image cache.

    A layer with no garments stands for the unmodified model.
    """

    layer_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    garments: list[WardrobeItem] = Field(default_factory=list)

    # pose instruction -> image reference; insertion order is kept
    pose_images: dict[str, str] = Field(default_factory=dict)

    @property
    def is_base(self) -> bool:
        return not self.garments

    @property
    def canonical_image(self) -> str | None:
        """First image stored for this layer (the fit result for garment layers)."""
        return next(iter(self.pose_images.values()), None)

    @property
    def pose_keys(self) -> list[str]:
        return list(self.pose_images)

    @property
    def garment_ids(self) -> list[str]:
        return [garment.id for garment in self.garments]

    def image_for(self, pose_instruction: str) -> str | None:
        """Image for a pose, falling back to the canonical image."""
        return self.pose_images.get(pose_instruction) or self.canonical_image

    def add_pose_image(self, pose_instruction: str, image: str) -> None:
        """Record a resolved pose; pose entries are only ever added."""
        self.pose_images[pose_instruction] = image


class OutfitStack(BaseModel):
    """Ordered garment layers on top of the base model layer."""

    base: OutfitLayer
    layers: list[OutfitLayer] = Field(default_factory=list)

    @classmethod
    def for_model(cls, model_image: str, first_pose: str) -> "OutfitStack":
        """Create an empty stack for a model image shown in the first pose."""
        return cls(base=OutfitLayer(pose_images={first_pose: model_image}))

    @property
    def top(self) -> OutfitLayer | None:
        return self.layers[-1] if self.layers else None

    @property
    def current(self) -> OutfitLayer:
        """Top garment layer, or the base layer when nothing is applied."""
        return self.top or self.base

    @property
    def depth(self) -> int:
        return len(self.layers)

    def push(self, layer: OutfitLayer) -> None:
        self.layers.append(layer)

    def pop(self) -> OutfitLayer | None:
        return self.layers.pop() if self.layers else None

    def clear(self) -> None:
        self.layers.clear()
