"""Resolves a layer in a pose to an image, generating at most once per key."""

from __future__ import annotations

import asyncio
import logging

from ..errors import ValidationError
from ..models.outfit import OutfitLayer
from ..models.wardrobe import WardrobeItem
from ..services.gemini_client import GenerationGateway
from ..utils.logging import get_logger, log_event

LOGGER = get_logger(__name__)


class PoseImageResolver:
    """Per-layer pose cache in front of the generation gateway.

    Concurrent resolutions of the same ``(layer_id, pose)`` share one task, so
    only one generation call is ever outstanding for a key.
    """

    def __init__(self, gateway: GenerationGateway, pose_instructions: list[str]):
        if not pose_instructions:
            raise ValueError("At least one pose instruction is required")
        self.gateway = gateway
        self.pose_instructions = list(pose_instructions)
        self._in_flight: dict[tuple[str, str], asyncio.Task] = {}

    @staticmethod
    def cached(layer: OutfitLayer, pose_instruction: str) -> str | None:
        return layer.pose_images.get(pose_instruction)

    def is_in_flight(self, layer: OutfitLayer, pose_instruction: str) -> bool:
        return (layer.layer_id, pose_instruction) in self._in_flight

    def cancel(self, layer: OutfitLayer, pose_instruction: str) -> bool:
        """Cancel an outstanding generation for a key; returns whether one was running."""
        task = self._in_flight.pop((layer.layer_id, pose_instruction), None)
        if task is None or task.done():
            return False
        task.cancel()
        log_event(LOGGER, logging.INFO, "pose_generation_cancelled", layer_id=layer.layer_id, pose=pose_instruction)
        return True

    def reference_image(self, layer: OutfitLayer) -> str:
        """Image that drives pose transforms for a layer.

        The base model uses its first-pose image; a garment layer uses its
        canonical image so every pose of one outfit derives from the same shot.
        """
        reference = None
        if layer.is_base:
            reference = layer.pose_images.get(self.pose_instructions[0])
        reference = reference or layer.canonical_image
        if reference is None:
            raise ValidationError("Layer has no image to derive a pose from")
        return reference

    async def resolve(self, layer: OutfitLayer, pose_instruction: str) -> str:
        """Return the layer's image for a pose, generating it if needed."""
        hit = self.cached(layer, pose_instruction)
        if hit is not None:
            return hit

        key = (layer.layer_id, pose_instruction)
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._generate(layer, pose_instruction))
            self._in_flight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        else:
            log_event(LOGGER, logging.DEBUG, "pose_join_in_flight", layer_id=layer.layer_id, pose=pose_instruction)

        return await asyncio.shield(task)

    def _forget(self, key: tuple[str, str], task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    async def _generate(self, layer: OutfitLayer, pose_instruction: str) -> str:
        reference = self.reference_image(layer)
        log_event(LOGGER, logging.INFO, "pose_generation_started", layer_id=layer.layer_id, pose=pose_instruction)
        image = await self.gateway.change_pose(reference, pose_instruction)
        # Racing writers produce equivalent content; last write wins.
        layer.add_pose_image(pose_instruction, image)
        return image

    async def apply_garments(self, base_image: str, garments: list[WardrobeItem]) -> str:
        """Generate the image of ``base_image`` wearing ``garments``."""
        if not garments:
            raise ValidationError("Select at least one garment to fit")
        log_event(
            LOGGER,
            logging.INFO,
            "fit_generation_started",
            garment_ids=[garment.id for garment in garments],
        )
        return await self.gateway.apply_garments(base_image, [garment.url for garment in garments])
