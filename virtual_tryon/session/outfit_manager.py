"""Outfit stack manager: garment selection, fitting, undo and pose changes."""

from __future__ import annotations

import asyncio
import logging

from pydantic import BaseModel

from ..errors import GenerationError, TryOnError, ValidationError
from ..models.outfit import OutfitLayer, OutfitStack
from ..models.wardrobe import ItemCategory, WardrobeItem
from ..utils.logging import get_logger, log_event
from ..utils.messages import friendly_error_message
from . import pose_state
from .pose_resolver import PoseImageResolver

LOGGER = get_logger(__name__)

FIT_ERROR_CONTEXT = "Failed to apply garment"
POSE_ERROR_CONTEXT = "Failed to change pose"


class LayerSummary(BaseModel):
    """Read-only view of one outfit layer."""
    layer_id: str
    garments: list[WardrobeItem]
    pose_keys: list[str]


class SessionSnapshot(BaseModel):
    """Everything the presentation layer needs to render a try-on session."""
    layers: list[LayerSummary]
    pose_index: int
    pose_instruction: str
    display_image: str
    available_pose_keys: list[str]
    can_change_pose: bool
    pending_selection: list[WardrobeItem]
    active_garment_ids: list[str]
    busy: bool
    error: str | None = None


class OutfitStackManager:
    """Owns the outfit stack and pose index for one try-on session.

    At most one mutating operation (fit, pose change, undo, start over) runs at
    a time; requests made while ``busy`` return ``False`` without effect.
    Failures are converted into ``error_message`` and leave the previously
    committed state untouched.
    """

    def __init__(self, model_image: str, resolver: PoseImageResolver):
        self.model_image = model_image
        self.resolver = resolver
        self.pose_instructions = resolver.pose_instructions
        self.stack = OutfitStack.for_model(model_image, self.pose_instructions[0])
        self.pose_state: pose_state.PoseState = pose_state.Idle(0)
        self.pending: dict[ItemCategory, WardrobeItem] = {}
        self.busy = False
        self.last_error: TryOnError | None = None
        self.error_message: str | None = None

    # Derived state

    @property
    def pose_index(self) -> int:
        return pose_state.displayed_index(self.pose_state)

    @property
    def pose_instruction(self) -> str:
        return self.pose_instructions[self.pose_index]

    @property
    def current_layer(self) -> OutfitLayer:
        return self.stack.current

    @property
    def display_image(self) -> str:
        """Image of the current layer at the active pose (or its canonical image)."""
        return self.current_layer.image_for(self.pose_instruction) or self.model_image

    @property
    def available_pose_keys(self) -> list[str]:
        return self.current_layer.pose_keys

    @property
    def can_change_pose(self) -> bool:
        return not self.busy

    @property
    def pending_selection(self) -> list[WardrobeItem]:
        return list(self.pending.values())

    @property
    def active_garment_ids(self) -> list[str]:
        return [garment_id for layer in self.stack.layers for garment_id in layer.garment_ids]

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            layers=[
                LayerSummary(layer_id=layer.layer_id, garments=layer.garments, pose_keys=layer.pose_keys)
                for layer in self.stack.layers
            ],
            pose_index=self.pose_index,
            pose_instruction=self.pose_instruction,
            display_image=self.display_image,
            available_pose_keys=self.available_pose_keys,
            can_change_pose=self.can_change_pose,
            pending_selection=self.pending_selection,
            active_garment_ids=self.active_garment_ids,
            busy=self.busy,
            error=self.error_message,
        )

    # Error bookkeeping

    def _record_error(self, error: TryOnError, context: str) -> None:
        self.last_error = error
        self.error_message = friendly_error_message(error, context)
        log_event(
            LOGGER,
            logging.WARNING,
            "operation_failed",
            context=context,
            error_type=type(error).__name__,
            error=str(error),
        )

    def _clear_error(self) -> None:
        self.last_error = None
        self.error_message = None

    # Operations

    def toggle_garment(self, item: WardrobeItem) -> bool:
        """Select ``item`` in its category slot, or deselect it if already chosen."""
        if self.busy:
            return False

        current = self.pending.get(item.category)
        if current is not None and current.id == item.id:
            del self.pending[item.category]
        else:
            # Re-insert so the selection order follows the latest choice
            self.pending.pop(item.category, None)
            self.pending[item.category] = item
        return True

    async def fit_outfit(self) -> bool:
        """Apply every pending garment on top of the current display image."""
        if self.busy:
            return False
        if not self.pending:
            error = ValidationError("Select at least one garment to fit")
            self._record_error(error, FIT_ERROR_CONTEXT)
            raise error

        self._clear_error()
        self.busy = True
        garments = self.pending_selection
        pose = self.pose_instruction
        base_image = self.display_image
        try:
            image = await self.resolver.apply_garments(base_image, garments)
        except TryOnError as exc:
            self._record_error(exc, FIT_ERROR_CONTEXT)
            return False
        except Exception as exc:
            LOGGER.exception("Unexpected failure while fitting outfit")
            self._record_error(GenerationError(str(exc)), FIT_ERROR_CONTEXT)
            return False
        finally:
            self.busy = False

        layer = OutfitLayer(garments=garments, pose_images={pose: image})
        self.stack.push(layer)
        self.pending.clear()
        log_event(
            LOGGER,
            logging.INFO,
            "layer_pushed",
            layer_id=layer.layer_id,
            depth=self.stack.depth,
            pose_index=self.pose_index,
        )
        return True

    def remove_last_layer(self) -> bool:
        """Pop the top layer and return to the first pose."""
        if self.busy or self.stack.top is None:
            return False
        layer = self.stack.pop()
        self.pose_state = pose_state.reduce(self.pose_state, pose_state.PoseReset(0))
        log_event(LOGGER, logging.INFO, "layer_popped", layer_id=layer.layer_id, depth=self.stack.depth)
        return True

    def start_over(self) -> bool:
        """Drop every layer, the selection, the pose and any error."""
        if self.busy:
            return False
        self.stack.clear()
        self.pending.clear()
        self.pose_state = pose_state.reduce(self.pose_state, pose_state.PoseReset(0))
        self._clear_error()
        return True

    async def select_pose(self, index: int) -> bool:
        """Show the current layer in another pose, generating it on a cache miss.

        The index moves optimistically before generation starts and is rolled
        back if generation fails.
        """
        if not 0 <= index < len(self.pose_instructions):
            error = ValidationError(f"Pose index {index} is out of range")
            self._record_error(error, POSE_ERROR_CONTEXT)
            raise error
        if self.busy:
            return False
        if index == self.pose_index:
            return True

        layer = self.current_layer
        pose = self.pose_instructions[index]
        cached = self.resolver.cached(layer, pose) is not None

        self._clear_error()
        self.pose_state = pose_state.reduce(self.pose_state, pose_state.PoseRequested(index, cached))
        if cached:
            return True

        self.busy = True
        try:
            await self.resolver.resolve(layer, pose)
        except TryOnError as exc:
            self._record_error(exc, POSE_ERROR_CONTEXT)
            self.pose_state = pose_state.reduce(self.pose_state, pose_state.PoseFailed(self.error_message))
            return False
        except Exception as exc:
            LOGGER.exception("Unexpected failure while changing pose")
            self._record_error(GenerationError(str(exc)), POSE_ERROR_CONTEXT)
            self.pose_state = pose_state.reduce(self.pose_state, pose_state.PoseFailed(self.error_message))
            return False
        except asyncio.CancelledError:
            # A cancelled pose change must not write into the layer later
            self.resolver.cancel(layer, pose)
            self.pose_state = pose_state.reduce(
                self.pose_state, pose_state.PoseFailed("Pose change was cancelled")
            )
            raise
        finally:
            self.busy = False

        self.pose_state = pose_state.reduce(self.pose_state, pose_state.PoseResolved())
        return True
