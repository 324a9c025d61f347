"""Composition root wiring the store, gateway, catalog and try-on session."""

import logging

from .config import TryOnConfig
from .errors import ValidationError
from .models.wardrobe import ItemCategory, WardrobeItem
from .services.gemini_client import GenerationGateway
from .services.image_loader import ImageLoader
from .services.wardrobe_catalog import WardrobeCatalog
from .session.outfit_manager import OutfitStackManager
from .session.pose_resolver import PoseImageResolver
from .storage.store import PersistentStore
from .utils.images import CropBox, crop_to_image
from .utils.logging import get_logger, log_event

LOGGER = get_logger(__name__)


class TryOnStudio:
    """One user's studio: model image, wardrobe and the active try-on session."""

    def __init__(
        self,
        config: TryOnConfig,
        store: PersistentStore,
        gateway: GenerationGateway | None = None,
    ):
        self.config = config
        self.store = store
        if gateway is None:
            loader = ImageLoader(timeout=config.images.download_timeout, cache=store.cache)
            gateway = GenerationGateway(
                config.gemini.model_copy(update={"api_key": config.api_key}),
                image_config=config.images,
                image_loader=loader,
            )
        self.gateway = gateway
        self.resolver = PoseImageResolver(gateway, config.pose_instructions)
        self.catalog = WardrobeCatalog(store.wardrobe)
        self.model_image: str | None = None
        self.session: OutfitStackManager | None = None
        self._loaded = False

    async def load(self) -> None:
        """Read the stored model image and wardrobe once per process."""
        if self._loaded:
            return
        self.model_image = await self.store.user_model.get()
        await self.catalog.load()
        self._loaded = True

    async def require_session(self) -> OutfitStackManager:
        """The active session, created on demand for the stored model."""
        await self.load()
        if self.model_image is None:
            raise ValidationError("Create a model before trying on garments")
        if self.session is None or self.session.model_image != self.model_image:
            self.session = OutfitStackManager(self.model_image, self.resolver)
        return self.session

    async def create_model(self, photo: str) -> str:
        """Generate a studio model from a user photo and persist it."""
        await self.load()
        model_image = await self.gateway.generate_model_image(photo)
        await self.store.user_model.put(model_image)
        self.model_image = model_image
        self.session = None
        log_event(LOGGER, logging.INFO, "model_created")
        return model_image

    async def start_over(self) -> bool:
        """Forget the model and the outfit; the wardrobe is kept."""
        if self.session is not None and not self.session.start_over():
            return False
        await self.store.user_model.delete()
        self.model_image = None
        self.session = None
        return True

    async def upload_garment(
        self,
        name: str,
        category: ItemCategory,
        image: str,
        crop: CropBox | None = None,
        remove_background: bool = False,
    ) -> WardrobeItem:
        """Add an uploaded garment, optionally cropped and cut out first."""
        await self.load()
        if remove_background:
            image = await self.gateway.remove_background(image)
        if crop is not None:
            payload = await self.gateway.image_loader.load(image)
            image = crop_to_image(payload, crop).to_data_url()
        return await self.catalog.add(name=name, url=image, category=category)

    async def toggle_garment(self, item_id: str) -> bool:
        session = await self.require_session()
        item = self.catalog.get(item_id)
        if item is None:
            raise ValidationError(f"Unknown wardrobe item {item_id}")
        return session.toggle_garment(item)

    async def fit_outfit(self) -> bool:
        session = await self.require_session()
        return await session.fit_outfit()

    async def close(self) -> None:
        await self.gateway.close()
        await self.store.close()
