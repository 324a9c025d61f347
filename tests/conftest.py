# Test fixtures and configuration
import asyncio
import io
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from virtual_tryon.config import POSE_INSTRUCTIONS, TryOnConfig
from virtual_tryon.models import ItemCategory, WardrobeItem
from virtual_tryon.services.image_loader import ImageLoader
from virtual_tryon.session import OutfitStackManager, PoseImageResolver
from virtual_tryon.storage import PersistentStore
from virtual_tryon.studio import TryOnStudio
from virtual_tryon.utils.images import to_data_url


def make_png(width: int = 4, height: int = 4, color=(200, 30, 30), mode: str = "RGB") -> bytes:
    """Encode a solid-color PNG of the given size."""
    image = Image.new(mode, (width, height), color)
    output = io.BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()


def make_data_url(width: int = 4, height: int = 4, color=(200, 30, 30)) -> str:
    return to_data_url(make_png(width, height, color), "image/png")


class FakeGateway:
    """Records generation calls and returns numbered images.

    ``fail_with`` raises on the next call; ``gate`` holds calls until it is set.
    """

    def __init__(self):
        self.pose_calls: list[tuple[str, str]] = []
        self.fit_calls: list[tuple[str, list[str]]] = []
        self.fail_with: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def _maybe_fail(self):
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            error, self.fail_with = self.fail_with, None
            raise error

    async def change_pose(self, base_image: str, pose_instruction: str) -> str:
        self.pose_calls.append((base_image, pose_instruction))
        await self._maybe_fail()
        return f"pose-image-{len(self.pose_calls)}"

    async def apply_garments(self, base_image: str, garment_images: list[str]) -> str:
        self.fit_calls.append((base_image, list(garment_images)))
        await self._maybe_fail()
        return f"fit-image-{len(self.fit_calls)}"


@pytest.fixture
def minimal_png_bytes():
    """Minimal valid PNG image bytes."""
    return make_png(1, 1)


@pytest.fixture
def poses():
    return list(POSE_INSTRUCTIONS)


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def resolver(fake_gateway, poses):
    return PoseImageResolver(fake_gateway, poses)


@pytest.fixture
def manager(resolver):
    return OutfitStackManager(model_image="model-image", resolver=resolver)


@pytest.fixture
def top():
    return WardrobeItem(id="white-tshirt", name="White T-shirt", url="top-url", category=ItemCategory.TOP)


@pytest.fixture
def other_top():
    return WardrobeItem(id="polo-shirt", name="Polo", url="polo-url", category=ItemCategory.TOP)


@pytest.fixture
def bottom():
    return WardrobeItem(id="jeans-main", name="Jeans", url="jeans-url", category=ItemCategory.BOTTOM)


@pytest.fixture
def store(tmp_path):
    """Store on a temporary database file."""
    store = PersistentStore(tmp_path / "tryon.db")
    yield store
    store.database.close()


class StudioGateway(FakeGateway):
    """Fake gateway covering the model and upload operations too."""

    def __init__(self):
        super().__init__()
        self.image_loader = ImageLoader()
        self.model_calls: list[str] = []
        self.background_calls: list[str] = []
        self.closed = False

    async def generate_model_image(self, photo: str) -> str:
        self.model_calls.append(photo)
        await self._maybe_fail()
        return "studio-model"

    async def remove_background(self, image: str) -> str:
        self.background_calls.append(image)
        return make_data_url(10, 10)

    async def close(self):
        self.closed = True


@pytest.fixture
def studio_gateway():
    return StudioGateway()


@pytest.fixture
def studio(store, studio_gateway):
    return TryOnStudio(TryOnConfig(gemini_api_key="test-key"), store, gateway=studio_gateway)
