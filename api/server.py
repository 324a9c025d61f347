"""FastAPI server for the virtual try-on studio.

Exposes the try-on session to a browser front end:
- model: create a studio model from a photo, or delete it to start over
- wardrobe: list, upload, edit and delete garments
- session: toggle garments, fit the outfit, undo, and switch poses
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from virtual_tryon.config import load_config
from virtual_tryon.errors import GenerationError, StorageError, TryOnError, ValidationError
from virtual_tryon.models import ItemCategory, WardrobeItem
from virtual_tryon.session import SessionSnapshot
from virtual_tryon.storage import get_store
from virtual_tryon.studio import TryOnStudio
from virtual_tryon.utils import CropBox, friendly_error_message
from virtual_tryon.utils.logging import configure_logging


app = FastAPI(
    title="Virtual Try-On API",
    description="Layered virtual try-on with pose variations",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ModelRequest(BaseModel):
    """Request body for model creation."""
    photo: str  # Base64 data URL


class ModelResponse(BaseModel):
    success: bool
    model_image: str | None = None
    error: str | None = None


class CropRequest(BaseModel):
    x: int
    y: int
    width: int
    height: int


class UploadRequest(BaseModel):
    """Request body for a garment upload."""
    name: str
    category: ItemCategory
    image: str  # Base64 data URL
    crop: CropRequest | None = None
    remove_background: bool = False


class ItemUpdateRequest(BaseModel):
    name: str | None = None
    category: ItemCategory | None = None


class PoseRequest(BaseModel):
    index: int


class SessionResponse(BaseModel):
    """Outcome of a session operation plus the resulting state."""
    success: bool
    accepted: bool = True
    state: SessionSnapshot | None = None
    error: str | None = None


# Initialize studio (will be done on first request)
_studio: TryOnStudio | None = None


def get_studio() -> TryOnStudio:
    """Get or create the studio instance."""
    global _studio
    if _studio is None:
        config = load_config()  # Loads from .env automatically via pydantic-settings
        configure_logging(config.log_level)
        _studio = TryOnStudio(config, get_store(config.store))
    return _studio


@app.exception_handler(TryOnError)
async def handle_tryon_error(request: Request, exc: TryOnError):
    if isinstance(exc, ValidationError):
        status_code = 400
    elif isinstance(exc, StorageError):
        status_code = 503
    elif isinstance(exc, GenerationError):
        status_code = 502
    else:
        status_code = 500
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": friendly_error_message(exc, "Request failed")},
    )


async def _session_response(accepted: bool) -> SessionResponse:
    session = await get_studio().require_session()
    return SessionResponse(
        success=accepted and session.error_message is None,
        accepted=accepted,
        state=session.snapshot(),
        error=session.error_message,
    )


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Virtual Try-On API", "version": "0.1.0"}


@app.get("/health")
async def health():
    """Detailed health check."""
    studio = get_studio()
    try:
        await studio.load()
        store_ok = True
    except StorageError:
        store_ok = False

    return {
        "status": "ok" if store_ok else "degraded",
        "store": "connected" if store_ok else "unavailable",
        "model": "ready" if studio.model_image else "missing",
    }


@app.get("/api/poses")
async def list_poses():
    return {"poses": get_studio().config.pose_instructions}


@app.get("/api/model", response_model=ModelResponse)
async def get_model():
    studio = get_studio()
    await studio.load()
    return ModelResponse(success=studio.model_image is not None, model_image=studio.model_image)


@app.post("/api/model", response_model=ModelResponse)
async def create_model(request: ModelRequest):
    """Generate a studio model image from the uploaded photo."""
    try:
        model_image = await get_studio().create_model(request.photo)
    except GenerationError as e:
        return ModelResponse(success=False, error=friendly_error_message(e, "Failed to create model"))
    return ModelResponse(success=True, model_image=model_image)


@app.delete("/api/model")
async def delete_model():
    """Start over: forget the model and the outfit, keep the wardrobe."""
    accepted = await get_studio().start_over()
    return {"success": accepted}


@app.get("/api/wardrobe", response_model=list[WardrobeItem])
async def list_wardrobe():
    studio = get_studio()
    await studio.load()
    return studio.catalog.items


@app.post("/api/wardrobe", response_model=WardrobeItem)
async def upload_garment(request: UploadRequest):
    crop = CropBox(**request.crop.model_dump()) if request.crop else None
    return await get_studio().upload_garment(
        name=request.name,
        category=request.category,
        image=request.image,
        crop=crop,
        remove_background=request.remove_background,
    )


@app.patch("/api/wardrobe/{item_id}", response_model=WardrobeItem)
async def update_garment(item_id: str, request: ItemUpdateRequest):
    studio = get_studio()
    await studio.load()
    item = await studio.catalog.update(item_id, name=request.name, category=request.category)
    if item is None:
        raise ValidationError(f"Unknown wardrobe item {item_id}")
    return item


@app.delete("/api/wardrobe/{item_id}")
async def delete_garment(item_id: str):
    studio = get_studio()
    await studio.load()
    return {"success": await studio.catalog.remove(item_id)}


@app.get("/api/session", response_model=SessionResponse)
async def get_session():
    return await _session_response(True)


@app.post("/api/session/garments/{item_id}/toggle", response_model=SessionResponse)
async def toggle_garment(item_id: str):
    accepted = await get_studio().toggle_garment(item_id)
    return await _session_response(accepted)


@app.post("/api/session/fit", response_model=SessionResponse)
async def fit_outfit():
    """Apply the pending garments as a new outfit layer."""
    accepted = await get_studio().fit_outfit()
    return await _session_response(accepted)


@app.post("/api/session/pose", response_model=SessionResponse)
async def select_pose(request: PoseRequest):
    session = await get_studio().require_session()
    accepted = await session.select_pose(request.index)
    return await _session_response(accepted)


@app.post("/api/session/undo", response_model=SessionResponse)
async def remove_last_layer():
    session = await get_studio().require_session()
    return await _session_response(session.remove_last_layer())


@app.post("/api/session/start-over", response_model=SessionResponse)
async def reset_outfit():
    session = await get_studio().require_session()
    return await _session_response(session.start_over())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
