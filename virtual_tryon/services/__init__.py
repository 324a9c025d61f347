"""External services for the virtual try-on studio."""

from .gemini_client import GenerationGateway, classify_api_error, extract_image
from .image_loader import ImageLoader
from .wardrobe_catalog import WardrobeCatalog

__all__ = [
    "GenerationGateway",
    "classify_api_error",
    "extract_image",
    "ImageLoader",
    "WardrobeCatalog",
]
