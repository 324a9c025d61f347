"""Utility helpers for the virtual try-on studio."""

from .images import (
    CropBox,
    ImagePayload,
    crop_to_image,
    detect_mime_type,
    enforce_aspect_ratio,
    is_data_url,
    parse_data_url,
    to_data_url,
)
from .messages import friendly_error_message

__all__ = [
    "CropBox",
    "ImagePayload",
    "crop_to_image",
    "detect_mime_type",
    "enforce_aspect_ratio",
    "is_data_url",
    "parse_data_url",
    "to_data_url",
    "friendly_error_message",
]
