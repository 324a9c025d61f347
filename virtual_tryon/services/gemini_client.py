"""Gemini image-generation gateway for try-on, pose and background operations."""

import logging
from typing import Any

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import GeminiConfig, ImageConfig
from ..errors import (
    Blocked,
    GenerationError,
    NoImageReturned,
    TransportError,
    UnsupportedInput,
)
from ..utils.images import ImagePayload, enforce_aspect_ratio
from ..utils.logging import get_logger, log_event
from .image_loader import ImageLoader
from .prompts import (
    BACKGROUND_REMOVAL_PROMPT,
    MODEL_IMAGE_PROMPT,
    TRY_ON_PROMPT,
    build_pose_prompt,
)
from .usage import log_api_usage

LOGGER = get_logger(__name__)

SUPPORTED_MIME_TYPES = {"image/png", "image/jpeg", "image/webp", "image/heic", "image/heif"}

# Finish reasons that mean a filter refused to produce the image
SAFETY_FINISH_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "IMAGE_SAFETY", "BLOCKLIST", "SPII"}


def _enum_name(value: Any) -> str | None:
    if value is None:
        return None
    return getattr(value, "name", None) or str(value)


def extract_image(response: Any) -> ImagePayload:
    """Pull the first inline image out of a response or raise a classified error."""
    feedback = getattr(response, "prompt_feedback", None)
    block_reason = _enum_name(getattr(feedback, "block_reason", None))
    if block_reason:
        raise Blocked(block_reason, getattr(feedback, "block_reason_message", None))

    candidates = getattr(response, "candidates", None) or []
    for candidate in candidates:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                return ImagePayload(data=inline.data, mime_type=inline.mime_type or "image/png")

    finish_reason = _enum_name(getattr(candidates[0], "finish_reason", None)) if candidates else None
    if finish_reason in SAFETY_FINISH_REASONS:
        raise Blocked(
            finish_reason,
            "Image generation stopped unexpectedly. This often relates to safety settings.",
        )

    text_parts = []
    for candidate in candidates:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            if getattr(part, "text", None):
                text_parts.append(part.text)
    text_feedback = " ".join(text_parts).strip() or None

    if finish_reason and finish_reason != "STOP":
        raise NoImageReturned(
            text_feedback,
            message=f"The AI model stopped without returning an image (finish reason: {finish_reason}).",
        )
    raise NoImageReturned(text_feedback)


def classify_api_error(exc: genai_errors.APIError) -> GenerationError:
    """Map an API error onto the error taxonomy."""
    message = getattr(exc, "message", None) or str(exc)
    if "Unsupported MIME type" in message:
        mime_type = message.split(": ", 1)[1].strip() if ": " in message else None
        return UnsupportedInput(message, mime_type)
    return GenerationError(f"Gemini API error {getattr(exc, 'code', '')}: {message}".strip())


class GenerationGateway:
    """Uniform façade over Gemini image generation.

    Every operation takes image references, returns a data URL and either
    succeeds once or raises a subclass of GenerationError. No retries.
    """

    def __init__(
        self,
        config: GeminiConfig,
        image_config: ImageConfig | None = None,
        client: genai.Client | None = None,
        image_loader: ImageLoader | None = None,
    ):
        self.config = config
        self.image_config = image_config or ImageConfig()
        self.image_loader = image_loader or ImageLoader(timeout=self.image_config.download_timeout)
        self._client = client

    @property
    def client(self) -> genai.Client:
        """Get or create the Gemini client."""
        if self._client is None:
            try:
                self._client = genai.Client(api_key=self.config.api_key)
            except ValueError as exc:
                raise GenerationError(f"Gemini client is not configured: {exc}") from exc
        return self._client

    async def generate_model_image(self, photo: str) -> str:
        """Turn a user photo into a studio model image."""
        return await self._generate("generateModelImage", MODEL_IMAGE_PROMPT, [photo])

    async def apply_garments(self, base_image: str, garment_images: list[str]) -> str:
        """Dress the person in ``base_image`` in every garment given."""
        if not garment_images:
            raise UnsupportedInput("At least one garment image is required")
        return await self._generate("generateVirtualTryOnImage", TRY_ON_PROMPT, [base_image, *garment_images])

    async def change_pose(self, base_image: str, pose_instruction: str) -> str:
        """Re-render ``base_image`` from the perspective a pose instruction names."""
        return await self._generate("generatePoseVariation", build_pose_prompt(pose_instruction), [base_image])

    async def remove_background(self, image: str) -> str:
        """Isolate the subject on a transparent background (no squaring)."""
        return await self._generate("removeImageBackground", BACKGROUND_REMOVAL_PROMPT, [image], normalize=False)

    async def _load_part(self, reference: str) -> types.Part:
        payload = await self.image_loader.load(reference)
        if payload.mime_type not in SUPPORTED_MIME_TYPES:
            raise UnsupportedInput(f"Unsupported MIME type: {payload.mime_type}", payload.mime_type)
        return types.Part.from_bytes(data=payload.data, mime_type=payload.mime_type)

    async def _generate(self, context: str, prompt: str, images: list[str], normalize: bool = True) -> str:
        image_parts = [await self._load_part(reference) for reference in images]
        contents = [*image_parts, prompt]

        try:
            response = await self.client.aio.models.generate_content(
                model=self.config.model,
                contents=contents,
                config=types.GenerateContentConfig(response_modalities=["IMAGE"]),
            )
        except genai_errors.APIError as exc:
            error = classify_api_error(exc)
            log_event(LOGGER, logging.WARNING, "generation_failed", context=context, error=str(error))
            raise error from exc
        except (httpx.TransportError, ConnectionError, TimeoutError) as exc:
            log_event(LOGGER, logging.WARNING, "generation_transport_failed", context=context, error=str(exc))
            raise TransportError(f"A network error occurred while contacting the AI model: {exc}") from exc

        log_api_usage(context, self.config.model, getattr(response, "usage_metadata", None), len(images))

        try:
            payload = extract_image(response)
        except GenerationError as exc:
            log_event(LOGGER, logging.WARNING, "generation_rejected", context=context, error=str(exc))
            raise

        if normalize:
            try:
                payload = enforce_aspect_ratio(
                    payload,
                    target_ratio=self.image_config.target_ratio,
                    fill_color=self.image_config.fill_color,
                    tolerance=self.image_config.ratio_tolerance,
                )
            except UnsupportedInput as exc:
                raise NoImageReturned(message=f"The returned image could not be decoded: {exc}") from exc

        log_event(LOGGER, logging.INFO, "generation_succeeded", context=context, mime_type=payload.mime_type)
        return payload.to_data_url()

    async def close(self):
        """Close the HTTP resources held by the gateway."""
        await self.image_loader.close()
