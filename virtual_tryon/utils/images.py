"""Image payload helpers: data URLs, MIME sniffing, squaring and cropping."""

import base64
import binascii
import io
import re
from dataclasses import dataclass

from PIL import Image, ImageColor, UnidentifiedImageError

from ..errors import UnsupportedInput

_DATA_URL_HEADER = re.compile(r"^data:(?P<mime>[^;,]+)(?:;[^,]*)?;base64$")


@dataclass(frozen=True)
class ImagePayload:
    """Raw image bytes with their MIME type."""
    data: bytes
    mime_type: str

    def to_data_url(self) -> str:
        return to_data_url(self.data, self.mime_type)


@dataclass(frozen=True)
class CropBox:
    """Pixel crop rectangle in source image coordinates."""
    x: int
    y: int
    width: int
    height: int


def detect_mime_type(data: bytes, fallback: str = "image/png") -> str:
    """Detect image format from magic bytes."""
    if data[:3] == b'\xff\xd8\xff':
        return "image/jpeg"
    if data[:8] == b'\x89PNG\r\n\x1a\n':
        return "image/png"
    if data[:4] == b'RIFF' and data[8:12] == b'WEBP':
        return "image/webp"
    if data[:6] in (b'GIF87a', b'GIF89a'):
        return "image/gif"
    return fallback


def is_data_url(reference: str) -> bool:
    return reference.startswith("data:")


def parse_data_url(data_url: str) -> ImagePayload:
    """Split a base64 data URL into bytes and MIME type."""
    header, sep, encoded = data_url.partition(",")
    if not sep:
        raise UnsupportedInput("Invalid data URL")
    match = _DATA_URL_HEADER.match(header)
    if not match:
        raise UnsupportedInput("Could not parse MIME type from data URL")
    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise UnsupportedInput(f"Data URL payload is not valid base64: {exc}") from exc
    return ImagePayload(data=data, mime_type=match.group("mime"))


def to_data_url(data: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def _open_image(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise UnsupportedInput(f"Could not decode image: {exc}", detect_mime_type(data, "unknown")) from exc
    return image


def _to_png(image: Image.Image) -> bytes:
    output = io.BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()


def enforce_aspect_ratio(
    payload: ImagePayload,
    target_ratio: float = 1.0,
    fill_color: str = "#f0f0f0",
    tolerance: float = 0.01,
) -> ImagePayload:
    """Pad an image onto a neutral canvas so it matches the target ratio.

    Images already within ``tolerance`` of the ratio are returned untouched;
    everything else is centered on a larger canvas and re-encoded as PNG.
    """
    image = _open_image(payload.data)
    width, height = image.size
    current_ratio = width / height

    if abs(current_ratio - target_ratio) < tolerance:
        return payload

    if current_ratio > target_ratio:
        # Wider than target: grow the canvas vertically
        canvas_w, canvas_h = width, round(width / target_ratio)
    else:
        canvas_w, canvas_h = round(height * target_ratio), height

    has_alpha = image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info)
    source = image.convert("RGBA") if has_alpha else image.convert("RGB")

    canvas = Image.new("RGB", (canvas_w, canvas_h), ImageColor.getrgb(fill_color))
    offset = ((canvas_w - width) // 2, (canvas_h - height) // 2)
    canvas.paste(source, offset, source if has_alpha else None)

    return ImagePayload(data=_to_png(canvas), mime_type="image/png")


def crop_to_image(payload: ImagePayload, box: CropBox) -> ImagePayload:
    """Cut the crop rectangle out of an image and return it as PNG."""
    if box.width <= 0 or box.height <= 0:
        raise UnsupportedInput("Crop rectangle must have a positive size")

    image = _open_image(payload.data)
    right = min(box.x + box.width, image.width)
    bottom = min(box.y + box.height, image.height)
    left, top = max(box.x, 0), max(box.y, 0)
    if right <= left or bottom <= top:
        raise UnsupportedInput("Crop rectangle lies outside the image")

    cropped = image.crop((left, top, right, bottom))
    if cropped.mode not in ("RGB", "RGBA"):
        cropped = cropped.convert("RGBA")
    return ImagePayload(data=_to_png(cropped), mime_type="image/png")
