"""Resolves image references (data URLs or http URLs) into raw payloads."""

import logging
from urllib.parse import urlparse

import httpx

from ..errors import StorageError, TransportError, UnsupportedInput
from ..storage.cache_repository import CacheRepository
from ..utils.images import ImagePayload, detect_mime_type, is_data_url, parse_data_url
from ..utils.logging import get_logger, log_event

LOGGER = get_logger(__name__)


class ImageLoader:
    """Loads image references, caching remote downloads as data URLs."""

    def __init__(self, timeout: float = 30.0, cache: CacheRepository | None = None):
        self.timeout = timeout
        self.cache = cache
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    @staticmethod
    def cache_key(url: str) -> str:
        return f"image:{url}"

    async def load(self, reference: str) -> ImagePayload:
        """Return the bytes and MIME type behind an image reference."""
        if is_data_url(reference):
            return parse_data_url(reference)

        scheme = urlparse(reference).scheme
        if scheme not in ("http", "https"):
            raise UnsupportedInput(f"Unsupported image reference scheme: {scheme or 'none'}")

        cached = await self._cached(reference)
        if cached is not None:
            return cached

        payload = await self._download(reference)
        await self._remember(reference, payload)
        return payload

    async def _download(self, url: str) -> ImagePayload:
        # Referer helps with hotlink protection on some image hosts
        parsed = urlparse(url)
        headers = {
            "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
            "Referer": f"{parsed.scheme}://{parsed.netloc}/",
        }
        try:
            response = await self.client.get(url, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"Could not load image from URL: {url} ({exc})") from exc

        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        mime_type = content_type if content_type.startswith("image/") else detect_mime_type(response.content)
        return ImagePayload(data=response.content, mime_type=mime_type)

    async def _cached(self, url: str) -> ImagePayload | None:
        if self.cache is None:
            return None
        try:
            data_url = await self.cache.get(self.cache_key(url))
        except StorageError as exc:
            log_event(LOGGER, logging.WARNING, "image_cache_read_failed", url=url, error=str(exc))
            return None
        if not data_url:
            return None
        try:
            return parse_data_url(data_url)
        except UnsupportedInput:
            return None

    async def _remember(self, url: str, payload: ImagePayload) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.put(self.cache_key(url), payload.to_data_url())
        except StorageError as exc:
            log_event(LOGGER, logging.WARNING, "image_cache_write_failed", url=url, error=str(exc))

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
