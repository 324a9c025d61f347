"""Tests for ImageLoader - data URLs, downloads and the download cache."""

from unittest.mock import AsyncMock

import httpx
import pytest

from virtual_tryon.errors import StorageError, TransportError, UnsupportedInput
from virtual_tryon.services.image_loader import ImageLoader

from conftest import make_data_url, make_png


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestImageLoader:
    """Tests for resolving image references."""

    @pytest.mark.asyncio
    async def test_data_url_parsed_without_network(self):
        loader = ImageLoader()

        payload = await loader.load(make_data_url())

        assert payload.mime_type == "image/png"
        assert loader._client is None

    @pytest.mark.asyncio
    async def test_unknown_scheme_rejected(self):
        with pytest.raises(UnsupportedInput):
            await ImageLoader().load("ftp://example.com/shirt.png")

    @pytest.mark.asyncio
    async def test_download_uses_content_type(self):
        png = make_png()
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=png, headers={"content-type": "image/png; charset=binary"})

        loader = ImageLoader()
        loader._client = mock_client(handler)

        payload = await loader.load("https://images.example.com/shirt.png")

        assert payload.data == png
        assert payload.mime_type == "image/png"
        assert seen[0].headers["referer"] == "https://images.example.com/"
        await loader.close()

    @pytest.mark.asyncio
    async def test_download_sniffs_generic_content_type(self):
        jpeg = b'\xff\xd8\xff\xe0' + b'\x00' * 16
        loader = ImageLoader()
        loader._client = mock_client(
            lambda request: httpx.Response(200, content=jpeg, headers={"content-type": "application/octet-stream"})
        )

        payload = await loader.load("https://example.com/photo")

        assert payload.mime_type == "image/jpeg"
        await loader.close()

    @pytest.mark.asyncio
    async def test_http_error_is_transport_error(self):
        loader = ImageLoader()
        loader._client = mock_client(lambda request: httpx.Response(404))

        with pytest.raises(TransportError):
            await loader.load("https://example.com/missing.png")
        await loader.close()

    @pytest.mark.asyncio
    async def test_download_cached_in_store(self, store):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, content=make_png(), headers={"content-type": "image/png"})

        loader = ImageLoader(cache=store.cache)
        loader._client = mock_client(handler)
        url = "https://example.com/jeans.png"

        first = await loader.load(url)
        second = await loader.load(url)

        assert first == second
        assert len(calls) == 1
        assert await store.cache.get(ImageLoader.cache_key(url)) == first.to_data_url()
        await loader.close()

    @pytest.mark.asyncio
    async def test_corrupt_cache_entry_falls_back_to_download(self, store):
        url = "https://example.com/shirt.png"
        store.database.run(
            lambda conn: conn.execute(
                "INSERT INTO cache (key, value, timestamp) VALUES (?, ?, ?)",
                (ImageLoader.cache_key(url), "not json", store.cache.clock()),
            )
        )
        loader = ImageLoader(cache=store.cache)
        loader._client = mock_client(
            lambda request: httpx.Response(200, content=make_png(), headers={"content-type": "image/png"})
        )

        payload = await loader.load(url)

        assert payload.mime_type == "image/png"
        # The fresh download replaces the corrupt row
        assert await store.cache.get(ImageLoader.cache_key(url)) == payload.to_data_url()
        await loader.close()

    @pytest.mark.asyncio
    async def test_cache_failure_falls_back_to_download(self):
        cache = AsyncMock()
        cache.get.side_effect = StorageError("disk full")
        cache.put.side_effect = StorageError("disk full")
        loader = ImageLoader(cache=cache)
        loader._client = mock_client(
            lambda request: httpx.Response(200, content=make_png(), headers={"content-type": "image/png"})
        )

        payload = await loader.load("https://example.com/top.png")

        assert payload.mime_type == "image/png"
        await loader.close()
