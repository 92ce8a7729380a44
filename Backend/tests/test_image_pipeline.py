# tests/test_image_pipeline.py
"""
Tests for remote image ingestion.
"""
import base64

import pytest

from appforge.media.images import ImagePipeline, infer_mime_type

from conftest import PNG_BYTES, FakeFetcher


class TestMimeType:

    @pytest.mark.parametrize("url,header,expected", [
        ("https://x/a.png", None, "image/png"),
        ("https://x/a.JPG", None, "image/jpeg"),
        ("https://x/a.webp?token=abc.def", None, "image/webp"),
        ("https://x/a.bin", "image/gif; charset=binary", "image/gif"),
        ("https://x/a.png", "application/octet-stream", "image/png"),
        ("https://x/a.unknownext", None, None),
        ("https://x/noextension", "text/html", None),
    ])
    def test_inference(self, url, header, expected):
        assert infer_mime_type(url, header) == expected


class TestIngest:

    @pytest.mark.asyncio
    async def test_mixed_list_keeps_only_valid_images(self, image_pipeline, fake_fetcher):
        assets = await image_pipeline.ingest(["https://x/a.png", 42, "", "https://x/b.unknownext"])

        assert [a.source_url for a in assets] == ["https://x/a.png"]
        assert assets[0].mime_type == "image/png"
        assert 42 not in fake_fetcher.requested
        assert "" not in fake_fetcher.requested

    @pytest.mark.asyncio
    async def test_single_url_string(self, image_pipeline):
        assets = await image_pipeline.ingest("https://x/a.png")

        assert len(assets) == 1
        assert base64.b64decode(assets[0].encoded_payload) == PNG_BYTES
        assert assets[0].size_bytes == len(PNG_BYTES)

    @pytest.mark.asyncio
    async def test_empty_input(self, image_pipeline):
        assert await image_pipeline.ingest(None) == []
        assert await image_pipeline.ingest([]) == []

    @pytest.mark.asyncio
    async def test_header_type_wins(self):
        fetcher = FakeFetcher({"https://x/photo": (PNG_BYTES, "image/webp")})
        pipeline = ImagePipeline(fetch=fetcher)

        assets = await pipeline.ingest(["https://x/photo"])

        assert assets[0].mime_type == "image/webp"

    @pytest.mark.asyncio
    async def test_oversize_image_is_dropped(self):
        fetcher = FakeFetcher({
            "https://x/big.png": (b"\x00" * 11, None),
            "https://x/small.png": (b"\x00" * 5, None),
        })
        pipeline = ImagePipeline(fetch=fetcher, max_bytes=10)

        assets = await pipeline.ingest(["https://x/big.png", "https://x/small.png"])

        assert [a.source_url for a in assets] == ["https://x/small.png"]

    @pytest.mark.asyncio
    async def test_image_at_ceiling_is_kept(self):
        fetcher = FakeFetcher({"https://x/exact.png": (b"\x00" * 10, None)})
        pipeline = ImagePipeline(fetch=fetcher, max_bytes=10)

        assert len(await pipeline.ingest(["https://x/exact.png"])) == 1

    @pytest.mark.asyncio
    async def test_fetch_failure_is_isolated(self):
        fetcher = FakeFetcher({"https://x/broken.png": ConnectionError("reset")})
        pipeline = ImagePipeline(fetch=fetcher)

        assets = await pipeline.ingest(["https://x/1.png", "https://x/broken.png", "https://x/2.png"])

        assert [a.source_url for a in assets] == ["https://x/1.png", "https://x/2.png"]


class TestParts:

    @pytest.mark.asyncio
    async def test_openai_parts(self, image_pipeline):
        parts = await image_pipeline.parts(["https://x/a.png"])

        assert parts[0]["type"] == "image_url"
        assert parts[0]["image_url"]["url"].startswith("data:image/png;base64,")

    @pytest.mark.asyncio
    async def test_gemini_parts(self, image_pipeline):
        parts = await image_pipeline.parts(["https://x/a.png"], fmt="gemini")

        assert parts[0]["inlineData"]["mimeType"] == "image/png"
        assert base64.b64decode(parts[0]["inlineData"]["data"]) == PNG_BYTES
