# appforge/media/images.py
"""
Image ingestion pipeline.

Fetches remote images, resolves their MIME type, drops anything over the
provider size ceiling and encodes survivors as provider message parts.
Each URL is an isolated failure domain; output keeps source order.
"""
import asyncio
import aiohttp
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple, Union
from urllib.parse import urlparse

from appforge.core.config import settings
from appforge.core.exceptions import ImageFetchError
from appforge.core.logging import log
from appforge.core.types import ImageAsset, ImageFormat


# (body, content-type header or None)
FetchResult = Tuple[bytes, Optional[str]]
Fetcher = Callable[[str], Awaitable[FetchResult]]

EXTENSION_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
}


def infer_mime_type(url: str, content_type: Optional[str]) -> Optional[str]:
    """Header wins when it is an image type; otherwise infer from the extension."""
    if content_type and content_type.lower().startswith("image/"):
        return content_type.split(";")[0].strip().lower()

    path = urlparse(url).path or url
    if "." not in path.rsplit("/", 1)[-1]:
        return None
    extension = path.rsplit(".", 1)[-1].lower()
    return EXTENSION_MIME_TYPES.get(extension)


class ImagePipeline:
    """Turns image URLs into size-gated, base64-encoded assets."""

    def __init__(
        self,
        fetch: Optional[Fetcher] = None,
        max_bytes: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self.max_bytes = max_bytes or settings.images.max_bytes
        self.timeout = timeout or settings.images.fetch_timeout
        self._fetch = fetch or self._http_fetch

    async def _http_fetch(self, url: str) -> FetchResult:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status != 200:
                    raise ImageFetchError(url, f"HTTP {response.status} {response.reason}")
                # Read one byte past the ceiling so oversize bodies are detectable
                body = await response.content.read(self.max_bytes + 1)
                return body, response.headers.get("Content-Type")

    async def _ingest_one(self, url: str) -> Optional[ImageAsset]:
        try:
            body, content_type = await self._fetch(url)
        except Exception as e:
            log("IMAGES", f"Fetch failed for {url}: {e}")
            return None

        mime_type = infer_mime_type(url, content_type)
        if mime_type is None:
            log("IMAGES", f"Skipping {url}: unsupported type ({content_type})")
            return None

        if len(body) > self.max_bytes:
            log("IMAGES", f"Dropping {url}: over {self.max_bytes} bytes")
            return None

        return ImageAsset.from_bytes(url, mime_type, body)

    async def ingest(self, urls: Union[str, Iterable[Any], None]) -> List[ImageAsset]:
        """
        Ingest one URL or a list of URLs.

        Non-string and empty entries are skipped. Failures never propagate.
        """
        if not urls:
            return []
        candidates = [urls] if isinstance(urls, str) else list(urls)

        valid = []
        for url in candidates:
            if not isinstance(url, str) or not url.strip():
                log("IMAGES", f"Skipping invalid image URL: {url!r}")
                continue
            valid.append(url.strip())

        results = await asyncio.gather(*(self._ingest_one(url) for url in valid))
        assets = [asset for asset in results if asset is not None]
        log("IMAGES", f"Ingested {len(assets)}/{len(candidates)} images")
        return assets

    async def parts(
        self,
        urls: Union[str, Iterable[Any], None],
        fmt: ImageFormat = "openai",
    ) -> List[Dict[str, Any]]:
        """Ingest and render as provider message parts."""
        return [asset.to_part(fmt) for asset in await self.ingest(urls)]
