from __future__ import annotations

import asyncio
import base64
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

from studyup.core.models.generation import InlineDataPart
from studyup.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = get_logger(__name__)


@dataclass(frozen=True)
class FetchedImage:
    url: str
    mime_type: str
    data: bytes

    def to_part(self) -> InlineDataPart:
        return InlineDataPart.from_image(
            mime_type=self.mime_type,
            data=base64.b64encode(self.data).decode("ascii"),
        )


class ImageFetcher:
    """Download images for inlining into a generation request.

    Fetches run concurrently; the result keeps the order of the input URLs and
    silently drops any URL that errors, answers non-2xx, or is not an image.
    """

    def __init__(self, http_client: httpx.AsyncClient, *, timeout: float | None = None) -> None:
        self._http = http_client
        self._timeout = timeout

    async def fetch_all(self, urls: Sequence[str]) -> list[FetchedImage]:
        if not urls:
            return []
        results = await asyncio.gather(*(self._fetch_one(url) for url in urls))
        return [image for image in results if image is not None]

    async def _fetch_one(self, url: str) -> FetchedImage | None:
        try:
            kwargs = {"timeout": self._timeout} if self._timeout is not None else {}
            response = await self._http.get(url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as err:
            logger.error("Error fetching image url %s: %s", url, err)
            return None

        if not response.is_success:
            logger.warning("Failed to fetch image from %s, status: %s", url, response.status_code)
            return None

        content_type = response.headers.get("content-type", "")
        mime_type = content_type.split(";", 1)[0].strip().lower()
        if not mime_type.startswith("image/"):
            logger.warning("URL %s did not return an image content-type, got %r", url, content_type)
            return None

        return FetchedImage(url=url, mime_type=mime_type, data=response.content)
