from __future__ import annotations

from functools import lru_cache

import httpx

from studyup.config import settings
from studyup.utils.logging import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_http_client() -> httpx.AsyncClient:
    """Return the process-wide async HTTP client.

    Holds only the connection pool; no per-request state lives on it.
    """
    logger.debug("Initializing shared httpx.AsyncClient")
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
    )


async def close_http_client() -> None:
    if get_http_client.cache_info().currsize:
        await get_http_client().aclose()
        get_http_client.cache_clear()
