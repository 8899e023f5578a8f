from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from studyup.config import settings
from studyup.core.errors import ConfigurationError, SchemaError, UpstreamError
from studyup.core.models.generation import GenerateContentResponse
from studyup.utils.logging import get_logger

if TYPE_CHECKING:
    from studyup.core.models.generation import GenerateContentRequest

logger = get_logger(__name__)

TRANSIENT_STATUSES = frozenset({429, 500, 503})


def _is_transient(err: BaseException) -> bool:
    if isinstance(err, UpstreamError):
        return err.upstream_status in TRANSIENT_STATUSES
    return isinstance(err, httpx.TransportError)


class GeminiClient:
    """Thin async wrapper around the Gemini `generateContent` REST endpoint."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        api_key: str | None,
        model: str = "gemini-1.5-flash-latest",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        max_attempts: int = 1,
        max_wait_seconds: float = 8.0,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self.model = model
        self._base_url = base_url.rstrip("/")
        self._max_attempts = max(1, max_attempts)
        self._max_wait = max_wait_seconds

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/models/{self.model}:generateContent"

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def ensure_configured(self) -> None:
        """Raise `ConfigurationError` when no API key is available."""
        if not self.is_configured:
            logger.error("Gemini API key not configured")
            raise ConfigurationError("Gemini API key not configured")

    async def generate_content(self, request: GenerateContentRequest) -> GenerateContentResponse:
        """Send one generation request, retrying transient failures when enabled."""
        self.ensure_configured()
        payload = request.to_payload()
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=0.5, max=self._max_wait),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._post(payload)
        raise AssertionError("unreachable")  # pragma: no cover

    async def _post(self, payload: dict) -> GenerateContentResponse:
        logger.info("Calling Gemini generateContent", extra={"model": self.model})
        response = await self._http.post(
            self.endpoint,
            params={"key": self._api_key},
            json=payload,
            headers={"Content-Type": "application/json"},
        )
        if not response.is_success:
            logger.error("Gemini API error: %s %s", response.status_code, response.text)
            raise UpstreamError(response.status_code, response.text)

        try:
            return GenerateContentResponse.model_validate(response.json())
        except (ValueError, ValidationError) as err:
            logger.error("Unparseable Gemini response: %s", response.text[:1000])
            raise SchemaError(f"Gemini returned an unexpected payload: {err}") from err


def build_gemini_client(http_client: httpx.AsyncClient) -> GeminiClient:
    """Create a client from application settings.

    A missing key does not fail here; callers hit `ConfigurationError` before
    any outbound request is made.
    """
    api_key = settings.gemini_api_key.get_secret_value() if settings.gemini_api_key else None
    return GeminiClient(
        http_client,
        api_key=api_key,
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        max_attempts=settings.gemini_max_attempts,
        max_wait_seconds=settings.gemini_retry_max_wait_seconds,
    )
