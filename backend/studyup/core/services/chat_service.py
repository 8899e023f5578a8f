from __future__ import annotations

from typing import TYPE_CHECKING

from studyup.core.errors import GenerationBlocked, InvalidRequest
from studyup.core.models.generation import (
    CHAT_GENERATION_CONFIG,
    Content,
    GenerateContentRequest,
    TextPart,
)
from studyup.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from studyup.core.models.generation import GenerationPart
    from studyup.core.services.image_fetcher import ImageFetcher
    from studyup.utils.gemini_client import GeminiClient

logger = get_logger(__name__)


def compose_chat_text(message: str, context: str | None = None) -> str:
    """Build the single text part sent to the model."""
    if context:
        return f"Context:\n{context}\n\nUser Question: {message}"
    return message


class ChatService:
    """Relay a chat message (plus optional images) to Gemini."""

    def __init__(self, gemini: GeminiClient, image_fetcher: ImageFetcher) -> None:
        self._gemini = gemini
        self._images = image_fetcher

    async def build_request(
        self,
        message: str,
        context: str | None = None,
        image_urls: Sequence[str] | None = None,
    ) -> GenerateContentRequest:
        parts: list[GenerationPart] = [TextPart(text=compose_chat_text(message, context))]
        images = await self._images.fetch_all(list(image_urls or []))
        parts.extend(image.to_part() for image in images)
        if image_urls:
            logger.info(
                "Inlined %d of %d images", len(images), len(image_urls),
            )
        return GenerateContentRequest(
            contents=[Content(parts=parts)],
            generationConfig=CHAT_GENERATION_CONFIG,
        )

    async def reply(
        self,
        message: str | None,
        context: str | None = None,
        image_urls: Sequence[str] | None = None,
    ) -> str:
        """Return the model's answer to `message`."""
        if not message:
            raise InvalidRequest("Message is required")
        self._gemini.ensure_configured()

        request = await self.build_request(message, context, image_urls)
        response = await self._gemini.generate_content(request)

        if not response.first_parts():
            logger.error(
                "Invalid response from Gemini, possible safety block: %s",
                response.model_dump_json(by_alias=True),
            )
            raise GenerationBlocked(response.block_reason)

        return response.joined_text()

    @property
    def model(self) -> str:
        return self._gemini.model
