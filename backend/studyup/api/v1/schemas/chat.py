from __future__ import annotations

from pydantic import ConfigDict, Field

from studyup.core.models.base import AppBaseModel


class ChatRequest(AppBaseModel):
    """User message for the AI tutor."""

    # Browser clients may send extra keys; ignore them
    model_config = ConfigDict(extra="ignore")

    # Optional at the schema level so a missing message gets the 400 body clients expect
    message: str | None = Field(default=None, description="User's message to the tutor")
    context: str | None = Field(
        default=None,
        description="Optional text (notes, material excerpts) prepended to the question.",
    )
    image_urls: list[str] | None = Field(
        default=None,
        alias="imageUrls",
        description="Images to download and inline into the request, in order.",
    )


class ChatResponse(AppBaseModel):
    response: str
    model: str
