from __future__ import annotations

from typing import Any, Union

from pydantic import Field

from studyup.core.models.base import AppBaseModel, ExternalModel


class TextPart(AppBaseModel):
    """Plain text part of a generation request."""

    text: str


class InlineData(AppBaseModel):
    mime_type: str
    data: str = Field(description="Base64-encoded payload")


class InlineDataPart(AppBaseModel):
    """Image embedded directly in the request body."""

    inline_data: InlineData

    @classmethod
    def from_image(cls, mime_type: str, data: str) -> InlineDataPart:
        return cls(inline_data=InlineData(mime_type=mime_type, data=data))


GenerationPart = Union[TextPart, InlineDataPart]


class Content(AppBaseModel):
    parts: list[GenerationPart]


class GenerationConfig(AppBaseModel):
    temperature: float
    top_k: int = Field(alias="topK")
    top_p: float = Field(alias="topP")
    max_output_tokens: int = Field(alias="maxOutputTokens")
    response_mime_type: str | None = None


class GenerateContentRequest(AppBaseModel):
    contents: list[Content]
    generation_config: GenerationConfig = Field(alias="generationConfig")

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body expected by `generateContent`."""
        return self.model_dump(by_alias=True, exclude_none=True)


CHAT_GENERATION_CONFIG = GenerationConfig(
    temperature=0.7,
    topK=40,
    topP=0.95,
    maxOutputTokens=2048,
)

STUDY_PLAN_GENERATION_CONFIG = GenerationConfig(
    temperature=0.5,
    topK=40,
    topP=0.95,
    maxOutputTokens=4096,
    response_mime_type="application/json",
)


class ResponsePart(ExternalModel):
    text: str | None = None


class CandidateContent(ExternalModel):
    parts: list[ResponsePart] = Field(default_factory=list)


class Candidate(ExternalModel):
    content: CandidateContent | None = None
    finish_reason: str | None = Field(default=None, alias="finishReason")


class PromptFeedback(ExternalModel):
    block_reason: str | None = Field(default=None, alias="blockReason")


class GenerateContentResponse(ExternalModel):
    candidates: list[Candidate] = Field(default_factory=list)
    prompt_feedback: PromptFeedback | None = Field(default=None, alias="promptFeedback")

    @property
    def block_reason(self) -> str | None:
        return self.prompt_feedback.block_reason if self.prompt_feedback else None

    def first_parts(self) -> list[ResponsePart]:
        """Parts of the first candidate, empty when there is nothing usable."""
        if not self.candidates or self.candidates[0].content is None:
            return []
        return self.candidates[0].content.parts

    def joined_text(self) -> str:
        return "".join(part.text or "" for part in self.first_parts())
