from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends

from studyup.api.v1.schemas.chat import ChatRequest, ChatResponse  # noqa: TCH001
from studyup.dependencies import get_chat_service

if TYPE_CHECKING:
    from studyup.core.services.chat_service import ChatService

router = APIRouter()


@router.post("", response_model=ChatResponse)
async def chat_with_tutor(
    payload: ChatRequest,
    chat: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """Answer a tutor question, optionally grounded on context text and images."""
    answer = await chat.reply(
        payload.message,
        context=payload.context,
        image_urls=payload.image_urls,
    )
    return ChatResponse(response=answer, model=chat.model)
