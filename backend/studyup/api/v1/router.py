from __future__ import annotations

from fastapi import APIRouter

from .endpoints import chat, health, study_plan

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(chat.router, prefix="/chat", tags=["chat"])
api_router.include_router(study_plan.router, prefix="/study-plan", tags=["study-plan"])
