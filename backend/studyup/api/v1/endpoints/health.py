from __future__ import annotations

import asyncio

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from studyup.config import settings
from studyup.db.base import get_supabase_admin_client
from studyup.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

SERVICE_NAME = "studyup-api"
VERSION = "0.1.0"


@router.get("/")
async def health_check():
    """Health check endpoint."""
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": VERSION,
        }
    )


@router.get("/ready")
async def readiness_check():
    """Readiness check: database reachability and AI key presence."""
    db_status = "connected"
    try:
        client = get_supabase_admin_client()
        await asyncio.to_thread(lambda: client.table("assignments").select("id").limit(1).execute())
    except Exception as e:
        logger.warning("Readiness probe failed: %s", e)
        db_status = "unavailable"

    ai_status = "configured" if settings.gemini_api_key else "missing_api_key"
    ready = db_status == "connected" and ai_status == "configured"
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if ready else "degraded",
            "database": db_status,
            "ai_service": ai_status,
            "model": settings.gemini_model,
        }
    )
