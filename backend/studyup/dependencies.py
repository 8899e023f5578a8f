from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from studyup.config import settings
from studyup.core.repositories.implementations.supabase.assignment_repository import (
    SupabaseAssignmentRepository,
)
from studyup.core.repositories.implementations.supabase.study_session_repository import (
    SupabaseStudySessionRepository,
)
from studyup.core.schemas.auth import AuthUser
from studyup.core.services.chat_service import ChatService
from studyup.core.services.image_fetcher import ImageFetcher
from studyup.core.services.planner_service import PlannerService
from studyup.core.services.study_plan_service import StudyPlanService
from studyup.db.base import create_request_supabase_client, get_supabase_admin_client
from studyup.utils.gemini_client import GeminiClient, build_gemini_client
from studyup.utils.http_client import get_http_client
from studyup.utils.logging import get_logger

logger = get_logger(__name__)

# Use auto_error=False to handle missing tokens gracefully
http_bearer = HTTPBearer(auto_error=False)

if TYPE_CHECKING:
    from supabase import Client

    from studyup.core.repositories.assignment_repository import AssignmentRepository
    from studyup.core.repositories.study_session_repository import StudySessionRepository


def get_shared_http_client() -> httpx.AsyncClient:
    return get_http_client()


def get_gemini_client(
    http_client: httpx.AsyncClient = Depends(get_shared_http_client),
) -> GeminiClient:
    """Gemini client bound to the shared HTTP pool; may be unconfigured."""
    return build_gemini_client(http_client)


def get_image_fetcher(
    http_client: httpx.AsyncClient = Depends(get_shared_http_client),
) -> ImageFetcher:
    return ImageFetcher(http_client, timeout=settings.image_fetch_timeout_seconds)


def get_chat_service(
    gemini: GeminiClient = Depends(get_gemini_client),
    image_fetcher: ImageFetcher = Depends(get_image_fetcher),
) -> ChatService:
    return ChatService(gemini, image_fetcher)


def get_admin_supabase_client() -> Client:
    return get_supabase_admin_client()


def get_request_supabase_client(request: Request) -> Client:
    """Create a request-scoped Supabase client and set PostgREST bearer.

    Extracts the Authorization: Bearer <jwt> header if present so inserts are
    checked against the caller's RLS policies.
    """
    auth_header = request.headers.get("authorization")
    jwt: str | None = None
    if auth_header and auth_header.lower().startswith("bearer "):
        jwt = auth_header.split(" ", 1)[1].strip()
    return create_request_supabase_client(jwt)


def get_assignment_repository(
    client: Client = Depends(get_admin_supabase_client),
) -> AssignmentRepository:
    return SupabaseAssignmentRepository(client)


def get_study_session_repository(
    client: Client = Depends(get_request_supabase_client),
) -> StudySessionRepository:
    return SupabaseStudySessionRepository(client)


def get_study_plan_service(
    repo: AssignmentRepository = Depends(get_assignment_repository),
    gemini: GeminiClient = Depends(get_gemini_client),
) -> StudyPlanService:
    return StudyPlanService(
        repo,
        gemini,
        max_materials=settings.max_plan_materials,
        excerpt_chars=settings.material_excerpt_chars,
    )


def get_planner_service(
    repo: StudySessionRepository = Depends(get_study_session_repository),
) -> PlannerService:
    return PlannerService(repo)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(http_bearer),
) -> AuthUser:
    """Validate the bearer JWT with Supabase Auth and return the user."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    jwt = credentials.credentials
    if not jwt or len(jwt.split(".")) != 3:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format",
            headers={"WWW-Authenticate": "Bearer"},
        )
    supabase = create_request_supabase_client(jwt)
    try:
        resp = await asyncio.to_thread(lambda: supabase.auth.get_user(jwt))
    except Exception as err:
        logger.warning(
            "JWT validation failed",
            extra={"error_type": type(err).__name__, "jwt_length": len(jwt)},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is invalid or expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from err
    user = getattr(resp, "user", None)
    user_id = getattr(user, "id", None)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user data",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthUser(
        id=user_id,
        email=getattr(user, "email", None) or "",
        role=getattr(user, "role", None),
    )
