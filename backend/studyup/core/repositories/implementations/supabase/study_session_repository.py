from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import httpx
from postgrest.exceptions import APIError

from studyup.core.errors import StoreError
from studyup.core.models.study_session import StudySession
from studyup.core.repositories.study_session_repository import StudySessionRepository
from studyup.utils.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from supabase import Client


class SupabaseStudySessionRepository(StudySessionRepository):
    """Supabase implementation of the StudySessionRepository.

    Expects a request-scoped client so that RLS applies to inserted rows.
    """

    TABLE_NAME = "study_sessions"

    def __init__(self, client: Client) -> None:
        self._client: Client = client

    async def create_many(self, sessions: Sequence[StudySession]) -> Sequence[StudySession]:
        if not sessions:
            return []
        rows = [self._session_to_row(s) for s in sessions]
        resp = await self._run(
            lambda: self._client.table(self.TABLE_NAME)
            .insert(rows)
            .execute()
        )
        items: list[dict[str, Any]] = resp.data or []
        return [StudySession.model_validate(i) for i in items]

    @staticmethod
    async def _run(func: Callable[[], Any]) -> Any:
        try:
            return await asyncio.to_thread(func)
        except (APIError, httpx.HTTPError) as err:
            logger.error("Supabase insert failed: %s", err)
            raise StoreError(str(err), public_message="Failed to save study sessions") from err

    @staticmethod
    def _session_to_row(session: StudySession) -> dict[str, Any]:
        # PostgREST expects JSON-serializable values
        data = session.model_dump(mode="json", exclude={"created_at", "updated_at"})
        return data
