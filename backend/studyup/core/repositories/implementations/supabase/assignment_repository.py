from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import httpx
from postgrest.exceptions import APIError

from studyup.core.errors import StoreError
from studyup.core.models.assignment import AssignmentSnapshot, MaterialSnapshot
from studyup.core.repositories.assignment_repository import AssignmentRepository
from studyup.utils.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from supabase import Client


class SupabaseAssignmentRepository(AssignmentRepository):
    """Supabase implementation of the AssignmentRepository.

    Reads the `assignments` and `assignment_materials` tables through
    PostgREST. Only the columns needed for prompt construction are selected.
    """

    ASSIGNMENTS_TABLE = "assignments"
    MATERIALS_TABLE = "assignment_materials"

    def __init__(self, client: Client) -> None:
        self._client: Client = client

    async def get_snapshot(self, assignment_id: str) -> AssignmentSnapshot | None:
        resp = await self._run(
            lambda: self._client.table(self.ASSIGNMENTS_TABLE)
            .select("title, description, due_date, course_id")
            .eq("id", assignment_id)
            .limit(1)
            .execute()
        )
        items = resp.data or []
        if not items:
            return None
        return AssignmentSnapshot.model_validate(items[0])

    async def list_material_snapshots(
        self, assignment_id: str, *, limit: int = 5
    ) -> Sequence[MaterialSnapshot]:
        resp = await self._run(
            lambda: self._client.table(self.MATERIALS_TABLE)
            .select("title, content")
            .eq("assignment_id", assignment_id)
            .limit(limit)
            .execute()
        )
        rows: list[dict[str, Any]] = resp.data or []
        return [MaterialSnapshot.model_validate(r) for r in rows]

    @staticmethod
    async def _run(func: Callable[[], Any]) -> Any:
        try:
            return await asyncio.to_thread(func)
        except (APIError, httpx.HTTPError) as err:
            logger.error("Supabase query failed: %s", err)
            raise StoreError(str(err)) from err
