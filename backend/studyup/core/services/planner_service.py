from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from studyup.core.errors import InvalidRequest
from studyup.core.models.study_session import StudySession

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from studyup.core.repositories.study_session_repository import StudySessionRepository
    from studyup.core.schemas.study_plan import StudySessionProposal


class PlannerService:
    """Service for turning an accepted study plan into planner sessions (RLS friendly)."""

    def __init__(self, repo: StudySessionRepository) -> None:
        self._repo = repo

    async def add_plan_to_planner(
        self,
        *,
        user_id: UUID,
        course_id: UUID,
        assignment_title: str,
        proposals: Sequence[StudySessionProposal],
    ) -> Sequence[StudySession]:
        """Persist every proposed session for the user, tagged with the assignment title."""
        if not proposals:
            raise InvalidRequest("No plan sessions to add")

        sessions = [
            StudySession(
                user_id=user_id,
                course_id=course_id,
                title=p.title,
                description=f'For assignment: "{assignment_title}"\n\n{p.description}',
                scheduled_date=datetime.fromisoformat(p.scheduled_date),
                duration=p.duration,
                completed=False,
            )
            for p in proposals
        ]
        return await self._repo.create_many(sessions)
