from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from studyup.core.models.study_session import StudySession


class StudySessionRepository(ABC):
    """Write access to the planner's `study_sessions` table."""

    @abstractmethod
    async def create_many(self, sessions: Sequence[StudySession]) -> Sequence[StudySession]:  # pragma: no cover
        """Insert sessions in one round trip and return the stored rows."""
