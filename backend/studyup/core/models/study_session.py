from __future__ import annotations

from datetime import datetime  # noqa: TCH003
from uuid import UUID, uuid4

from pydantic import Field

from studyup.core.models.base import AppBaseModel


class StudySession(AppBaseModel):
    """Planner entry stored in the `study_sessions` table."""

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    course_id: UUID
    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    scheduled_date: datetime
    duration: int = Field(gt=0, description="Length in minutes")
    completed: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
