from __future__ import annotations

from uuid import UUID  # noqa: TCH003

from pydantic import ConfigDict, Field

from studyup.core.models.base import AppBaseModel
from studyup.core.schemas.study_plan import StudySessionProposal  # noqa: TCH001


class StudyPlanRequest(AppBaseModel):
    model_config = ConfigDict(extra="ignore")

    assignment_id: str | None = Field(default=None, alias="assignmentId")


class AcceptPlanRequest(AppBaseModel):
    """A generated plan the user chose to add to their planner."""

    model_config = ConfigDict(extra="ignore")

    course_id: UUID = Field(alias="courseId")
    assignment_title: str = Field(alias="assignmentTitle", min_length=1, max_length=500)
    sessions: list[StudySessionProposal] = Field(default_factory=list)
