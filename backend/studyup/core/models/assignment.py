from __future__ import annotations

from datetime import datetime  # noqa: TCH003
from uuid import UUID  # noqa: TCH003

from studyup.core.models.base import ExternalModel


class AssignmentSnapshot(ExternalModel):
    """Read-only projection of an `assignments` row used to build prompts."""

    title: str
    description: str | None = None
    due_date: datetime | None = None
    course_id: UUID | str


class MaterialSnapshot(ExternalModel):
    """Title and extracted text of an `assignment_materials` row."""

    title: str
    content: str | None = None

    def excerpt(self, limit: int = 2000) -> str | None:
        if not self.content:
            return None
        return self.content[:limit]
