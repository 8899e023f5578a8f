from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from studyup.core.models.base import ExternalModel

MIN_SESSION_MINUTES = 30
MAX_SESSION_MINUTES = 120


class StudySessionProposal(ExternalModel):
    """One session suggested by the planner model."""

    title: str = Field(min_length=1, max_length=500)
    description: str = ""
    scheduled_date: str = Field(description="ISO-8601 timestamp")
    duration: int = Field(gt=0, description="Length in minutes")

    @field_validator("scheduled_date")
    @classmethod
    def ensure_iso_timestamp(cls, value: str) -> str:
        try:
            datetime.fromisoformat(value)
        except ValueError as err:
            raise ValueError(f"scheduled_date is not an ISO-8601 timestamp: {value!r}") from err
        return value

    @property
    def within_recommended_length(self) -> bool:
        return MIN_SESSION_MINUTES <= self.duration <= MAX_SESSION_MINUTES


class StudyPlan(ExternalModel):
    """Validated plan returned by the study planner endpoint."""

    rationale: str
    sessions: list[StudySessionProposal] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "rationale": "Front-load reading, then practice problems before the deadline.",
                    "sessions": [
                        {
                            "title": "Read chapter 3",
                            "description": "Skim and annotate the assigned reading.",
                            "scheduled_date": "2024-03-12T17:00:00.000Z",
                            "duration": 60,
                        }
                    ],
                }
            ]
        }
    }
