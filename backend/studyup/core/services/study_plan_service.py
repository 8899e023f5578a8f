from __future__ import annotations

import json
import textwrap
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import ValidationError

from studyup.core.errors import GenerationBlocked, InvalidRequest, NotFound, SchemaError
from studyup.core.models.generation import (
    STUDY_PLAN_GENERATION_CONFIG,
    Content,
    GenerateContentRequest,
    TextPart,
)
from studyup.core.schemas.study_plan import StudyPlan
from studyup.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from studyup.core.models.assignment import AssignmentSnapshot, MaterialSnapshot
    from studyup.core.repositories.assignment_repository import AssignmentRepository
    from studyup.utils.gemini_client import GeminiClient

logger = get_logger(__name__)

NO_MATERIALS = "No materials provided."
NO_MATERIAL_TEXT = "No text content available"
NO_DESCRIPTION = "No description provided."
NO_DUE_DATE = "No due date set"

STUDY_PLAN_PROMPT = textwrap.dedent(
    """\
    You are an expert academic planner. Your task is to create a realistic and effective study plan for a student.

    Assignment Details:
    - Title: {title}
    - Description: {description}
    - Due Date: {due_date}
    - Current Date: {current_date}

    Available Study Materials:
    {materials}

    Instructions:
    1. Analyze the assignment details, materials, and timeline.
    2. Create a series of study sessions. Break down the assignment into manageable tasks.
    3. For each session, provide a title, a brief description of the task, a scheduled date and time (in ISO 8601 format), and a duration in minutes.
    4. Schedule sessions reasonably between the current date and the due date. Avoid scheduling sessions on the due date itself. Spread them out. Prefer scheduling during typical study hours (e.g., afternoon, early evening). A session can be between 30 and 120 minutes.
    5. Provide a clear "rationale" explaining your thought process for the plan. Explain why you structured the sessions this way, referencing the materials and the timeline.
    6. Your entire response MUST be a single, valid JSON object. Do not include any text outside of the JSON structure.

    JSON Output Format:
    {{
      "rationale": "A string explaining the study plan.",
      "sessions": [
        {{
          "title": "Session Title",
          "description": "What to do in this session.",
          "scheduled_date": "YYYY-MM-DDTHH:MM:SS.sssZ",
          "duration": 60
        }}
      ]
    }}
    """
)


def to_iso_z(value: datetime) -> str:
    """Format as UTC ISO-8601 with millisecond precision and a `Z` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def build_materials_context(materials: Sequence[MaterialSnapshot], excerpt_chars: int = 2000) -> str:
    if not materials:
        return NO_MATERIALS
    blocks = [
        f"Material: {m.title}\nContent: {m.excerpt(excerpt_chars) or NO_MATERIAL_TEXT}"
        for m in materials
    ]
    return "\n\n".join(blocks)


def build_study_plan_prompt(
    assignment: AssignmentSnapshot,
    materials_context: str,
    now: datetime,
) -> str:
    return STUDY_PLAN_PROMPT.format(
        title=assignment.title,
        description=assignment.description or NO_DESCRIPTION,
        due_date=to_iso_z(assignment.due_date) if assignment.due_date else NO_DUE_DATE,
        current_date=to_iso_z(now),
        materials=materials_context,
    )


def parse_study_plan(text: str | None) -> StudyPlan:
    """Parse the model's JSON answer, rejecting anything off-schema."""
    if not text:
        raise SchemaError("Gemini returned no text for the study plan")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as err:
        logger.error("Study plan is not valid JSON: %s", text[:500])
        raise SchemaError(f"Study plan is not valid JSON: {err}") from err
    try:
        return StudyPlan.model_validate(payload)
    except ValidationError as err:
        logger.error("Study plan does not match schema: %s", err)
        raise SchemaError(f"Study plan does not match schema: {err}") from err


class StudyPlanService:
    """Generate an AI study plan for one assignment."""

    def __init__(
        self,
        assignments: AssignmentRepository,
        gemini: GeminiClient,
        *,
        max_materials: int = 5,
        excerpt_chars: int = 2000,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._assignments = assignments
        self._gemini = gemini
        self._max_materials = max_materials
        self._excerpt_chars = excerpt_chars
        self._clock = clock or (lambda: datetime.now(UTC))

    async def build_prompt(self, assignment_id: str) -> str:
        assignment = await self._assignments.get_snapshot(assignment_id)
        if assignment is None:
            raise NotFound("Assignment")

        materials = await self._assignments.list_material_snapshots(
            assignment_id, limit=self._max_materials
        )
        logger.info(
            "Building study plan prompt",
            extra={"assignment_id": assignment_id, "materials": len(materials)},
        )
        return build_study_plan_prompt(
            assignment,
            build_materials_context(materials, self._excerpt_chars),
            self._clock(),
        )

    async def generate_plan(self, assignment_id: str | None) -> StudyPlan:
        if not assignment_id or not str(assignment_id).strip():
            raise InvalidRequest("assignmentId is required")

        prompt = await self.build_prompt(str(assignment_id))
        self._gemini.ensure_configured()

        response = await self._gemini.generate_content(
            GenerateContentRequest(
                contents=[Content(parts=[TextPart(text=prompt)])],
                generationConfig=STUDY_PLAN_GENERATION_CONFIG,
            )
        )
        if not response.candidates:
            logger.error(
                "Invalid response from Gemini: %s",
                response.model_dump_json(by_alias=True, indent=2),
            )
            raise GenerationBlocked(response.block_reason)

        parts = response.first_parts()
        plan = parse_study_plan(parts[0].text if parts else None)

        outliers = [s.title for s in plan.sessions if not s.within_recommended_length]
        if outliers:
            logger.warning("Plan has sessions outside 30-120 minutes: %s", outliers)
        return plan
