from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, status

from studyup.api.v1.schemas.study_plan import AcceptPlanRequest, StudyPlanRequest  # noqa: TCH001
from studyup.core.models.study_session import StudySession
from studyup.core.schemas.study_plan import StudyPlan
from studyup.dependencies import get_current_user, get_planner_service, get_study_plan_service

if TYPE_CHECKING:
    from studyup.core.schemas.auth import AuthUser
    from studyup.core.services.planner_service import PlannerService
    from studyup.core.services.study_plan_service import StudyPlanService

router = APIRouter()


@router.post("", response_model=StudyPlan)
async def generate_study_plan(
    payload: StudyPlanRequest,
    planner: StudyPlanService = Depends(get_study_plan_service),
) -> StudyPlan:
    """Ask the model for a study plan covering the time left on an assignment.

    The plan is returned as-is; nothing is saved until the user accepts it.
    """
    return await planner.generate_plan(payload.assignment_id)


@router.post("/sessions", response_model=list[StudySession], status_code=status.HTTP_201_CREATED)
async def add_plan_to_planner(
    payload: AcceptPlanRequest,
    current_user: AuthUser = Depends(get_current_user),
    planner: PlannerService = Depends(get_planner_service),
) -> list[StudySession]:
    """Save an accepted plan's sessions to the signed-in user's planner."""
    created = await planner.add_plan_to_planner(
        user_id=current_user.id,
        course_id=payload.course_id,
        assignment_title=payload.assignment_title,
        proposals=payload.sessions,
    )
    return list(created)
