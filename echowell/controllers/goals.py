"""Therapy goal tracker controller."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, HTTPException, Query, Response, status
from sqlalchemy import select

from echowell.controllers.dependencies import CurrentUserDep, SessionDep
from echowell.models import GoalStatus, TherapyGoal
from echowell.views import GoalCreateRequest, GoalResponse, GoalUpdateRequest

router = APIRouter(prefix="/goals", tags=["goals"])


async def _get_goal_or_404(session, user_id: int, goal_id: int) -> TherapyGoal:
    result = await session.execute(
        select(TherapyGoal).where(TherapyGoal.id == goal_id, TherapyGoal.user_id == user_id)
    )
    goal = result.scalar_one_or_none()
    if goal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")
    return goal


def apply_status(goal: TherapyGoal, new_status: GoalStatus) -> None:
    """Completing stamps the time and fills progress; leaving completion clears the stamp."""

    if new_status == GoalStatus.COMPLETED:
        if goal.status != GoalStatus.COMPLETED or goal.completed_at is None:
            goal.completed_at = datetime.utcnow()
        goal.progress = 100
    else:
        goal.completed_at = None
    goal.status = new_status


@router.get("/", response_model=list[GoalResponse])
async def list_goals(
    session: SessionDep,
    current_user: CurrentUserDep,
    goal_status: GoalStatus | None = Query(None, alias="status"),
) -> list[GoalResponse]:
    query = select(TherapyGoal).where(TherapyGoal.user_id == current_user.id)
    if goal_status is not None:
        query = query.where(TherapyGoal.status == goal_status)
    result = await session.execute(query.order_by(TherapyGoal.created_at.desc(), TherapyGoal.id.desc()))
    return [GoalResponse.model_validate(goal) for goal in result.scalars().all()]


@router.post("/", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
async def create_goal(
    payload: GoalCreateRequest,
    session: SessionDep,
    current_user: CurrentUserDep,
) -> GoalResponse:
    goal = TherapyGoal(
        user_id=current_user.id,
        goal_text=payload.goal_text.strip(),
        status=GoalStatus.ACTIVE,
        progress=payload.progress,
    )
    session.add(goal)
    await session.commit()
    await session.refresh(goal)
    return GoalResponse.model_validate(goal)


@router.patch("/{goal_id}", response_model=GoalResponse)
async def update_goal(
    goal_id: int,
    payload: GoalUpdateRequest,
    session: SessionDep,
    current_user: CurrentUserDep,
) -> GoalResponse:
    goal = await _get_goal_or_404(session, current_user.id, goal_id)

    if payload.goal_text is not None:
        goal.goal_text = payload.goal_text.strip()
    if payload.progress is not None:
        goal.progress = payload.progress
    if payload.status is not None:
        apply_status(goal, payload.status)

    await session.commit()
    await session.refresh(goal)
    return GoalResponse.model_validate(goal)


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(
    goal_id: int,
    session: SessionDep,
    current_user: CurrentUserDep,
) -> Response:
    goal = await _get_goal_or_404(session, current_user.id, goal_id)
    await session.delete(goal)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
