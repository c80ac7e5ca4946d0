"""Daily and weekly summary endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Query

from echowell.controllers.dependencies import AiRateLimitDep, CurrentUserDep, SessionDep
from echowell.services.summaries import (
    WEEKLY_EMPTY_MESSAGE,
    build_daily_summary,
    build_weekly_summary,
    load_daily_summary,
)
from echowell.views import DailySummaryResponse, DailySummaryView, WeeklySummaryResponse

router = APIRouter(tags=["summaries"])


def _to_response(summary) -> DailySummaryResponse:
    if summary is None:
        return DailySummaryResponse(summary=None)
    return DailySummaryResponse(summary=DailySummaryView.model_validate(summary))


@router.get("/daily-summary", response_model=DailySummaryResponse)
async def get_daily_summary(
    session: SessionDep,
    current_user: CurrentUserDep,
    day: Optional[date] = Query(None, alias="date"),
) -> DailySummaryResponse:
    """Return the stored summary for ``date`` (default today), generating it on demand."""

    target = day or datetime.utcnow().date()
    summary = await load_daily_summary(session, current_user.id, target)
    if summary is None:
        summary = await build_daily_summary(session, current_user.id, target)
    return _to_response(summary)


@router.post("/daily-summary", response_model=DailySummaryResponse, dependencies=[AiRateLimitDep])
async def regenerate_daily_summary(
    session: SessionDep,
    current_user: CurrentUserDep,
) -> DailySummaryResponse:
    summary = await build_daily_summary(session, current_user.id, datetime.utcnow().date())
    return _to_response(summary)


@router.get("/weekly-summary", response_model=WeeklySummaryResponse)
async def get_weekly_summary(
    session: SessionDep,
    current_user: CurrentUserDep,
) -> WeeklySummaryResponse:
    summary = await build_weekly_summary(session, current_user.id, datetime.utcnow().date())
    if summary is None:
        return WeeklySummaryResponse(summary=None, message=WEEKLY_EMPTY_MESSAGE)
    return WeeklySummaryResponse(summary=summary)
