"""Weekly and monthly progress analytics."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from fastapi import APIRouter, Query

from echowell.controllers.dependencies import CurrentUserDep, SessionDep
from echowell.services.summaries import build_monthly_analytics, build_weekly_analytics
from echowell.views import AnalyticsSummaryResponse

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/summaries", response_model=AnalyticsSummaryResponse)
async def analytics_summaries(
    session: SessionDep,
    current_user: CurrentUserDep,
    summary_type: Literal["weekly", "monthly"] = Query("weekly", alias="type"),
    day: Optional[date] = Query(None, alias="date"),
) -> AnalyticsSummaryResponse:
    target = day or datetime.utcnow().date()
    if summary_type == "monthly":
        summaries = await build_monthly_analytics(session, current_user.id, target)
    else:
        summaries = await build_weekly_analytics(session, current_user.id, target)
    return AnalyticsSummaryResponse(summaries=summaries)
