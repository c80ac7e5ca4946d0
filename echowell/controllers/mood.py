"""Mood logging controller."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select

from echowell.controllers.dependencies import CurrentUserDep, SessionDep
from echowell.models import MoodLog
from echowell.views import (
    EmotionCount,
    MoodHistoryResponse,
    MoodLogRequest,
    MoodLogResponse,
    MoodStats,
)

router = APIRouter(prefix="/mood", tags=["mood"])


def build_mood_stats(logs: list[MoodLog]) -> MoodStats:
    """Average score, total count and the five most frequent emotions."""

    average = sum(log.mood_score for log in logs) / len(logs) if logs else 0
    emotion_counts: Counter[str] = Counter()
    for log in logs:
        emotion_counts.update(log.emotions or [])

    return MoodStats(
        avg_mood=round(average, 1),
        total_logs=len(logs),
        top_emotions=[
            EmotionCount(emotion=emotion, count=count)
            for emotion, count in emotion_counts.most_common(5)
        ],
    )


@router.post("/log", response_model=MoodLogResponse, status_code=status.HTTP_201_CREATED)
async def log_mood(
    payload: MoodLogRequest,
    session: SessionDep,
    current_user: CurrentUserDep,
) -> MoodLogResponse:
    if not 1 <= payload.mood_score <= 10:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid mood score. Must be between 1-10",
        )

    mood_log = MoodLog(
        user_id=current_user.id,
        mood_score=payload.mood_score,
        emotions=payload.emotions,
        notes=payload.notes or None,
        logged_at=datetime.utcnow(),
    )
    session.add(mood_log)
    await session.commit()
    await session.refresh(mood_log)
    return MoodLogResponse.model_validate(mood_log)


@router.get("/history", response_model=MoodHistoryResponse)
async def mood_history(
    session: SessionDep,
    current_user: CurrentUserDep,
    days: int = Query(30, ge=1, le=365),
) -> MoodHistoryResponse:
    since = datetime.utcnow() - timedelta(days=days)
    result = await session.execute(
        select(MoodLog)
        .where(MoodLog.user_id == current_user.id, MoodLog.logged_at >= since)
        .order_by(MoodLog.logged_at.asc())
    )
    logs = list(result.scalars().all())
    return MoodHistoryResponse(
        logs=[MoodLogResponse.model_validate(log) for log in logs],
        stats=build_mood_stats(logs),
    )
