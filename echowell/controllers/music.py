"""Music therapy session controller."""

from __future__ import annotations

from fastapi import APIRouter, status
from sqlalchemy import select

from echowell.controllers.dependencies import CurrentUserDep, SessionDep
from echowell.models import MusicSession
from echowell.views import MusicSessionRequest, MusicSessionResponse

router = APIRouter(prefix="/music", tags=["music"])

RECENT_SESSION_LIMIT = 20


@router.post(
    "/session", response_model=MusicSessionResponse, status_code=status.HTTP_201_CREATED
)
async def log_music_session(
    payload: MusicSessionRequest,
    session: SessionDep,
    current_user: CurrentUserDep,
) -> MusicSessionResponse:
    music_session = MusicSession(
        user_id=current_user.id,
        mood_before=payload.mood_before,
        mood_after=payload.mood_after,
        track_ids=payload.track_ids,
        duration=payload.duration,
        session_type=payload.session_type,
    )
    session.add(music_session)
    await session.commit()
    await session.refresh(music_session)
    return MusicSessionResponse.model_validate(music_session)


@router.get("/session", response_model=list[MusicSessionResponse])
async def list_music_sessions(
    session: SessionDep,
    current_user: CurrentUserDep,
) -> list[MusicSessionResponse]:
    result = await session.execute(
        select(MusicSession)
        .where(MusicSession.user_id == current_user.id)
        .order_by(MusicSession.created_at.desc(), MusicSession.id.desc())
        .limit(RECENT_SESSION_LIMIT)
    )
    return [MusicSessionResponse.model_validate(s) for s in result.scalars().all()]
