"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from echowell.config.settings import settings
from echowell.database import get_session
from echowell.models.user import User as UserModel
from echowell.models.user import UserStatus
from echowell.services.rate_limiter import ai_rate_limiter
from echowell.utils import AuthenticationError, decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: SessionDep,
) -> UserModel:
    """Resolve and validate the user referenced by the bearer token."""

    try:
        payload = decode_access_token(token)
        user_id = int(payload.sub)
    except (AuthenticationError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from None

    result = await session.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if not user or user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return user


CurrentUserDep = Annotated[UserModel, Depends(get_current_user)]


async def enforce_ai_rate_limit(
    current_user: CurrentUserDep,
    response: Response,
) -> None:
    """Apply the per-user AI request budget and publish the limit headers."""

    if not settings.rate_limit.enabled:
        return

    result = ai_rate_limiter.check(f"ai:{current_user.id}")
    if not result.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please slow down and try again shortly.",
            headers=result.headers(),
        )
    for header, value in result.headers().items():
        response.headers[header] = value


AiRateLimitDep = Depends(enforce_ai_rate_limit)


__all__ = [
    "AiRateLimitDep",
    "CurrentUserDep",
    "SessionDep",
    "enforce_ai_rate_limit",
    "get_current_user",
    "oauth2_scheme",
]
