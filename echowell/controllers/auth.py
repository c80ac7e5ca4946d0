"""Authentication controller providing login endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select

from echowell.config.settings import settings
from echowell.controllers.dependencies import SessionDep
from echowell.models.user import User as UserModel
from echowell.models.user import UserStatus
from echowell.telemetry import increment_login
from echowell.utils import create_access_token, verify_password
from echowell.views import LoginRequest, TokenResponse

router = APIRouter(prefix="/auth", tags=["auth"])


async def _authenticate(session, email: str, password: str) -> TokenResponse:
    result = await session.execute(select(UserModel).where(UserModel.email == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is not active",
        )

    access_token = create_access_token(subject=str(user.id), user=user)
    increment_login()

    return TokenResponse(
        access_token=access_token,
        expires_in=settings.security.access_token_expires_minutes * 60,
        user_id=user.id,
        name=user.name or user.email,
        subscription_tier=user.subscription_tier.value,
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    session: SessionDep,
) -> TokenResponse:
    """Validate credentials and issue a JWT access token."""

    return await _authenticate(session, payload.email, payload.password)


@router.post("/token", response_model=TokenResponse, include_in_schema=False)
async def login_form(
    form: Annotated[OAuth2PasswordRequestForm, Depends()],
    session: SessionDep,
) -> TokenResponse:
    """Form-encoded login used by the interactive API docs."""

    return await _authenticate(session, form.username, form.password)
