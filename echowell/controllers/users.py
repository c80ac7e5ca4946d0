"""User controller implementing account endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response, status
from sqlalchemy import select

from echowell.controllers.dependencies import CurrentUserDep, SessionDep
from echowell.models.user import User as UserModel
from echowell.utils import hash_password, verify_password
from echowell.views import (
    SuccessResponse,
    UserChangePasswordRequest,
    UserRegistrationRequest,
    UserRegistrationResponse,
    UserResponse,
    UserUpdateRequest,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "/", response_model=UserRegistrationResponse, status_code=status.HTTP_201_CREATED
)
async def register_user(
    payload: UserRegistrationRequest,
    session: SessionDep,
) -> UserRegistrationResponse:
    email = payload.email.lower()
    result = await session.execute(select(UserModel).where(UserModel.email == email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email address already registered",
        )

    db_user = UserModel(
        email=email,
        name=payload.name,
        password_hash=hash_password(payload.password),
    )
    session.add(db_user)
    await session.commit()
    await session.refresh(db_user)

    return UserRegistrationResponse(
        **UserResponse.model_validate(db_user).model_dump(),
        message="User registered successfully",
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: CurrentUserDep) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.patch("/me", response_model=UserResponse)
async def update_current_user(
    payload: UserUpdateRequest,
    session: SessionDep,
    current_user: CurrentUserDep,
) -> UserResponse:
    if payload.name is not None:
        current_user.name = payload.name.strip()
    if "image" in payload.model_fields_set:
        current_user.image = payload.image

    await session.commit()
    await session.refresh(current_user)
    return UserResponse.model_validate(current_user)


@router.post("/me/password", response_model=SuccessResponse)
async def change_password(
    payload: UserChangePasswordRequest,
    session: SessionDep,
    current_user: CurrentUserDep,
) -> SuccessResponse:
    if not verify_password(payload.currentPassword, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        )

    current_user.password_hash = hash_password(payload.newPassword)
    await session.commit()
    return SuccessResponse(message="Password updated successfully")


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_current_user(
    session: SessionDep,
    current_user: CurrentUserDep,
) -> Response:
    """Delete the account together with every conversation, log and summary."""

    await session.delete(current_user)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
