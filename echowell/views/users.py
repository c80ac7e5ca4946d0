"""Pydantic schemas for user accounts."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)

from echowell.models.user import SubscriptionTier, UserStatus


def _validate_password_strength(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"\d", value):
        raise ValueError("Password must contain at least one digit")
    return value


class UserRegistrationRequest(BaseModel):
    """Request model for user registration."""

    email: EmailStr
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _validate_password_strength(value)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        stripped = value.strip()
        if not stripped:
            raise ValueError("Name cannot be blank")
        return stripped


class UserResponse(BaseModel):
    """General user response model."""

    id: int
    email: EmailStr
    name: Optional[str] = None
    status: UserStatus
    subscription_tier: SubscriptionTier = Field(serialization_alias="subscriptionTier")
    image: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class UserRegistrationResponse(UserResponse):
    """Response model for successful user registration."""

    message: str


class UserUpdateRequest(BaseModel):
    """Profile fields the user may change; omitted fields are left untouched."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    image: Optional[str] = Field(None, max_length=2048)


class UserChangePasswordRequest(BaseModel):
    """Request model for user password changes."""

    currentPassword: str = Field(
        ...,
        min_length=8,
        max_length=128,
        validation_alias=AliasChoices("currentPassword", "current_password"),
        serialization_alias="currentPassword",
    )
    newPassword: str = Field(
        ...,
        min_length=8,
        max_length=128,
        validation_alias=AliasChoices("newPassword", "new_password"),
        serialization_alias="newPassword",
    )

    @field_validator("newPassword")
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        return _validate_password_strength(value)

    @model_validator(mode="after")
    def ensure_new_differs(self) -> "UserChangePasswordRequest":
        if self.currentPassword == self.newPassword:
            raise ValueError("New password must be different from the current one")
        return self


__all__ = [
    "UserChangePasswordRequest",
    "UserRegistrationRequest",
    "UserRegistrationResponse",
    "UserResponse",
    "UserUpdateRequest",
]
