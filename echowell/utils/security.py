"""Password hashing and JWT helpers."""

from __future__ import annotations

import base64
import hashlib
import hmac
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from echowell.config.settings import settings
from echowell.models.user import User

_ALGORITHM = "pbkdf2_sha256"
_SALT_BYTES = 16
_ITERATIONS = 120_000


def _pbkdf2(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str) -> str:
    """Return ``pbkdf2_sha256$<iterations>$<salt>$<digest>`` for the password."""

    salt = os.urandom(_SALT_BYTES)
    digest = _pbkdf2(password, salt, _ITERATIONS)
    return "$".join(
        (
            _ALGORITHM,
            str(_ITERATIONS),
            base64.b64encode(salt).decode("ascii"),
            base64.b64encode(digest).decode("ascii"),
        )
    )


def verify_password(password: str, hashed: str) -> bool:
    """Check a password against a stored hash, honouring its recorded iteration count."""

    try:
        algorithm, iterations, salt_b64, digest_b64 = hashed.split("$")
        salt = base64.b64decode(salt_b64)
        expected = base64.b64decode(digest_b64)
        rounds = int(iterations)
    except (ValueError, TypeError):
        return False

    if algorithm != _ALGORITHM:
        return False
    return hmac.compare_digest(_pbkdf2(password, salt, rounds), expected)


class AuthenticationError(Exception):
    """Raised when a JWT cannot be decoded or is otherwise invalid."""


class TokenPayload(BaseModel):
    sub: str
    exp: datetime
    iat: datetime | None = None
    name: str | None = None
    tier: str | None = None


def create_access_token(
    subject: str,
    user: User | None = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign a bearer token for ``subject``; the user's display name and tier ride along."""

    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.security.access_token_expires_minutes)
    claims: dict[str, Any] = {"sub": subject, "iat": issued_at, "exp": issued_at + lifetime}

    if user is not None:
        claims["name"] = user.name or user.email
        claims["tier"] = user.subscription_tier.value if user.subscription_tier else None

    return jwt.encode(
        claims,
        settings.security.jwt_secret_key.get_secret_value(),
        algorithm=settings.security.jwt_algorithm,
    )


def decode_access_token(token: str) -> TokenPayload:
    try:
        claims = jwt.decode(
            token,
            settings.security.jwt_secret_key.get_secret_value(),
            algorithms=[settings.security.jwt_algorithm],
        )
        return TokenPayload.model_validate(claims)
    except (JWTError, ValidationError) as exc:
        raise AuthenticationError("Invalid authentication token") from exc


__all__ = [
    "AuthenticationError",
    "TokenPayload",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "verify_password",
]
