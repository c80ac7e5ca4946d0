"""Structured request logging with an encrypted session descriptor."""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ClassVar, Optional

from cryptography.fernet import Fernet
from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from echowell.config.settings import settings
from echowell.middleware.telemetry import resolve_route

logger = logging.getLogger("echowell.middleware.structured")

_STATUS_COLORS = (
    (500, "\u001b[31m"),
    (400, "\u001b[33m"),
    (200, "\u001b[32m"),
)
_DEFAULT_COLOR = "\u001b[36m"
_RESET = "\u001b[0m"

_UNLOGGED_ROUTES = frozenset({"/health", "/metrics"})


@dataclass(slots=True)
class SessionContext:
    identifier: str
    user_id: str
    fingerprint: str


@dataclass(slots=True)
class RequestRecord:
    """Metadata for one request; query strings are never recorded."""

    method: str
    path: str
    client_ip: Optional[str]
    user_agent: Optional[str]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    route: Optional[str] = None
    status_code: int = 0
    duration_ms: float = 0.0
    rate_limit_remaining: Optional[int] = None
    session: Optional[SessionContext] = None

    def console_line(self) -> str:
        color = next(
            (code for floor, code in _STATUS_COLORS if self.status_code >= floor),
            _DEFAULT_COLOR,
        )
        fields = (
            ("timestamp", self.timestamp.isoformat()),
            ("method", self.method),
            ("path", self.path),
            ("status", self.status_code),
            ("duration_ms", self.duration_ms),
            ("client_ip", self.client_ip),
            ("user_id", self.session.user_id if self.session else None),
            ("ai_budget", self.rate_limit_remaining),
        )
        message = ", ".join(f"{name}={'-' if value is None else value}" for name, value in fields)
        return f"{color}{message}{_RESET}"


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Emit one colourised log line per HTTP request and optionally persist it."""

    _cipher: ClassVar[Optional[Fernet]] = None

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        user_agent = request.headers.get("user-agent")
        record = RequestRecord(
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
            user_agent=user_agent[:256] if user_agent else None,
            session=self._session_context(request),
        )

        try:
            response = await call_next(request)
        except Exception:
            record.status_code = 500
            record.duration_ms = self._elapsed_ms(started)
            logger.exception(record.console_line())
            raise

        record.route = resolve_route(request)
        record.status_code = response.status_code
        record.duration_ms = self._elapsed_ms(started)
        remaining = response.headers.get("x-ratelimit-remaining")
        record.rate_limit_remaining = int(remaining) if remaining and remaining.isdigit() else None

        logger.info(record.console_line())
        if settings.persist_request_logs and record.route not in _UNLOGGED_ROUTES:
            await self._persist(record)
        return response

    @staticmethod
    def _elapsed_ms(started: float) -> float:
        return round((time.perf_counter() - started) * 1000, 2)

    @staticmethod
    async def _persist(record: RequestRecord) -> None:
        from echowell.database import session_scope
        from echowell.models.log import RequestLog

        session_context = record.session
        async with session_scope() as session:
            session.add(
                RequestLog(
                    timestamp=record.timestamp.replace(tzinfo=None),
                    method=record.method,
                    path=record.path,
                    route=record.route,
                    status_code=record.status_code,
                    client_ip=record.client_ip,
                    user_agent=record.user_agent,
                    duration_ms=int(record.duration_ms),
                    rate_limit_remaining=record.rate_limit_remaining,
                    session_id=session_context.identifier if session_context else None,
                    session_user_id=session_context.user_id if session_context else None,
                    session_fingerprint=session_context.fingerprint if session_context else None,
                )
            )
            try:
                await session.commit()
            except SQLAlchemyError:
                await session.rollback()
                logger.exception("Failed to persist request log entry")

    def _session_context(self, request: Request) -> SessionContext | None:
        """Describe the bearer token's session without exposing the token itself."""

        scheme, _, token = (request.headers.get("authorization") or "").partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None

        from echowell.utils import AuthenticationError, decode_access_token

        try:
            claims = decode_access_token(token)
        except AuthenticationError:
            logger.debug("Ignoring undecodable bearer token in request log")
            return None

        issued_at = claims.iat or claims.exp
        fingerprint = hashlib.sha256(
            f"{claims.sub}:{int(issued_at.timestamp())}".encode("utf-8")
        ).hexdigest()
        descriptor = json.dumps(
            {"session": fingerprint, "user_id": claims.sub, "expires_at": claims.exp.isoformat()},
            separators=(",", ":"),
        ).encode("utf-8")
        return SessionContext(
            identifier=self._get_cipher().encrypt(descriptor).decode("utf-8"),
            user_id=claims.sub,
            fingerprint=fingerprint,
        )

    @classmethod
    def _get_cipher(cls) -> Fernet:
        """Fernet cipher keyed from the JWT secret."""

        if cls._cipher is None:
            secret = settings.security.jwt_secret_key.get_secret_value().encode("utf-8")
            cls._cipher = Fernet(base64.urlsafe_b64encode(hashlib.sha256(secret).digest()))
        return cls._cipher
