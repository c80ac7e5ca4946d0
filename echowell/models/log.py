"""Persisted HTTP request log entries."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from .base import Base


class RequestLog(Base):
    """One row per handled request when request persistence is enabled."""

    __tablename__ = "request_logs"

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    method = Column(String(10), nullable=False)
    path = Column(String(1024), nullable=False)
    route = Column(String(255), nullable=True)
    status_code = Column(Integer, nullable=False)
    client_ip = Column(String(64), nullable=True)
    user_agent = Column(String(256), nullable=True)
    duration_ms = Column(Integer, nullable=True)
    rate_limit_remaining = Column(Integer, nullable=True)
    session_id = Column(String(512), nullable=True)
    session_fingerprint = Column(String(64), nullable=True, index=True)
    session_user_id = Column(String(128), nullable=True, index=True)


__all__ = ["RequestLog"]
