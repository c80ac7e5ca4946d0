"""Declarative base shared by every ORM model."""

from __future__ import annotations

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

# JSONB on PostgreSQL, plain JSON on other backends (SQLite in tests).
JsonColumnType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    pass


__all__ = ["Base", "JsonColumnType"]
