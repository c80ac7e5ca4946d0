"""Schemas for stored conversations."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from echowell.models import MessageRole


class MessageResponse(BaseModel):
    id: int
    role: MessageRole
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationSummaryResponse(BaseModel):
    id: int
    title: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationDetailResponse(ConversationSummaryResponse):
    messages: list[MessageResponse] = []


__all__ = ["ConversationDetailResponse", "ConversationSummaryResponse", "MessageResponse"]
