"""Schemas for companion chat turns."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, Field


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1, max_length=10000)


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(..., min_length=1)
    conversation_id: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("conversation_id", "conversationId"),
        serialization_alias="conversationId",
    )


class ChatResponse(BaseModel):
    message: str
    conversation_id: Optional[int] = Field(None, serialization_alias="conversationId")
    crisis: bool = False


__all__ = ["ChatMessage", "ChatRequest", "ChatResponse"]
