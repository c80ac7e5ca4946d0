"""Repository helpers for persisting companion exchanges."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from echowell.models import Conversation, ConversationMetric, Message, MessageRole
from echowell.services.companion import compute_conversation_metrics

logger = logging.getLogger(__name__)

TITLE_LENGTH = 50


class ConversationNotFoundError(LookupError):
    """Raised when a conversation id does not belong to the requesting user."""


def conversation_title(first_user_message: str) -> str:
    return first_user_message[:TITLE_LENGTH] + "..."


async def get_owned_conversation(
    session: AsyncSession, user_id: int, conversation_id: int
) -> Conversation:
    result = await session.execute(
        select(Conversation).where(
            Conversation.id == conversation_id,
            Conversation.user_id == user_id,
        )
    )
    conversation = result.scalar_one_or_none()
    if conversation is None:
        raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
    return conversation


async def record_exchange(
    session: AsyncSession,
    user_id: int,
    conversation_id: int | None,
    user_text: str,
    assistant_text: str,
) -> int:
    """Append a user/assistant pair, creating the conversation when needed.

    Raises ``ConversationNotFoundError`` for a foreign or unknown conversation id.
    """

    if conversation_id is not None:
        conversation = await get_owned_conversation(session, user_id, conversation_id)
        conversation.updated_at = datetime.utcnow()
    else:
        conversation = Conversation(user_id=user_id, title=conversation_title(user_text))
        session.add(conversation)
        await session.flush()

    session.add_all(
        [
            Message(
                conversation_id=conversation.id,
                role=MessageRole.USER,
                content=user_text,
            ),
            Message(
                conversation_id=conversation.id,
                role=MessageRole.ASSISTANT,
                content=assistant_text,
            ),
        ]
    )
    await session.commit()
    return conversation.id


async def log_conversation_metrics(
    session: AsyncSession,
    user_id: int,
    conversation_id: int,
    messages: Sequence[Mapping[str, str]],
) -> None:
    """Store engagement metrics for the exchange; failures are only logged."""

    metrics = compute_conversation_metrics(messages)
    session.add(
        ConversationMetric(
            user_id=user_id,
            conversation_id=conversation_id,
            message_count=metrics.message_count,
            topics_covered=metrics.topics_covered,
            depth_score=metrics.depth_score,
            engagement_score=metrics.engagement_score,
        )
    )
    try:
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.warning(
            "Could not store conversation metrics conversation_id=%s",
            conversation_id,
            exc_info=True,
        )


__all__ = [
    "ConversationNotFoundError",
    "conversation_title",
    "get_owned_conversation",
    "log_conversation_metrics",
    "record_exchange",
]
