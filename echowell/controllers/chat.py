"""Companion chat controller."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from echowell.controllers.dependencies import AiRateLimitDep, CurrentUserDep, SessionDep
from echowell.services.companion import CompanionError, get_chat_response
from echowell.services.conversation_store import (
    ConversationNotFoundError,
    get_owned_conversation,
    log_conversation_metrics,
    record_exchange,
)
from echowell.services.crisis import CRISIS_RESPONSE, detect_crisis
from echowell.telemetry import increment_crisis
from echowell.views import ChatRequest, ChatResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/chat",
    tags=["chat"],
    responses={429: {"model": ErrorResponse, "description": "AI request budget exhausted"}},
)


@router.post("/", response_model=ChatResponse, dependencies=[AiRateLimitDep])
async def chat(
    payload: ChatRequest,
    session: SessionDep,
    current_user: CurrentUserDep,
) -> ChatResponse:
    """Answer the latest user turn, short-circuiting to crisis resources when needed."""

    messages = [message.model_dump() for message in payload.messages]
    last_message = messages[-1]

    if payload.conversation_id is not None:
        try:
            await get_owned_conversation(session, current_user.id, payload.conversation_id)
        except ConversationNotFoundError:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Conversation not found",
            ) from None

    if last_message["role"] == "user" and detect_crisis(last_message["content"]):
        increment_crisis()
        logger.warning("Crisis language detected user_id=%s", current_user.id)
        if payload.conversation_id is not None:
            try:
                await record_exchange(
                    session,
                    current_user.id,
                    payload.conversation_id,
                    last_message["content"],
                    CRISIS_RESPONSE,
                )
            except SQLAlchemyError:
                await session.rollback()
                logger.warning(
                    "Failed to persist crisis exchange user_id=%s",
                    current_user.id,
                    exc_info=True,
                )
        return ChatResponse(
            message=CRISIS_RESPONSE,
            conversation_id=payload.conversation_id,
            crisis=True,
        )

    try:
        reply = await get_chat_response(messages)
    except CompanionError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    try:
        conversation_id = await record_exchange(
            session,
            current_user.id,
            payload.conversation_id,
            last_message["content"],
            reply,
        )
    except SQLAlchemyError:
        await session.rollback()
        logger.warning("Failed to persist chat exchange; replying without it", exc_info=True)
        return ChatResponse(message=reply, conversation_id=payload.conversation_id)

    await log_conversation_metrics(
        session,
        current_user.id,
        conversation_id,
        [*messages, {"role": "assistant", "content": reply}],
    )
    return ChatResponse(message=reply, conversation_id=conversation_id)
