"""Conversation history controller."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Response, status
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from echowell.controllers.dependencies import CurrentUserDep, SessionDep
from echowell.models import Conversation
from echowell.views import ConversationDetailResponse, ConversationSummaryResponse

router = APIRouter(prefix="/conversations", tags=["conversations"])


async def _get_conversation_or_404(session, user_id: int, conversation_id: int) -> Conversation:
    result = await session.execute(
        select(Conversation)
        .options(selectinload(Conversation.messages))
        .where(Conversation.id == conversation_id, Conversation.user_id == user_id)
    )
    conversation = result.scalar_one_or_none()
    if conversation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Conversation not found",
        )
    return conversation


@router.get("/", response_model=list[ConversationSummaryResponse])
async def list_conversations(
    session: SessionDep,
    current_user: CurrentUserDep,
    limit: int = Query(20, ge=1, le=100),
) -> list[ConversationSummaryResponse]:
    result = await session.execute(
        select(Conversation)
        .where(Conversation.user_id == current_user.id)
        .order_by(Conversation.updated_at.desc(), Conversation.id.desc())
        .limit(limit)
    )
    return [ConversationSummaryResponse.model_validate(c) for c in result.scalars().all()]


@router.get("/{conversation_id}", response_model=ConversationDetailResponse)
async def get_conversation(
    conversation_id: int,
    session: SessionDep,
    current_user: CurrentUserDep,
) -> ConversationDetailResponse:
    conversation = await _get_conversation_or_404(session, current_user.id, conversation_id)
    return ConversationDetailResponse.model_validate(conversation)


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
    conversation_id: int,
    session: SessionDep,
    current_user: CurrentUserDep,
) -> Response:
    conversation = await _get_conversation_or_404(session, current_user.id, conversation_id)
    await session.delete(conversation)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
