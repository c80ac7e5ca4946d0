"""Voice controller: tone analysis, speech-to-text, text-to-speech and voice chat."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import Response
from pydantic import TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from echowell.controllers.dependencies import AiRateLimitDep, CurrentUserDep, SessionDep
from echowell.models import VoiceToneLog
from echowell.pipelines.voice import (
    VoiceToneResult,
    adjust_response_for_tone,
    analyze_voice_tone,
    read_audio_bytes,
    resolve_content_type,
)
from echowell.services.companion import get_chat_response
from echowell.services.conversation_store import (
    ConversationNotFoundError,
    get_owned_conversation,
    record_exchange,
)
from echowell.services.crisis import CRISIS_RESPONSE, detect_crisis
from echowell.services.speech import (
    SpeechService,
    SpeechSynthesisError,
    get_speech_service,
    voice_settings_for_tone,
)
from echowell.services.transcribe import (
    TranscribeService,
    TranscriptionError,
    get_transcribe_service,
)
from echowell.telemetry import increment_crisis
from echowell.views import (
    ChatMessage,
    EmotionalStateView,
    ErrorResponse,
    SpeechToTextResponse,
    TextToSpeechRequest,
    ToneAnalysisResponse,
    VoiceConversationResponse,
    VoiceToneLogResponse,
    VoiceToneResultView,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/voice",
    tags=["voice"],
    responses={429: {"model": ErrorResponse, "description": "AI request budget exhausted"}},
)

TranscribeDep = Annotated[TranscribeService, Depends(get_transcribe_service)]
SpeechDep = Annotated[SpeechService, Depends(get_speech_service)]

UNCLEAR_AUDIO_TEXT = "I had trouble understanding your voice message."

_MESSAGES_ADAPTER = TypeAdapter(list[ChatMessage])


async def _owned_conversation_id(session, user_id: int, conversation_id: Optional[int]) -> Optional[int]:
    if conversation_id is None:
        return None
    try:
        await get_owned_conversation(session, user_id, conversation_id)
    except ConversationNotFoundError:
        logger.warning(
            "Ignoring conversation_id=%s not owned by user_id=%s", conversation_id, user_id
        )
        return None
    return conversation_id


async def _log_tone(
    session,
    user_id: int,
    conversation_id: Optional[int],
    result: VoiceToneResult,
) -> None:
    """Persist the analysis; storage failures never fail the request."""

    session.add(
        VoiceToneLog(
            user_id=user_id,
            conversation_id=conversation_id,
            tone_detected=result.tone,
            confidence_score=result.confidence,
            pitch_average=result.pitch,
            speech_rate=result.speech_rate,
            energy_level=result.energy_level,
            emotional_state={
                "valence": result.emotional_state.valence,
                "arousal": result.emotional_state.arousal,
                "dominance": result.emotional_state.dominance,
            },
            audio_features=result.audio_features.summary(),
        )
    )
    try:
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.error("Failed to log voice tone for user_id=%s", user_id, exc_info=True)


@router.post("/analyze-tone", response_model=ToneAnalysisResponse, dependencies=[AiRateLimitDep])
async def analyze_tone(
    session: SessionDep,
    current_user: CurrentUserDep,
    transcribe_service: TranscribeDep,
    audio_file: UploadFile = File(...),
    conversation_id: Optional[int] = Form(None),
) -> ToneAnalysisResponse:
    resolve_content_type(audio_file)
    audio_bytes = await read_audio_bytes(audio_file)

    result = await analyze_voice_tone(audio_bytes, transcribe_service=transcribe_service)
    owned_id = await _owned_conversation_id(session, current_user.id, conversation_id)
    await _log_tone(session, current_user.id, owned_id, result)

    return ToneAnalysisResponse(tone_result=VoiceToneResultView.model_validate(result))


@router.get("/tone-logs", response_model=list[VoiceToneLogResponse])
async def tone_logs(
    session: SessionDep,
    current_user: CurrentUserDep,
    days: int = Query(7, ge=1, le=365),
) -> list[VoiceToneLogResponse]:
    since = datetime.utcnow() - timedelta(days=days)
    result = await session.execute(
        select(VoiceToneLog)
        .where(VoiceToneLog.user_id == current_user.id, VoiceToneLog.recorded_at >= since)
        .order_by(VoiceToneLog.recorded_at.desc(), VoiceToneLog.id.desc())
    )
    return [VoiceToneLogResponse.model_validate(log) for log in result.scalars().all()]


@router.post(
    "/speech-to-text",
    response_model=SpeechToTextResponse,
    dependencies=[AiRateLimitDep],
    responses={502: {"model": ErrorResponse}},
)
async def speech_to_text(
    current_user: CurrentUserDep,
    transcribe_service: TranscribeDep,
    audio_file: UploadFile = File(...),
) -> SpeechToTextResponse:
    resolve_content_type(audio_file)
    audio_bytes = await read_audio_bytes(audio_file)

    try:
        result = await transcribe_service.transcribe_audio(audio_bytes)
    except TranscriptionError as exc:
        logger.error("Speech-to-text failed for user_id=%s: %s", current_user.id, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to transcribe audio",
        ) from exc

    return SpeechToTextResponse(text=result.transcript, language_code=result.language_code)


@router.post(
    "/text-to-speech",
    response_class=Response,
    dependencies=[AiRateLimitDep],
    responses={200: {"content": {"audio/mpeg": {}}}, 502: {"model": ErrorResponse}},
)
async def text_to_speech(
    payload: TextToSpeechRequest,
    _current_user: CurrentUserDep,
    speech_service: SpeechDep,
) -> Response:
    """Convert text to speech with Amazon Polly and return MP3 bytes."""

    if payload.tone:
        voice = voice_settings_for_tone(payload.tone)
        voice_id, speed = payload.voice_id or voice.voice_id, payload.speed or voice.speed
    else:
        voice_id, speed = payload.voice_id, payload.speed or 1.0

    try:
        result = await speech_service.synthesize(payload.text, voice_id=voice_id, speed=speed)
    except SpeechSynthesisError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to generate speech",
        ) from exc

    return Response(content=result.audio_bytes, media_type=result.media_type)


def _parse_messages(raw: str) -> list[dict[str, str]]:
    try:
        messages = _MESSAGES_ADAPTER.validate_python(json.loads(raw or "[]"))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="messages must be a JSON array of {role, content} objects",
        ) from exc
    return [message.model_dump() for message in messages]


@router.post("/conversation", response_model=VoiceConversationResponse, dependencies=[AiRateLimitDep])
async def voice_conversation(
    session: SessionDep,
    current_user: CurrentUserDep,
    transcribe_service: TranscribeDep,
    speech_service: SpeechDep,
    audio_file: UploadFile = File(...),
    messages: str = Form("[]"),
    conversation_id: Optional[int] = Form(None),
) -> VoiceConversationResponse:
    """Tone-aware spoken exchange: analyse, reply in text and answer with speech."""

    history = _parse_messages(messages)
    resolve_content_type(audio_file)
    audio_bytes = await read_audio_bytes(audio_file)

    tone_result = await analyze_voice_tone(audio_bytes, transcribe_service=transcribe_service)
    owned_id = await _owned_conversation_id(session, current_user.id, conversation_id)
    await _log_tone(session, current_user.id, owned_id, tone_result)

    user_text = tone_result.transcript or UNCLEAR_AUDIO_TEXT
    crisis = detect_crisis(user_text)
    if crisis:
        increment_crisis()
        logger.warning("Crisis language detected in voice message user_id=%s", current_user.id)
        reply = CRISIS_RESPONSE
    else:
        reply = adjust_response_for_tone(
            await get_chat_response(
                [*history, {"role": "user", "content": user_text}],
                tone=tone_result.tone,
                tone_confidence=tone_result.confidence,
            ),
            tone_result,
        )

    audio_url = ""
    try:
        speech = await speech_service.synthesize_for_tone(reply, tone_result.tone)
        audio_url = speech.as_data_url()
    except SpeechSynthesisError as exc:
        logger.warning("Text-to-speech failed; returning text only: %s", exc)

    try:
        stored_id = await record_exchange(session, current_user.id, owned_id, user_text, reply)
    except SQLAlchemyError:
        await session.rollback()
        logger.warning("Failed to persist voice exchange", exc_info=True)
        stored_id = owned_id

    return VoiceConversationResponse(
        user_text=user_text,
        ai_response=reply,
        audio_url=audio_url,
        tone_detected=tone_result.tone,
        tone_confidence=tone_result.confidence,
        recommendations=tone_result.recommendations,
        emotional_state=EmotionalStateView.model_validate(tone_result.emotional_state),
        conversation_id=stored_id,
        crisis=crisis,
    )
