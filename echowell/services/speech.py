"""Amazon Polly text-to-speech for companion replies."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from html import escape as html_escape
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from echowell.config.settings import settings
from echowell.services.aws import create_boto3_client

logger = logging.getLogger(__name__)

# Polly caps a single synthesis request at 3000 billed characters.
MAX_TEXT_CHARACTERS = 3000


@dataclass(frozen=True)
class VoiceSettings:
    voice_id: str
    speed: float


@dataclass(frozen=True)
class SpeechResult:
    """Synthesised speech returned to controllers."""

    audio_bytes: bytes
    media_type: str
    voice_id: str

    def as_data_url(self) -> str:
        encoded = base64.b64encode(self.audio_bytes).decode("ascii")
        return f"data:{self.media_type};base64,{encoded}"


class SpeechSynthesisError(RuntimeError):
    """Raised when Polly cannot produce audio for the given text."""


# Soothing voices slow down for distressed tones; happy speech gets a brighter voice.
_TONE_VOICES: dict[str, VoiceSettings] = {
    "anxious": VoiceSettings("Joanna", 0.90),
    "sad": VoiceSettings("Joanna", 0.92),
    "stressed": VoiceSettings("Joanna", 0.88),
    "angry": VoiceSettings("Joanna", 0.93),
    "happy": VoiceSettings("Salli", 1.05),
    "calm": VoiceSettings("Matthew", 0.95),
}


def voice_settings_for_tone(tone: str | None) -> VoiceSettings:
    """Return the Polly voice and speaking speed used for a detected tone."""

    return _TONE_VOICES.get(tone or "", VoiceSettings(settings.polly.default_voice_id, 1.0))


class SpeechService:
    """Generate MP3 speech with Amazon Polly."""

    def __init__(self, client: Any | None = None, *, engine: str | None = None) -> None:
        self._client = client
        self._engine = engine or settings.polly.engine

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = create_boto3_client("polly", region_name=settings.polly.region)
        return self._client

    async def synthesize(
        self,
        text: str,
        *,
        voice_id: str | None = None,
        speed: float = 1.0,
    ) -> SpeechResult:
        """Convert text to MP3 speech at the requested speaking speed."""

        cleaned = (text or "").strip()
        if not cleaned:
            raise SpeechSynthesisError("Text is required for speech synthesis.")

        voice = voice_id or settings.polly.default_voice_id
        ssml = self._build_ssml(cleaned[:MAX_TEXT_CHARACTERS], speed=speed)

        try:
            response: dict[str, Any] = await run_in_threadpool(
                self._get_client().synthesize_speech,
                TextType="ssml",
                Text=ssml,
                VoiceId=voice,
                Engine=self._engine,
                OutputFormat="mp3",
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception("Polly synth failed for voice '%s'", voice)
            raise SpeechSynthesisError(f"Failed to synthesize speech: {exc}") from exc

        audio_stream = response.get("AudioStream")
        if audio_stream is None:
            raise SpeechSynthesisError("Polly returned no audio stream.")
        audio_bytes = audio_stream.read()
        if not audio_bytes:
            raise SpeechSynthesisError("Polly returned an empty audio stream.")

        return SpeechResult(audio_bytes=audio_bytes, media_type="audio/mpeg", voice_id=voice)

    async def synthesize_for_tone(self, text: str, tone: str | None) -> SpeechResult:
        voice = voice_settings_for_tone(tone)
        return await self.synthesize(text, voice_id=voice.voice_id, speed=voice.speed)

    @staticmethod
    def _build_ssml(text: str, *, speed: float) -> str:
        rate_pct = max(60, min(140, int(round(speed * 100))))
        if rate_pct == 100:
            return f"<speak>{html_escape(text)}</speak>"
        return f'<speak><prosody rate="{rate_pct}%">{html_escape(text)}</prosody></speak>'


_DEFAULT_SERVICE: SpeechService | None = None


def get_speech_service() -> SpeechService:
    """Return a lazily-instantiated Polly speech service singleton."""

    global _DEFAULT_SERVICE
    if _DEFAULT_SERVICE is None:
        _DEFAULT_SERVICE = SpeechService()
    return _DEFAULT_SERVICE


__all__ = [
    "SpeechResult",
    "SpeechService",
    "SpeechSynthesisError",
    "VoiceSettings",
    "get_speech_service",
    "voice_settings_for_tone",
]
