"""Amazon Transcribe integration helpers using the streaming API."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from amazon_transcribe.client import TranscribeStreamingClient
from amazon_transcribe.handlers import TranscriptResultStreamHandler
from amazon_transcribe.model import TranscriptEvent

from echowell.config.settings import settings
from echowell.services.audio_codec import AudioDecodingError, convert_to_pcm

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 8192


@dataclass(frozen=True)
class TranscriptionResult:
    """Structured transcription outcome returned to controllers."""

    transcript: str
    language_code: str | None = None


class TranscriptionError(RuntimeError):
    """Raised when Amazon Transcribe fails to process audio successfully."""


class TranscribeService:
    """High-level facade for streaming audio to Amazon Transcribe."""

    def __init__(
        self,
        region: str,
        language_code: str = "en-US",
        media_sample_rate_hz: int = 16000,
        realtime_pacing: bool = False,
    ) -> None:
        self._region = region
        self._language_code = language_code
        self._media_sample_rate_hz = media_sample_rate_hz
        self._realtime_pacing = realtime_pacing
        self._client: TranscribeStreamingClient | None = None

    @property
    def sample_rate(self) -> int:
        return self._media_sample_rate_hz

    def _get_client(self) -> TranscribeStreamingClient:
        if self._client is None:
            # The streaming SDK resolves credentials through the default chain.
            credentials = None
            if settings.aws.access_key and settings.aws.secret_key:
                from amazon_transcribe.auth import StaticCredentialResolver

                credentials = StaticCredentialResolver(
                    access_key_id=settings.aws.access_key,
                    secret_access_key=settings.aws.secret_key,
                )
            self._client = TranscribeStreamingClient(
                region=self._region,
                credential_resolver=credentials,
            )
        return self._client

    async def transcribe_audio(self, audio_bytes: bytes) -> TranscriptionResult:
        """Decode an uploaded recording and return its transcript."""

        try:
            pcm_data = await convert_to_pcm(audio_bytes, self._media_sample_rate_hz)
        except AudioDecodingError as exc:
            raise TranscriptionError(f"Audio conversion failed: {exc}") from exc
        return await self.transcribe_pcm(pcm_data)

    async def transcribe_pcm(self, pcm_data: bytes) -> TranscriptionResult:
        """Stream already-decoded s16le mono PCM to Transcribe."""

        if not pcm_data:
            raise TranscriptionError("No audio samples to transcribe.")

        try:
            stream = await self._get_client().start_stream_transcription(
                language_code=self._language_code,
                media_sample_rate_hz=self._media_sample_rate_hz,
                media_encoding="pcm",
            )
        except Exception as exc:  # pragma: no cover - external dependency
            raise TranscriptionError(f"Could not open transcription stream: {exc}") from exc

        handler = _CollectingTranscriptHandler(stream.output_stream)
        sleep_time = _CHUNK_SIZE / (self._media_sample_rate_hz * 2)

        async def write_chunks() -> None:
            logger.info("Streaming %s PCM bytes to Transcribe", len(pcm_data))
            for offset in range(0, len(pcm_data), _CHUNK_SIZE):
                await stream.input_stream.send_audio_event(
                    audio_chunk=pcm_data[offset : offset + _CHUNK_SIZE]
                )
                if self._realtime_pacing:
                    await asyncio.sleep(sleep_time)
            await stream.input_stream.end_stream()

        try:
            await asyncio.gather(write_chunks(), handler.handle_events())
        except Exception as exc:  # pragma: no cover - external dependency
            logger.error("Streaming transcription failed: %s", exc)
            raise TranscriptionError(f"Streaming transcription failed: {exc}") from exc

        transcript = handler.transcript.strip()
        logger.info("Transcription complete. Length: %s", len(transcript))
        return TranscriptionResult(transcript=transcript, language_code=self._language_code)


class _CollectingTranscriptHandler(TranscriptResultStreamHandler):
    def __init__(self, transcript_result_stream):
        super().__init__(transcript_result_stream)
        self.transcript = ""

    async def handle_transcript_event(self, transcript_event: TranscriptEvent):
        for result in transcript_event.transcript.results:
            if result.is_partial:
                continue
            for alt in result.alternatives:
                self.transcript += alt.transcript + " "


_DEFAULT_SERVICE: TranscribeService | None = None


def get_transcribe_service() -> TranscribeService:
    """Return a lazily-instantiated transcribe service singleton."""

    global _DEFAULT_SERVICE
    if _DEFAULT_SERVICE is None:
        _DEFAULT_SERVICE = TranscribeService(
            region=settings.aws.region,
            language_code=settings.transcribe.language_code,
            media_sample_rate_hz=settings.transcribe.sample_rate_hz,
        )
    return _DEFAULT_SERVICE


__all__ = [
    "TranscribeService",
    "TranscriptionError",
    "TranscriptionResult",
    "get_transcribe_service",
]
