"""Voice tone analysis pipeline package.

Modules are organised by the order in which `/voice/analyze-tone` executes:

1. `ingestion` - validate and read the upload.
2. `transcription` - speech-to-text with graceful degradation.
3. `emotion` - LLM emotional read of the transcript.
4. `features` - acoustic measurements from the decoded waveform.
5. `classification` - merge, confidence, recommendations, reply adaptation.
6. `flow` - human-readable description of the end-to-end stages.
"""

from .analysis import analyze_voice_tone
from .classification import (
    adjust_response_for_tone,
    calculate_confidence,
    combine_analysis,
    generate_recommendations,
)
from .emotion import rate_transcript
from .features import extract_features, extract_features_from_pcm
from .flow import PipelineStage, VoiceAnalysisPipeline
from .ingestion import read_audio_bytes, resolve_content_type
from .transcription import transcribe_pcm
from .types import AudioFeatures, EmotionalState, VoiceToneResult

__all__ = [
    "AudioFeatures",
    "EmotionalState",
    "PipelineStage",
    "VoiceAnalysisPipeline",
    "VoiceToneResult",
    "adjust_response_for_tone",
    "analyze_voice_tone",
    "calculate_confidence",
    "combine_analysis",
    "extract_features",
    "extract_features_from_pcm",
    "generate_recommendations",
    "rate_transcript",
    "read_audio_bytes",
    "resolve_content_type",
    "transcribe_pcm",
]
