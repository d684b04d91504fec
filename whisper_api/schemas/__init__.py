"""
Pydantic schemas
"""

from .subtitle import RenderSubtitlesRequest, SubtitleCue, SubtitleFormat, SubtitleStyle
from .transcription import Segment, Transcript, TranscriptionContext, WhisperOutput
from .translation import (
    LanguageInfo,
    LanguageListResponse,
    ModelInfo,
    ModelListResponse,
    TranslatedSegment,
    TranslateRequest,
    TranslationResult,
)

__all__ = [
    "RenderSubtitlesRequest",
    "SubtitleCue",
    "SubtitleFormat",
    "SubtitleStyle",
    "Segment",
    "Transcript",
    "TranscriptionContext",
    "WhisperOutput",
    "LanguageInfo",
    "LanguageListResponse",
    "ModelInfo",
    "ModelListResponse",
    "TranslatedSegment",
    "TranslateRequest",
    "TranslationResult",
]
