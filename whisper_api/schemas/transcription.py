"""
Transcription Pydantic schemas
"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Segment(BaseModel):
    """One timed unit of transcribed speech"""

    # Whisper adds seek/tokens/avg_logprob/...; keep them on the way through
    model_config = ConfigDict(extra="allow")

    id: Optional[int] = Field(None, description="Segment identifier")
    start: float = Field(..., ge=0, description="Start time (seconds)")
    end: float = Field(..., ge=0, description="End time (seconds)")
    text: str = Field(default="", description="Segment text")

    @model_validator(mode="after")
    def _check_order(self) -> "Segment":
        if self.end < self.start:
            raise ValueError(f"segment end ({self.end}) is before start ({self.start})")
        return self


class Transcript(BaseModel):
    """Transcription response"""

    text: str = Field(default="", description="Full transcribed text")
    language: Optional[str] = Field(None, description="Detected source language")
    segments: list[Segment] = Field(default_factory=list, description="Timestamped segments")

    @field_validator("text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        return value.strip()


class WhisperOutput(BaseModel):
    """JSON artifact written by the whisper CLI (--output_format json)"""

    model_config = ConfigDict(extra="ignore")

    text: str = ""
    language: Optional[str] = None
    segments: list[Segment] = Field(default_factory=list)

    @field_validator("segments", mode="before")
    @classmethod
    def _null_segments(cls, value):
        return [] if value is None else value

    def to_transcript(self) -> Transcript:
        return Transcript(text=self.text, language=self.language, segments=self.segments)


# NUL and other control characters cannot be passed on a command line
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def _reject_control_chars(value: str) -> str:
    if _CONTROL_CHARS.search(value):
        raise ValueError("control characters are not allowed")
    return value


class TranscriptionContext(BaseModel):
    """Optional guidance for the speech engine"""

    prompt: Optional[str] = None
    vocabulary: list[str] = Field(default_factory=list)
    topic: Optional[str] = None
    speaker: Optional[str] = None
    language: Optional[str] = None

    @field_validator("prompt", "topic", "speaker", "language", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str):
            value = _reject_control_chars(value.strip())
            return value or None
        return value

    @field_validator("vocabulary", mode="before")
    @classmethod
    def _split_vocabulary(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        terms: list[str] = []
        for term in value:
            term = _reject_control_chars(str(term).strip())
            if term and term not in terms:
                terms.append(term)
        return terms

    @property
    def is_empty(self) -> bool:
        return not (self.prompt or self.vocabulary or self.topic or self.speaker or self.language)
