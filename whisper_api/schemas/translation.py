"""
Translation Pydantic schemas
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .transcription import Transcript


class CamelModel(BaseModel):
    """Serialises with camelCase keys, accepts either spelling"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TranslateRequest(CamelModel):
    """Translation request body"""

    transcription: Optional[Transcript] = Field(None, description="Transcript to translate")
    target_language: Optional[str] = Field(None, max_length=10, description="Target language code, e.g. en")
    source_language: Optional[str] = Field(None, max_length=10, description="Source language code")
    model: Optional[str] = Field(None, description="Translation model")


class TranslatedSegment(CamelModel):
    """One segment with its original timing"""

    id: Optional[int] = None
    start: float
    end: float
    original_text: str
    translated_text: str


class TranslationResult(CamelModel):
    """Translation response"""

    original_text: str
    translated_text: str
    source_language: str = "auto"
    target_language: str
    segments: list[TranslatedSegment] = Field(default_factory=list)


class LanguageInfo(CamelModel):
    """Supported language entry"""

    code: str
    name: str
    native_name: str


class LanguageListResponse(BaseModel):
    languages: list[LanguageInfo]


class ModelInfo(BaseModel):
    """Translation model catalogue entry"""

    id: str
    name: str
    description: str
    default: bool = False


class ModelListResponse(BaseModel):
    models: list[ModelInfo]
