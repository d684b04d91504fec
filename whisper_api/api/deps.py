"""
API dependency injection
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import File, Form, Query, Request, UploadFile
from pydantic import ValidationError

from whisper_api.config import Settings
from whisper_api.exceptions import InvalidParameterError
from whisper_api.schemas import SubtitleStyle, TranscriptionContext
from whisper_api.schemas.subtitle import FONT_NAME_PATTERN, HEX_COLOR_PATTERN
from whisper_api.services import CaptioningPipeline, TranslationService, VideoService


@dataclass
class TranscriptionForm:
    """Multipart request collected before any processing starts"""

    upload: UploadFile
    context: TranscriptionContext


def _build_form(
    upload: UploadFile,
    prompt: Optional[str],
    vocabulary: Optional[str],
    topic: Optional[str],
    speaker: Optional[str],
    language: Optional[str],
) -> TranscriptionForm:
    try:
        context = TranscriptionContext(
            prompt=prompt,
            vocabulary=vocabulary,
            topic=topic,
            speaker=speaker,
            language=language,
        )
    except ValidationError as e:
        fields = ", ".join(str(error["loc"][0]) for error in e.errors() if error.get("loc"))
        raise InvalidParameterError(
            f"Invalid transcription context ({fields}): control characters are not allowed"
        ) from e
    return TranscriptionForm(upload=upload, context=context)


async def get_transcription_form(
    file: UploadFile = File(..., description="Audio or video file"),
    prompt: Optional[str] = Form(None, description="Initial prompt"),
    vocabulary: Optional[str] = Form(None, description="Comma-separated vocabulary"),
    topic: Optional[str] = Form(None, description="Topic hint"),
    speaker: Optional[str] = Form(None, description="Speaker hint"),
    language: Optional[str] = Form(None, description="Language code, overrides the default"),
) -> TranscriptionForm:
    return _build_form(file, prompt, vocabulary, topic, speaker, language)


async def get_video_form(
    video: UploadFile = File(..., description="Video file"),
    prompt: Optional[str] = Form(None),
    vocabulary: Optional[str] = Form(None),
    topic: Optional[str] = Form(None),
    speaker: Optional[str] = Form(None),
    language: Optional[str] = Form(None),
) -> TranscriptionForm:
    return _build_form(video, prompt, vocabulary, topic, speaker, language)


def get_subtitle_style(
    font_name: str = Query("Arial", alias="fontName", pattern=FONT_NAME_PATTERN),
    font_size: int = Query(18, alias="fontSize", gt=0),
    font_color: str = Query("#FFFFFF", alias="fontColor", pattern=HEX_COLOR_PATTERN),
    background_color: Optional[str] = Query(None, alias="backgroundColor", pattern=HEX_COLOR_PATTERN),
    border_width: int = Query(1, alias="borderWidth", ge=0),
    border_color: Optional[str] = Query(None, alias="borderColor", pattern=HEX_COLOR_PATTERN),
    margin_vertical: int = Query(20, alias="marginVertical", ge=0),
) -> SubtitleStyle:
    """Burn-in style from query parameters (defaults: 18px Arial, white, 1px outline, 20px margin)"""
    return SubtitleStyle(
        font_name=font_name,
        font_size=font_size,
        font_color=font_color,
        background_color=background_color,
        border_width=border_width,
        border_color=border_color,
        margin_vertical=margin_vertical,
    )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pipeline(request: Request) -> CaptioningPipeline:
    return request.app.state.pipeline


def get_translation_service(request: Request) -> TranslationService:
    return request.app.state.pipeline.translation


def get_video_service(request: Request) -> VideoService:
    return request.app.state.pipeline.video
