"""
Transcription and captioning API routes
"""

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse, Response
from loguru import logger
from starlette.background import BackgroundTask

from whisper_api.exceptions import InvalidParameterError
from whisper_api.schemas import RenderSubtitlesRequest, SubtitleFormat, SubtitleStyle, Transcript
from whisper_api.services import CaptionOptions, CaptioningPipeline
from whisper_api.services.video_service import remove_file
from whisper_api.utils.subtitles import synthesize

from .deps import (
    TranscriptionForm,
    get_pipeline,
    get_subtitle_style,
    get_transcription_form,
    get_video_form,
)

router = APIRouter(tags=["transcription"])


def _require_media_type(content_type: Optional[str], *prefixes: str) -> None:
    if not content_type or not content_type.startswith(prefixes):
        allowed = " or ".join(f"{p}*" for p in prefixes)
        raise InvalidParameterError(f"Unsupported content type {content_type!r}, expected {allowed}")


def download_name(filename: Optional[str]) -> str:
    """Name offered to the client for a captioned video"""
    stem = Path(filename).stem if filename else ""
    return f"{stem}_with_subtitles.mp4" if stem else "video_with_subtitles.mp4"


@router.post("/transcribe", response_model=Transcript)
async def transcribe(
    form: TranscriptionForm = Depends(get_transcription_form),
    pipeline: CaptioningPipeline = Depends(get_pipeline),
):
    """
    Transcribe an uploaded audio or video file

    Returns:
        {"text": "...", "language": "pt", "segments": [...]}
    """
    _require_media_type(form.upload.content_type, "audio/", "video/")
    logger.info(f"Transcription requested: {form.upload.filename} ({form.upload.content_type})")
    return await pipeline.transcribe_upload(form.upload, form.context)


@router.post("/transcribe/subtitles")
async def transcribe_to_subtitles(
    form: TranscriptionForm = Depends(get_transcription_form),
    fmt: SubtitleFormat = Query(SubtitleFormat.SRT, alias="format"),
    pipeline: CaptioningPipeline = Depends(get_pipeline),
):
    """Transcribe an upload and return the subtitle document"""
    _require_media_type(form.upload.content_type, "audio/", "video/")
    document = await pipeline.subtitles_for_upload(form.upload, form.context, fmt)
    stem = Path(form.upload.filename).stem if form.upload.filename else "subtitles"
    return Response(
        content=document,
        media_type=fmt.media_type,
        headers={"Content-Disposition": f'attachment; filename="{stem}{fmt.extension}"'},
    )


@router.post("/subtitles/render")
async def render_subtitles(request: RenderSubtitlesRequest):
    """Render an existing transcript as SRT or VTT"""
    document = synthesize(request.transcription.segments, request.format)
    return Response(content=document, media_type=request.format.media_type)


@router.post("/transcribe/video")
async def transcribe_video(
    form: TranscriptionForm = Depends(get_video_form),
    style: SubtitleStyle = Depends(get_subtitle_style),
    hardcoded: bool = Query(True, description="Burn into frames (true) or attach a soft track (false)"),
    target_language: Optional[str] = Query(None, alias="targetLanguage"),
    source_language: Optional[str] = Query(None, alias="sourceLanguage"),
    subtitle_language: Optional[str] = Query(None, alias="subtitleLanguage"),
    model: Optional[str] = Query(None),
    pipeline: CaptioningPipeline = Depends(get_pipeline),
):
    """
    Transcribe a video and return it with subtitles

    The response streams the captioned MP4; the file is deleted once sent.
    """
    _require_media_type(form.upload.content_type, "video/")

    options = CaptionOptions(
        hardcoded=hardcoded,
        style=style,
        target_language=target_language,
        source_language=source_language,
        subtitle_language=subtitle_language,
        model=model,
    )
    logger.info(
        f"Captioning requested: {form.upload.filename}, hardcoded={hardcoded}, "
        f"target_language={target_language}"
    )
    artifact = await pipeline.caption_video(form.upload, form.context, options)

    return FileResponse(
        artifact.path,
        media_type="video/mp4",
        filename=download_name(form.upload.filename),
        background=BackgroundTask(remove_file, artifact.path),
    )
