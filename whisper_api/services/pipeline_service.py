"""
Captioning pipeline
materialize -> transcribe -> [translate] -> subtitles -> burn / mux
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from loguru import logger

from whisper_api.schemas import (
    Segment,
    SubtitleFormat,
    SubtitleStyle,
    Transcript,
    TranscriptionContext,
    TranslationResult,
)
from whisper_api.utils.subtitles import synthesize, write_subtitle_file

from .transcription_service import TranscriptionService
from .translation_service import TranslationService, stream_language_tag
from .upload_service import UploadService
from .video_service import VideoArtifact, VideoService


@dataclass
class CaptionOptions:
    """Per-request captioning choices"""

    hardcoded: bool = True
    style: SubtitleStyle = field(default_factory=SubtitleStyle)
    target_language: Optional[str] = None
    source_language: Optional[str] = None
    subtitle_language: Optional[str] = None
    model: Optional[str] = None


def translated_segments(result: TranslationResult) -> list[Segment]:
    """Segments carrying the translated text with the original timing"""
    return [
        Segment(id=seg.id, start=seg.start, end=seg.end, text=seg.translated_text)
        for seg in result.segments
    ]


def subtitle_track_language(options: CaptionOptions) -> Optional[str]:
    """Explicit tag first, then the translation target; None keeps the configured default"""
    if options.subtitle_language:
        return options.subtitle_language
    if options.target_language:
        return stream_language_tag(options.target_language)
    return None


class CaptioningPipeline:
    """Sequences the per-request stages; stages never overlap"""

    def __init__(
        self,
        uploads: UploadService,
        transcription: TranscriptionService,
        translation: TranslationService,
        video: VideoService,
    ):
        self.uploads = uploads
        self.transcription = transcription
        self.translation = translation
        self.video = video

    async def transcribe_upload(self, upload: Any, context: Optional[TranscriptionContext] = None) -> Transcript:
        """Materialize an upload, transcribe it, release the scratch file"""
        media = await self.uploads.materialize(
            upload, upload.filename, upload.content_type, getattr(upload, "size", None)
        )
        try:
            return await self.transcription.transcribe(media.path, context)
        finally:
            self.uploads.release(media)

    async def subtitles_for_upload(
        self,
        upload: Any,
        context: Optional[TranscriptionContext] = None,
        fmt: SubtitleFormat = SubtitleFormat.SRT,
    ) -> str:
        transcript = await self.transcribe_upload(upload, context)
        logger.info(f"Synthesizing {fmt.value} for {len(transcript.segments)} segments")
        return synthesize(transcript.segments, fmt)

    async def caption_video(
        self,
        upload: Any,
        context: Optional[TranscriptionContext] = None,
        options: Optional[CaptionOptions] = None,
    ) -> VideoArtifact:
        """
        Produce a captioned copy of an uploaded video

        Args:
            upload: UploadFile-like object (read, filename, content_type)
            context: Transcription guidance
            options: Burn-in vs soft track, style, optional translation

        Returns:
            VideoArtifact; the caller deletes it after streaming
        """
        options = options or CaptionOptions()

        logger.info(f"Captioning stage: materializing {upload.filename}")
        media = await self.uploads.materialize(
            upload, upload.filename, upload.content_type, getattr(upload, "size", None)
        )
        subtitle_path = None
        try:
            logger.info(f"Captioning stage: transcribing {media.path}")
            transcript = await self.transcription.transcribe(media.path, context)

            segments = transcript.segments
            if options.target_language:
                logger.info(f"Captioning stage: translating to {options.target_language}")
                result = await self.translation.translate(
                    transcript,
                    options.target_language,
                    options.source_language or transcript.language,
                    options.model,
                )
                segments = translated_segments(result)

            logger.info(f"Captioning stage: synthesizing subtitles ({len(segments)} cues)")
            subtitle_path = write_subtitle_file(segments, self.uploads.scratch_dir, SubtitleFormat.SRT)

            logger.info(f"Captioning stage: {'burning' if options.hardcoded else 'muxing'} subtitles")
            if options.hardcoded:
                return await self.video.burn_subtitles(media.path, subtitle_path, options.style)
            return await self.video.mux_soft_subtitles(media.path, subtitle_path, subtitle_track_language(options))
        finally:
            self.uploads.release(media)
            self.uploads.release(subtitle_path)
