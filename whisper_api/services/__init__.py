"""
Service layer
"""

from .pipeline_service import CaptionOptions, CaptioningPipeline
from .transcription_service import TranscriptionService
from .translation_service import TranslationService
from .upload_service import MediaFile, UploadService
from .video_service import VideoArtifact, VideoService

__all__ = [
    "CaptionOptions",
    "CaptioningPipeline",
    "TranscriptionService",
    "TranslationService",
    "MediaFile",
    "UploadService",
    "VideoArtifact",
    "VideoService",
]
