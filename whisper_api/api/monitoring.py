"""
Health check API
"""

import shutil
from typing import Any

from fastapi import APIRouter, Depends

from whisper_api.config import Settings
from whisper_api.services import VideoService

from .deps import get_settings, get_video_service

router = APIRouter(tags=["monitoring"])


@router.get("/health")
async def health_check(
    settings: Settings = Depends(get_settings),
    video: VideoService = Depends(get_video_service),
) -> dict[str, Any]:
    """
    Health check

    Returns:
        {
            "status": "healthy" | "degraded",
            "version": "1.0.0",
            "services": {"ffmpeg": true, "whisper": true}
        }
    """
    services = {
        "ffmpeg": await video.check_ffmpeg(),
        "whisper": any(
            shutil.which(binary) is not None
            for binary in (settings.whisper_bin, settings.whisper_fallback_bin)
            if binary
        ),
    }

    return {
        "status": "healthy" if all(services.values()) else "degraded",
        "version": settings.app_version,
        "services": services,
    }
