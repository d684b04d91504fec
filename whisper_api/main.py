"""
FastAPI application entry point
"""

import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from whisper_api.api import monitoring_router, transcription_router, translation_router
from whisper_api.config import Settings, get_settings
from whisper_api.exceptions import WhisperAPIException
from whisper_api.integrations.ollama import OllamaClient
from whisper_api.services import (
    CaptioningPipeline,
    TranscriptionService,
    TranslationService,
    UploadService,
    VideoService,
)
from whisper_api.utils.process import ProcessRunner


def setup_logging(settings: Settings) -> None:
    """Console sink plus an optional rotating file sink"""
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)
    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(settings.log_file, rotation="10 MB", retention=10, level="DEBUG", enqueue=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    settings: Settings = app.state.settings
    setup_logging(settings)

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    Path(settings.scratch_dir).mkdir(parents=True, exist_ok=True)
    if not await app.state.pipeline.video.check_ffmpeg():
        logger.warning("FFmpeg is not available, /transcribe/video will fail")

    yield

    logger.info("Shutting down...")


def _validation_detail(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application and wire its services

    Args:
        settings: Settings to use (environment when omitted)

    Returns:
        FastAPI app with services on app.state
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Whisper transcription, subtitle and video captioning API",
        lifespan=lifespan,
    )

    runner = ProcessRunner()
    uploads = UploadService(settings)
    transcription = TranscriptionService(settings, runner)
    translation = TranslationService(settings, OllamaClient(settings=settings))
    video = VideoService(settings, runner)

    app.state.settings = settings
    app.state.pipeline = CaptioningPipeline(uploads, transcription, translation, video)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.include_router(transcription_router)
    app.include_router(translation_router)
    app.include_router(monitoring_router)

    @app.get("/")
    async def root():
        return {
            "message": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
        }

    @app.exception_handler(WhisperAPIException)
    async def service_exception_handler(request: Request, exc: WhisperAPIException):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.label, "detail": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "invalid_parameter", "detail": _validation_detail(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_error",
                "detail": str(exc) if settings.debug else "An error occurred",
            },
        )

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    import uvicorn

    uvicorn.run(
        "whisper_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
