"""
Application configuration
Loaded from environment variables with pydantic-settings
"""

import tempfile
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings (immutable once built)"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    # ==================== Application ====================
    app_name: str = "Whisper Subtitle API"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3333, alias="PORT")

    # ==================== Whisper ====================
    whisper_bin: str = Field(default="whisper-ctranslate2", alias="WHISPER_BIN")
    whisper_fallback_bin: str = Field(default="whisper", alias="WHISPER_FALLBACK_BIN")
    whisper_model: str = Field(default="base", alias="WHISPER_MODEL")
    # Empty means auto-detect
    whisper_language: str = Field(default="", alias="WHISPER_LANG")
    whisper_timeout: float = Field(default=30.0, gt=0, alias="WHISPER_TIMEOUT")  # seconds

    # ==================== Uploads ====================
    max_upload_size: int = Field(default=50 * 1024 * 1024, gt=0, alias="MAX_UPLOAD_SIZE")  # 50MB
    scratch_dir: str = Field(default_factory=tempfile.gettempdir, alias="SCRATCH_DIR")

    # ==================== FFmpeg ====================
    ffmpeg_bin: str = Field(default="ffmpeg", alias="FFMPEG_BIN")
    ffmpeg_timeout: float = Field(default=600.0, gt=0, alias="FFMPEG_TIMEOUT")
    ffmpeg_check_timeout: float = Field(default=10.0, gt=0, alias="FFMPEG_CHECK_TIMEOUT")
    subtitle_language: str = Field(default="por", alias="SUBTITLE_LANGUAGE")

    # ==================== Translation (Ollama) ====================
    ollama_host: str = Field(default="http://localhost:11434", alias="OLLAMA_HOST")
    translation_model: str = Field(default="llama3.1:8b", alias="TRANSLATION_MODEL")
    translation_timeout: float = Field(default=60.0, gt=0, alias="TRANSLATION_TIMEOUT")
    # Pause between consecutive segment calls
    translation_pacing: float = Field(default=0.2, ge=0, alias="TRANSLATION_PACING")
    default_source_language: str = Field(default="pt", alias="DEFAULT_SOURCE_LANGUAGE")

    # ==================== CORS ====================
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # ==================== Logging ====================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", alias="LOG_LEVEL")
    log_file: str = Field(default="logs/app.log", alias="LOG_FILE")


@lru_cache
def get_settings() -> Settings:
    """Build the process-wide settings once"""
    return Settings()
