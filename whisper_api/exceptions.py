"""Custom exceptions for the Whisper subtitle API."""

from typing import Optional


class WhisperAPIException(Exception):
    """Base exception for service errors."""

    label = "internal_error"
    status_code = 500


class InvalidParameterError(WhisperAPIException):
    """Raised when request parameters are invalid."""

    label = "invalid_parameter"
    status_code = 400


# ==================== Uploads ====================


class UploadError(WhisperAPIException):
    """Raised when the uploaded payload cannot be accepted."""

    label = "invalid_upload"
    status_code = 400


class EmptyUploadError(UploadError):
    """Raised when the uploaded file has no bytes."""

    label = "empty_upload"


class UploadTooLargeError(UploadError):
    """Raised when the uploaded file exceeds the configured ceiling."""

    label = "upload_too_large"


class StorageError(WhisperAPIException):
    """Raised when a scratch file cannot be written."""

    label = "storage_error"


class WriteVerificationError(StorageError):
    """Raised when the written scratch file does not match the upload."""

    label = "write_verification_failed"


# ==================== External processes ====================


class ProcessError(WhisperAPIException):
    """Base class for external process failures."""

    label = "process_error"


class ProcessSpawnError(ProcessError):
    """Raised when no candidate executable could be launched."""

    label = "process_spawn_failed"


class ProcessExitError(ProcessError):
    """Raised when a process exits with a non-zero code."""

    label = "process_failed"

    def __init__(self, executable: str, returncode: int, stderr_tail: str = ""):
        self.executable = executable
        self.returncode = returncode
        self.stderr_tail = stderr_tail
        message = f"{executable} failed (exit code {returncode})"
        if stderr_tail:
            message += f". stderr: {stderr_tail}"
        super().__init__(message)


class ProcessTimeoutError(ProcessError):
    """Raised when a process does not finish before its deadline."""

    label = "process_timeout"


class MissingArtifactError(ProcessError):
    """Raised when a process exits 0 without producing its output file."""

    label = "missing_artifact"


# ==================== Video ====================


class VideoProcessingError(WhisperAPIException):
    """Base class for captioning failures."""

    label = "video_processing_failed"


class EncoderUnavailableError(VideoProcessingError):
    """Raised when the encoder binary is not reachable."""

    label = "encoder_unavailable"


class MissingInputError(VideoProcessingError):
    """Raised when an input file for the encoder does not exist."""

    label = "missing_input"

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Input file not found: {path}")


class EmptyOutputError(VideoProcessingError):
    """Raised when the encoder produced a zero-byte file."""

    label = "empty_output"


# ==================== Transcription / translation ====================


class ParseError(WhisperAPIException):
    """Raised when tool output does not match the expected structure."""

    label = "parse_error"


class TranscriptionFailedError(WhisperAPIException):
    """Raised when any transcription step fails."""

    label = "transcription_failed"

    def __init__(self, cause: Optional[BaseException] = None, message: Optional[str] = None):
        self.cause = cause
        super().__init__(message or f"Transcription failed: {cause}")


class TranslationCallError(WhisperAPIException):
    """Raised when a call to the translation model fails."""

    label = "translation_failed"
