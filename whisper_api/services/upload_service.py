"""
Upload service
Materializes uploaded media into scratch files and releases them
"""

import asyncio
import inspect
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from loguru import logger

from whisper_api.config import Settings
from whisper_api.exceptions import EmptyUploadError, UploadTooLargeError, WriteVerificationError

CHUNK_SIZE = 1024 * 1024
DEFAULT_EXTENSION = ".wav"

# Checked in order against the declared media type
_AUDIO_EXTENSIONS = [
    ("mpeg", ".mp3"),
    ("mp3", ".mp3"),
    ("wav", ".wav"),
    ("ogg", ".ogg"),
    ("m4a", ".m4a"),
    ("mp4", ".m4a"),
    ("webm", ".webm"),
    ("flac", ".flac"),
]
_VIDEO_EXTENSIONS = [
    ("mp4", ".mp4"),
    ("quicktime", ".mov"),
    ("x-matroska", ".mkv"),
    ("x-msvideo", ".avi"),
    ("webm", ".webm"),
    ("mpeg", ".mpeg"),
]


@dataclass
class MediaFile:
    """Scratch copy of one upload, owned by a single request"""

    path: Path
    media_type: Optional[str]
    size: int
    filename: str


def extension_for_media_type(media_type: Optional[str]) -> str:
    """
    Pick a file extension from a MIME type

    Args:
        media_type: e.g. "audio/mpeg"

    Returns:
        Extension with leading dot; ".wav" when unknown
    """
    if not media_type:
        return DEFAULT_EXTENSION
    media_type = media_type.lower()
    if media_type.startswith("audio/"):
        table = _AUDIO_EXTENSIONS
    elif media_type.startswith("video/"):
        table = _VIDEO_EXTENSIONS
    else:
        return DEFAULT_EXTENSION
    for token, extension in table:
        if token in media_type:
            return extension
    return DEFAULT_EXTENSION


class UploadService:
    """Scratch-file lifecycle for uploads"""

    def __init__(self, settings: Settings):
        self.scratch_dir = Path(settings.scratch_dir)
        self.max_upload_size = settings.max_upload_size

    def build_filename(self, filename: Optional[str], media_type: Optional[str]) -> str:
        """Keep the declared name; add an extension derived from the media type if it has none"""
        name = Path(filename or "audio").name or "audio"
        if not Path(name).suffix:
            name += extension_for_media_type(media_type)
        return name

    async def materialize(
        self,
        stream: Any,
        filename: Optional[str],
        media_type: Optional[str],
        declared_size: Optional[int] = None,
    ) -> MediaFile:
        """
        Persist an upload stream to a unique scratch file

        Args:
            stream: Object with a (sync or async) read(size) method, e.g. UploadFile
            filename: Declared file name
            media_type: Declared MIME type
            declared_size: Size announced by the client, if known

        Returns:
            MediaFile

        Raises:
            UploadTooLargeError: Upload exceeds max_upload_size (nothing is written)
            EmptyUploadError: Upload has no bytes (nothing is written)
            WriteVerificationError: Written file size differs from the upload
        """
        if declared_size is not None and declared_size > self.max_upload_size:
            raise UploadTooLargeError(
                f"Upload of {declared_size} bytes exceeds limit of {self.max_upload_size} bytes"
            )

        data = await self._read_all(stream)
        if not data:
            raise EmptyUploadError("Uploaded file is empty")

        logger.info(f"Received upload: {filename} ({media_type}, {len(data)} bytes)")

        self.scratch_dir.mkdir(parents=True, exist_ok=True)
        path = self.scratch_dir / f"upload-{uuid.uuid4()}-{self.build_filename(filename, media_type)}"

        await asyncio.to_thread(path.write_bytes, data)
        self._verify(path, len(data))

        logger.info(f"Upload saved: {path}")
        return MediaFile(path=path, media_type=media_type, size=len(data), filename=filename or path.name)

    async def _read_all(self, stream: Any) -> bytes:
        chunks: list[bytes] = []
        total = 0
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if inspect.isawaitable(chunk):
                chunk = await chunk
            if not chunk:
                break
            total += len(chunk)
            if total > self.max_upload_size:
                raise UploadTooLargeError(f"Upload exceeds limit of {self.max_upload_size} bytes")
            chunks.append(chunk)
        return b"".join(chunks)

    def _verify(self, path: Path, expected_size: int) -> None:
        try:
            actual = path.stat().st_size
        except OSError as e:
            raise WriteVerificationError(f"Saved file is not accessible: {path}: {e}") from e

        if actual != expected_size:
            self.release(path)
            raise WriteVerificationError(
                f"Saved file size mismatch. Expected: {expected_size}, actual: {actual}"
            )

    def release(self, path: Union[str, Path, MediaFile, None]) -> None:
        """
        Delete a scratch file; safe to call repeatedly

        Missing files and filesystem errors are logged, never raised.
        """
        if path is None:
            return
        if isinstance(path, MediaFile):
            path = path.path
        try:
            os.unlink(path)
            logger.info(f"Scratch file removed: {path}")
        except FileNotFoundError:
            logger.debug(f"Scratch file already gone: {path}")
        except OSError as e:
            logger.warning(f"Failed to remove scratch file {path}: {e}")
