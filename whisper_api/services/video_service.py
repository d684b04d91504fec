"""
Video service
Burns subtitles into video or muxes them as a soft subtitle track
"""

import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from whisper_api.config import Settings
from whisper_api.exceptions import (
    EmptyOutputError,
    EncoderUnavailableError,
    MissingInputError,
    ProcessError,
)
from whisper_api.schemas import SubtitleStyle
from whisper_api.utils.ffmpeg import build_burn_args, build_soft_mux_args
from whisper_api.utils.process import ProcessRunner

PathLike = Union[str, Path]


@dataclass
class VideoArtifact:
    """Encoded output; the caller deletes it after use"""

    path: Path
    size: int
    hardcoded: bool


class VideoService:
    """FFmpeg-backed captioning"""

    def __init__(self, settings: Settings, runner: Optional[ProcessRunner] = None):
        self.ffmpeg_bin = settings.ffmpeg_bin
        self.timeout = settings.ffmpeg_timeout
        self.check_timeout = settings.ffmpeg_check_timeout
        self.subtitle_language = settings.subtitle_language
        self.scratch_dir = Path(settings.scratch_dir)
        self.runner = runner or ProcessRunner()

    async def check_ffmpeg(self) -> bool:
        """Whether `ffmpeg -version` runs successfully"""
        try:
            await self.runner.run(self.ffmpeg_bin, None, ["-version"], timeout=self.check_timeout)
            return True
        except ProcessError as e:
            logger.warning(f"FFmpeg not available: {e}")
            return False

    def generate_output_path(self, input_path: PathLike, suffix: str = "_subtitled") -> Path:
        """Collision-free output path in the scratch directory"""
        stem = Path(input_path).stem
        return self.scratch_dir / f"{stem}{suffix}_{uuid.uuid4().hex[:8]}.mp4"

    async def burn_subtitles(
        self,
        video_path: PathLike,
        subtitle_path: PathLike,
        style: Optional[SubtitleStyle] = None,
    ) -> VideoArtifact:
        """
        Re-encode the video with subtitles drawn into the frames

        Args:
            video_path: Input video (deleted on success)
            subtitle_path: SRT/VTT file (deleted on success)
            style: Burn-in style (defaults when omitted)

        Returns:
            VideoArtifact

        Raises:
            EncoderUnavailableError: ffmpeg is not reachable
            MissingInputError: An input path does not exist
            ProcessError: ffmpeg failed
            EmptyOutputError: ffmpeg produced an empty file
        """
        await self._preflight(video_path, subtitle_path)

        output_path = self.generate_output_path(video_path, "_subtitled")
        args = build_burn_args(video_path, subtitle_path, output_path, style)

        logger.info(f"Burning subtitles: video={video_path}, subtitle={subtitle_path}")
        return await self._encode(args, video_path, subtitle_path, output_path, hardcoded=True)

    async def mux_soft_subtitles(
        self,
        video_path: PathLike,
        subtitle_path: PathLike,
        language: Optional[str] = None,
    ) -> VideoArtifact:
        """
        Copy the streams and attach the subtitles as a selectable track

        Raises:
            Same as burn_subtitles
        """
        await self._preflight(video_path, subtitle_path)

        output_path = self.generate_output_path(video_path, "_with_subs")
        args = build_soft_mux_args(video_path, subtitle_path, output_path, language or self.subtitle_language)

        logger.info(f"Muxing soft subtitles: video={video_path}, subtitle={subtitle_path}")
        return await self._encode(args, video_path, subtitle_path, output_path, hardcoded=False)

    async def _preflight(self, video_path: PathLike, subtitle_path: PathLike) -> None:
        if not await self.check_ffmpeg():
            raise EncoderUnavailableError(f"FFmpeg ({self.ffmpeg_bin}) is not installed or not on PATH")

        for path in (video_path, subtitle_path):
            if not Path(path).is_file():
                raise MissingInputError(str(path))

    async def _encode(
        self,
        args: list[str],
        video_path: PathLike,
        subtitle_path: PathLike,
        output_path: Path,
        hardcoded: bool,
    ) -> VideoArtifact:
        self.scratch_dir.mkdir(parents=True, exist_ok=True)
        try:
            await self.runner.run(
                self.ffmpeg_bin,
                None,
                args,
                timeout=self.timeout,
                artifact_path=output_path,
            )
            size = output_path.stat().st_size
            if size == 0:
                raise EmptyOutputError(f"FFmpeg produced an empty file: {output_path}")
        except Exception:
            remove_file(output_path)
            raise

        logger.info(f"Video created: {output_path} ({size} bytes)")

        remove_file(video_path)
        remove_file(subtitle_path)

        return VideoArtifact(path=output_path, size=size, hardcoded=hardcoded)


def remove_file(path: PathLike) -> None:
    """Delete a file if present; log failures"""
    try:
        os.unlink(path)
        logger.debug(f"Removed: {path}")
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to remove {path}: {e}")
