"""
Transcription service
Runs the whisper CLI on a media file and parses its JSON output
"""

import shutil
import uuid
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from whisper_api.config import Settings
from whisper_api.exceptions import (
    InvalidParameterError,
    ParseError,
    TranscriptionFailedError,
    WhisperAPIException,
)
from whisper_api.schemas import Transcript, TranscriptionContext, WhisperOutput
from whisper_api.utils.process import ProcessRunner

VOCABULARY_LABEL = "Vocabulário importante"
TOPIC_LABEL = "Tópico"
SPEAKER_LABEL = "Locutor"


def build_initial_prompt(context: Optional[TranscriptionContext]) -> Optional[str]:
    """
    Fold the context into the single --initial_prompt string

    Order: topic/speaker hints, then the prompt, then the vocabulary list.
    """
    if context is None or context.is_empty:
        return None

    prompt = context.prompt
    if context.vocabulary:
        vocabulary = f"{VOCABULARY_LABEL}: {', '.join(context.vocabulary)}."
        prompt = f"{prompt} {vocabulary}" if prompt else vocabulary

    hints = ""
    if context.topic:
        hints += f"{TOPIC_LABEL}: {context.topic}. "
    if context.speaker:
        hints += f"{SPEAKER_LABEL}: {context.speaker}. "
    if hints:
        prompt = f"{hints}{prompt or ''}"

    return prompt.strip() if prompt and prompt.strip() else None


class TranscriptionService:
    """Speech-to-text through an external whisper binary"""

    def __init__(self, settings: Settings, runner: Optional[ProcessRunner] = None):
        self.whisper_bin = settings.whisper_bin
        self.fallback_bin = settings.whisper_fallback_bin
        self.model = settings.whisper_model
        self.language = settings.whisper_language
        self.timeout = settings.whisper_timeout
        self.scratch_dir = Path(settings.scratch_dir)
        self.runner = runner or ProcessRunner()

    def build_command(
        self,
        media_path: Path,
        output_dir: Path,
        context: Optional[TranscriptionContext] = None,
    ) -> list[str]:
        """Whisper CLI arguments (without the executable)"""
        args = [
            str(media_path),
            "--output_format", "json",
            "--output_dir", str(output_dir),
            "--model", self.model,
        ]

        language = (context.language if context else None) or self.language
        if language:
            args += ["--language", language]

        prompt = build_initial_prompt(context)
        if prompt:
            args += ["--initial_prompt", prompt]

        return args

    async def transcribe(
        self,
        media_path: Union[str, Path],
        context: Optional[TranscriptionContext] = None,
    ) -> Transcript:
        """
        Transcribe a media file

        Args:
            media_path: Audio or video file
            context: Optional guidance (prompt, vocabulary, topic, speaker, language)

        Returns:
            Transcript

        Raises:
            TranscriptionFailedError: Any step failed; wraps the cause
        """
        media_path = Path(media_path)
        output_dir = self.scratch_dir / f"whisper-out-{uuid.uuid4()}"
        artifact_path = output_dir / f"{media_path.stem}.json"

        try:
            self._validate_input(media_path)

            output_dir.mkdir(parents=True, exist_ok=True)
            args = self.build_command(media_path, output_dir, context)

            logger.info(f"Transcribing {media_path} (model={self.model})")
            await self.runner.run(
                self.whisper_bin,
                self.fallback_bin,
                args,
                timeout=self.timeout,
                output_dir=output_dir,
                artifact_path=artifact_path,
            )

            logger.info(f"Parsing whisper output: {artifact_path}")
            transcript = self.parse_output(artifact_path)

        except WhisperAPIException as e:
            logger.error(f"Transcription failed for {media_path}: {e}")
            raise TranscriptionFailedError(e) from e
        except OSError as e:
            logger.error(f"Transcription failed for {media_path}: {e}")
            raise TranscriptionFailedError(e) from e
        finally:
            shutil.rmtree(output_dir, ignore_errors=True)

        logger.info(
            f"Transcription done: {len(transcript.segments)} segments, "
            f"{len(transcript.text)} characters, language={transcript.language}"
        )
        return transcript

    @staticmethod
    def _validate_input(media_path: Path) -> None:
        if not media_path.is_file():
            raise InvalidParameterError(f"Input file does not exist: {media_path}")
        if media_path.stat().st_size == 0:
            raise InvalidParameterError(f"Input file is empty: {media_path}")

    @staticmethod
    def parse_output(artifact_path: Union[str, Path]) -> Transcript:
        """
        Parse the whisper JSON artifact

        Raises:
            ParseError: Invalid JSON or unexpected structure
        """
        raw = Path(artifact_path).read_bytes()
        try:
            output = WhisperOutput.model_validate_json(raw)
        except ValueError as e:
            # ValidationError, including bytes that are not UTF-8
            raise ParseError(f"Unexpected whisper output in {artifact_path}: {e}") from e
        return output.to_transcript()
