"""
Subtitle generation
SRT / WebVTT rendering of timestamped segments
"""

import re
import uuid
from pathlib import Path
from typing import Iterable, Union

from loguru import logger

from whisper_api.exceptions import ParseError
from whisper_api.schemas import Segment, SubtitleCue, SubtitleFormat

MAX_LINE_LENGTH = 40
MAX_LINES = 2
VTT_HEADER = "WEBVTT"

_WHITESPACE = re.compile(r"\s+")
_TIMESTAMP = re.compile(r"^(\d{2,}):(\d{2}):(\d{2})[,.](\d{3})$")


def format_timestamp(seconds: float, fmt: SubtitleFormat = SubtitleFormat.SRT) -> str:
    """
    Seconds to subtitle timestamp

    Args:
        seconds: Time in seconds
        fmt: SRT uses "HH:MM:SS,mmm", VTT uses "HH:MM:SS.mmm"

    Returns:
        Timestamp string, e.g. "00:00:12,345"
    """
    total_ms = max(int(round(seconds * 1000)), 0)
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    separator = "," if fmt is SubtitleFormat.SRT else "."
    return f"{hours:02d}:{minutes:02d}:{secs:02d}{separator}{millis:03d}"


def parse_timestamp(value: str) -> float:
    """Subtitle timestamp (either separator) back to seconds"""
    match = _TIMESTAMP.match(value.strip())
    if not match:
        raise ParseError(f"Invalid subtitle timestamp: {value!r}")
    hours, minutes, secs, millis = (int(part) for part in match.groups())
    return hours * 3600 + minutes * 60 + secs + millis / 1000


def wrap_text(text: str, max_length: int = MAX_LINE_LENGTH, max_lines: int = MAX_LINES) -> str:
    """
    Wrap cue text into at most `max_lines` lines of `max_length` characters

    Words that do not fit once the last line is full are dropped. A single
    word longer than `max_length` is cut to `max_length`.
    """
    text = _WHITESPACE.sub(" ", text).strip()
    if len(text) <= max_length:
        return text

    lines: list[str] = []
    current = ""
    for word in text.split(" "):
        word = word[:max_length]
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_length:
            current = candidate
            continue
        lines.append(current)
        current = ""
        if len(lines) == max_lines:
            break
        current = word

    if current and len(lines) < max_lines:
        lines.append(current)

    return "\n".join(lines)


def build_cues(segments: Iterable[Segment]) -> list[SubtitleCue]:
    """Number segments from 1 and wrap their text"""
    return [
        SubtitleCue(index=i, start=seg.start, end=seg.end, text=wrap_text(seg.text))
        for i, seg in enumerate(segments, start=1)
    ]


def render_cues(cues: list[SubtitleCue], fmt: SubtitleFormat) -> str:
    blocks = []
    for cue in cues:
        timing = f"{format_timestamp(cue.start, fmt)} --> {format_timestamp(cue.end, fmt)}"
        if fmt is SubtitleFormat.SRT:
            blocks.append(f"{cue.index}\n{timing}\n{cue.text}\n")
        else:
            blocks.append(f"{timing}\n{cue.text}\n")

    body = "\n".join(blocks)
    if fmt is SubtitleFormat.VTT:
        return f"{VTT_HEADER}\n\n{body}"
    return body


def synthesize(segments: Iterable[Segment], fmt: Union[SubtitleFormat, str] = SubtitleFormat.SRT) -> str:
    """
    Render segments as an SRT or WebVTT document

    Args:
        segments: Transcript segments (in playback order)
        fmt: SubtitleFormat or "srt" / "vtt"

    Returns:
        Subtitle document text
    """
    fmt = SubtitleFormat(fmt)
    return render_cues(build_cues(segments), fmt)


def parse_cues(document: str) -> list[SubtitleCue]:
    """
    Parse an SRT or WebVTT document produced by `synthesize`

    Raises:
        ParseError: Block without a timing line
    """
    document = document.replace("\r\n", "\n").strip()
    if document.startswith(VTT_HEADER):
        document = document[len(VTT_HEADER):].lstrip("\n")

    cues: list[SubtitleCue] = []
    for block in document.split("\n\n"):
        # a cue with empty text leaves an extra newline in front of the next block
        block = block.strip("\n")
        if not block:
            continue
        lines = block.split("\n")
        if "-->" not in lines[0]:
            lines = lines[1:]
        if not lines or "-->" not in lines[0]:
            raise ParseError(f"Subtitle block without timing line: {block!r}")
        start, _, end = lines[0].partition("-->")
        cues.append(
            SubtitleCue(
                index=len(cues) + 1,
                start=parse_timestamp(start),
                end=parse_timestamp(end),
                text="\n".join(lines[1:]),
            )
        )
    return cues


def write_subtitle_file(
    segments: Iterable[Segment],
    directory: Union[str, Path],
    fmt: SubtitleFormat = SubtitleFormat.SRT,
) -> Path:
    """
    Write a subtitle file with a collision-free name

    Returns:
        Path of the written file
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    output_path = directory / f"subtitles-{uuid.uuid4()}{fmt.extension}"

    content = synthesize(segments, fmt)
    output_path.write_text(content, encoding="utf-8")

    logger.info(f"Subtitle generated: {output_path} ({content.count(' --> ')} cues)")
    return output_path
