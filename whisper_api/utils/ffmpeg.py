"""
FFmpeg helpers
Argument building for subtitle burn-in and soft-subtitle muxing
"""

import re
from pathlib import Path
from typing import Optional, Union

from whisper_api.schemas import SubtitleStyle

# Semi-transparent black (alpha 0x80) in ASS &HAABBGGRR form
DEFAULT_BACK_COLOUR = "&H80000000&"

_HEX6 = re.compile(r"^[0-9A-Fa-f]{6}$")


def hex_to_ass_color(hex_color: str) -> str:
    """
    RGB hex color to ASS color

    Args:
        hex_color: "#RRGGBB" or "RRGGBB"

    Returns:
        "&HBBGGRR&"

    Raises:
        ValueError: Not six hex digits
    """
    value = hex_color.strip().lstrip("#")
    if not _HEX6.match(value):
        raise ValueError(f"Expected six hex digits, got {hex_color!r}")
    red, green, blue = value[0:2], value[2:4], value[4:6]
    return f"&H{blue}{green}{red}&"


def build_force_style(style: Optional[SubtitleStyle] = None) -> str:
    """
    Build the libass force_style value

    Every field contributes one clause; a default SubtitleStyle gives
    18px Arial, white text, semi-transparent black box, 1px outline, 20px margin.
    """
    style = style or SubtitleStyle()

    props = [
        f"FontName={style.font_name}",
        f"FontSize={style.font_size}",
        f"PrimaryColour={hex_to_ass_color(style.font_color)}",
        f"BackColour={hex_to_ass_color(style.background_color) if style.background_color else DEFAULT_BACK_COLOUR}",
        "BorderStyle=1",
        f"Outline={style.border_width}",
    ]
    if style.border_color:
        props.append(f"OutlineColour={hex_to_ass_color(style.border_color)}")
    props.append(f"MarginV={style.margin_vertical}")
    return ",".join(props)


def escape_filter_path(path: Union[str, Path]) -> str:
    """Escape a path for use inside an ffmpeg filter argument"""
    return str(path).replace("\\", "/").replace(":", "\\:").replace("'", "\\'")


def build_burn_args(
    video_path: Union[str, Path],
    subtitle_path: Union[str, Path],
    output_path: Union[str, Path],
    style: Optional[SubtitleStyle] = None,
) -> list[str]:
    """Re-encode video with subtitles drawn into the frames; audio copied"""
    subtitle_filter = f"subtitles={escape_filter_path(subtitle_path)}:force_style='{build_force_style(style)}'"
    return [
        "-y",
        "-i", str(video_path),
        "-vf", subtitle_filter,
        "-c:v", "libx264",  # re-encode required
        "-preset", "medium",
        "-crf", "23",
        "-c:a", "copy",
        str(output_path),
    ]


def build_soft_mux_args(
    video_path: Union[str, Path],
    subtitle_path: Union[str, Path],
    output_path: Union[str, Path],
    language: str = "por",
) -> list[str]:
    """Copy streams and attach the subtitle file as a mov_text track"""
    return [
        "-y",
        "-i", str(video_path),
        "-i", str(subtitle_path),
        "-map", "0:v",
        "-map", "0:a?",
        "-map", "1:0",
        "-c:v", "copy",
        "-c:a", "copy",
        "-c:s", "mov_text",  # MP4 text track
        "-metadata:s:s:0", f"language={language}",
        str(output_path),
    ]
