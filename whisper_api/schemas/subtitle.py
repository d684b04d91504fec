"""
Subtitle Pydantic schemas
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .transcription import Transcript

HEX_COLOR_PATTERN = r"^#?[0-9A-Fa-f]{6}$"
# Quotes, commas, colons and backslashes would break the force_style filter value
FONT_NAME_PATTERN = r"^[\w .\-]+$"


class SubtitleFormat(str, Enum):
    """Subtitle file syntax"""

    SRT = "srt"
    VTT = "vtt"

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @property
    def media_type(self) -> str:
        return "application/x-subrip" if self is SubtitleFormat.SRT else "text/vtt"


class SubtitleCue(BaseModel):
    """One timed subtitle entry (text already wrapped)"""

    index: int = Field(..., ge=1)
    start: float
    end: float
    text: str


class SubtitleStyle(BaseModel):
    """
    Burn-in style

    Colors are six hex digits (RGB, optional leading '#').
    background_color=None keeps the semi-transparent black box.
    """

    model_config = ConfigDict(frozen=True)

    font_name: str = Field(default="Arial", pattern=FONT_NAME_PATTERN, description="Font family")
    font_size: int = Field(default=18, gt=0, description="Font size (px)")
    font_color: str = Field(default="#FFFFFF", pattern=HEX_COLOR_PATTERN, description="Text color")
    background_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN, description="Box color")
    border_width: int = Field(default=1, ge=0, description="Outline width")
    border_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN, description="Outline color")
    margin_vertical: int = Field(default=20, ge=0, description="Vertical margin (px)")


class RenderSubtitlesRequest(BaseModel):
    """Render an existing transcript as a subtitle file"""

    transcription: Transcript
    format: SubtitleFormat = SubtitleFormat.SRT
