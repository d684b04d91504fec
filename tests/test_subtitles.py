"""Tests for SRT / WebVTT synthesis."""

import pytest

from tests.conftest import EXPECTED_SRT, HELLO_WORLD
from whisper_api.exceptions import ParseError
from whisper_api.schemas import Segment, SubtitleFormat
from whisper_api.utils.subtitles import (
    format_timestamp,
    parse_cues,
    parse_timestamp,
    synthesize,
    wrap_text,
    write_subtitle_file,
)


def _segments(raw=HELLO_WORLD["segments"]):
    return [Segment(**seg) for seg in raw]


class TestTimestamps:
    def test_srt_uses_comma(self):
        assert format_timestamp(12.345, SubtitleFormat.SRT) == "00:00:12,345"

    def test_vtt_uses_dot(self):
        assert format_timestamp(12.345, SubtitleFormat.VTT) == "00:00:12.345"

    def test_hours_and_minutes(self):
        assert format_timestamp(3661.5) == "01:01:01,500"

    def test_zero_and_negative_clamp(self):
        assert format_timestamp(0) == "00:00:00,000"
        assert format_timestamp(-1.0) == "00:00:00,000"

    def test_rounds_to_nearest_millisecond(self):
        assert format_timestamp(1.9996) == "00:00:02,000"

    def test_parse_accepts_both_separators(self):
        assert parse_timestamp("00:01:02,250") == pytest.approx(62.25)
        assert parse_timestamp("00:01:02.250") == pytest.approx(62.25)

    def test_parse_rejects_garbage(self):
        with pytest.raises(ParseError):
            parse_timestamp("1:2:3")


class TestWrapText:
    @pytest.mark.parametrize("text", ["", "hello", "a" * 40, "Olá, tudo bem com você hoje?"])
    def test_short_text_unchanged(self, text):
        assert wrap_text(text) == text

    def test_whitespace_collapsed(self):
        assert wrap_text("  hello \n\t  world  ") == "hello world"

    def test_long_single_word_truncated(self):
        assert wrap_text("a" * 81) == "a" * 40

    def test_two_lines(self):
        assert wrap_text(f"{'a' * 30} {'b' * 30}") == f"{'a' * 30}\n{'b' * 30}"

    def test_overflow_after_two_lines_dropped(self):
        assert wrap_text(f"{'a' * 30} {'b' * 30} {'c' * 30}") == f"{'a' * 30}\n{'b' * 30}"

    def test_lines_respect_limits(self):
        text = "the quick brown fox jumps over the lazy dog " * 5
        lines = wrap_text(text).split("\n")

        assert len(lines) == 2
        assert all(len(line) <= 40 for line in lines)
        assert " ".join(lines) == " ".join(text.split())[: len(" ".join(lines))]


class TestSynthesize:
    def test_srt_document(self):
        assert synthesize(_segments(), SubtitleFormat.SRT) == EXPECTED_SRT

    def test_vtt_document(self):
        document = synthesize(_segments(), "vtt")

        assert document == (
            "WEBVTT\n\n"
            "00:00:00.000 --> 00:00:01.500\nhello\n\n"
            "00:00:01.500 --> 00:00:03.000\nworld\n"
        )

    def test_empty_segment_list(self):
        assert synthesize([], SubtitleFormat.SRT) == ""
        assert synthesize([], SubtitleFormat.VTT) == "WEBVTT\n\n"

    def test_empty_text_still_emits_cue(self):
        document = synthesize([Segment(start=0, end=1, text="   ")], SubtitleFormat.SRT)

        assert document == "1\n00:00:00,000 --> 00:00:01,000\n\n"

    @pytest.mark.parametrize("fmt", list(SubtitleFormat))
    def test_cues_match_segments(self, fmt):
        segments = [
            Segment(id=i, start=i * 2.123, end=i * 2.123 + 1.0007, text=f"line {i} " * 12)
            for i in range(7)
        ]
        segments.insert(3, Segment(id=99, start=8.0, end=8.5, text=""))

        cues = parse_cues(synthesize(segments, fmt))

        assert len(cues) == len(segments)
        for cue, segment in zip(cues, segments):
            assert cue.start == pytest.approx(segment.start, abs=0.001)
            assert cue.end == pytest.approx(segment.end, abs=0.001)
        assert [c.index for c in cues] == list(range(1, len(segments) + 1))

    def test_write_subtitle_file(self, tmp_path):
        first = write_subtitle_file(_segments(), tmp_path, SubtitleFormat.SRT)
        second = write_subtitle_file(_segments(), tmp_path, SubtitleFormat.SRT)

        assert first != second
        assert first.suffix == ".srt"
        assert first.read_text(encoding="utf-8") == EXPECTED_SRT

    @pytest.mark.parametrize("fmt", list(SubtitleFormat))
    def test_parse_cue_with_empty_text(self, fmt):
        segments = [Segment(start=0, end=1, text=""), Segment(start=1, end=2, text="world")]

        cues = parse_cues(synthesize(segments, fmt))

        assert [(c.index, c.start, c.end, c.text) for c in cues] == [(1, 0.0, 1.0, ""), (2, 1.0, 2.0, "world")]
