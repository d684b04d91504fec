"""Shared fixtures: fake CLI tools, fake LLM client and isolated settings."""

import json
import stat
import sys
import textwrap
from pathlib import Path

import pytest

from whisper_api.config import Settings
from whisper_api.exceptions import TranslationCallError

HELLO_WORLD = {
    "text": "hello world",
    "language": "en",
    "segments": [
        {"id": 0, "start": 0.0, "end": 1.5, "text": "hello"},
        {"id": 1, "start": 1.5, "end": 3.0, "text": "world"},
    ],
}

EXPECTED_SRT = "1\n00:00:00,000 --> 00:00:01,500\nhello\n\n2\n00:00:01,500 --> 00:00:03,000\nworld\n"


@pytest.fixture
def make_script(tmp_path):
    """Write an executable Python script and return its path."""

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def _make(name: str, body: str) -> Path:
        path = bin_dir / name
        path.write_text(
            f"#!{sys.executable}\nimport json, os, sys, time\nfrom pathlib import Path\n"
            + textwrap.dedent(body),
            encoding="utf-8",
        )
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make


@pytest.fixture
def make_whisper(make_script, tmp_path):
    """
    Fake whisper CLI.

    Writes `<stem>.json` into --output_dir and records its argv in
    tmp_path/whisper_argv.json.
    """

    argv_file = str(tmp_path / "whisper_argv.json")

    def _make(payload=HELLO_WORLD, exit_code=0, raw_output=None, name="fake-whisper") -> Path:
        content = raw_output if raw_output is not None else json.dumps(payload)
        write = "write_bytes" if isinstance(content, bytes) else "write_text"
        return make_script(
            name,
            f"""
            argv = sys.argv[1:]
            Path({argv_file!r}).write_text(json.dumps(argv))
            if {exit_code!r} != 0:
                sys.stderr.write("whisper crashed: model not found\\n")
                sys.exit({exit_code!r})
            output_dir = Path(argv[argv.index("--output_dir") + 1])
            output_dir.mkdir(parents=True, exist_ok=True)
            (output_dir / (Path(argv[0]).stem + ".json")).{write}({content!r})
            """,
        )

    return _make


@pytest.fixture
def whisper_argv(tmp_path):
    """Read back the argv recorded by the fake whisper."""

    def _read() -> list:
        return json.loads((tmp_path / "whisper_argv.json").read_text())

    return _read


@pytest.fixture
def make_ffmpeg(make_script, tmp_path):
    """
    Fake ffmpeg.

    Modes: "ok" writes the output file (the second input's bytes when two
    inputs are given), "empty" writes a zero-byte file, "fail" exits 1.
    `-version` always succeeds. Records argv in tmp_path/ffmpeg_argv.json.
    """

    argv_file = str(tmp_path / "ffmpeg_argv.json")

    def _make(mode: str = "ok") -> Path:
        return make_script(
            f"fake-ffmpeg-{mode}",
            f"""
            argv = sys.argv[1:]
            if argv == ["-version"]:
                print("ffmpeg version 6.0-fake")
                sys.exit(0)
            Path({argv_file!r}).write_text(json.dumps(argv))
            mode = {mode!r}
            if mode == "fail":
                sys.stderr.write("Error opening input files\\n")
                sys.exit(1)
            output = Path(argv[-1])
            inputs = [argv[i + 1] for i, arg in enumerate(argv) if arg == "-i"]
            if mode == "empty":
                output.write_bytes(b"")
            elif len(inputs) > 1:
                output.write_bytes(Path(inputs[1]).read_bytes())
            else:
                output.write_bytes(b"fake mp4 data")
            """,
        )

    return _make


@pytest.fixture
def ffmpeg_argv(tmp_path):
    def _read() -> list:
        return json.loads((tmp_path / "ffmpeg_argv.json").read_text())

    return _read


@pytest.fixture
def scratch_dir(tmp_path) -> Path:
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def settings(tmp_path, scratch_dir, make_whisper, make_ffmpeg) -> Settings:
    return Settings(
        scratch_dir=str(scratch_dir),
        log_file="",
        whisper_bin=str(make_whisper()),
        whisper_fallback_bin=str(tmp_path / "bin" / "no-such-whisper"),
        whisper_timeout=20.0,
        ffmpeg_bin=str(make_ffmpeg()),
        translation_pacing=0.0,
    )


class FakeGenerator:
    """In-memory stand-in for the Ollama client."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []

    async def generate(self, prompt, model, temperature=0.3, top_p=0.9):
        text = prompt.rsplit('Text to translate:\n"', 1)[1][:-1]
        self.calls.append({"text": text, "model": model, "temperature": temperature, "top_p": top_p})
        if text in self.fail_on:
            raise TranslationCallError(f"model refused {text!r}")
        return f"EN({text})"


@pytest.fixture
def fake_generator():
    return FakeGenerator()
