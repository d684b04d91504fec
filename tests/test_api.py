"""HTTP tests with FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from tests.conftest import EXPECTED_SRT, HELLO_WORLD, FakeGenerator
from whisper_api.main import create_app

WAV = b"RIFF" + b"\x00" * 256
MP4 = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 256


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.state.pipeline.translation.client = FakeGenerator()
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["version"] == "1.0.0"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["services"] == {"ffmpeg": True, "whisper": True}


def test_health_degraded_without_ffmpeg(settings, tmp_path):
    client = TestClient(create_app(settings.model_copy(update={"ffmpeg_bin": str(tmp_path / "no-ffmpeg")})))

    body = client.get("/health").json()

    assert body["status"] == "degraded"
    assert body["services"]["ffmpeg"] is False


class TestTranscribe:
    def test_transcribe(self, client, scratch_dir, whisper_argv):
        response = client.post(
            "/transcribe",
            files={"file": ("talk.wav", WAV, "audio/wav")},
            data={"vocabulary": "Whisper, FFmpeg", "language": "en"},
        )

        assert response.status_code == 200
        assert response.json() == HELLO_WORLD
        argv = whisper_argv()
        assert argv[argv.index("--language") + 1] == "en"
        assert argv[argv.index("--initial_prompt") + 1] == "Vocabulário importante: Whisper, FFmpeg."
        assert list(scratch_dir.iterdir()) == []

    def test_rejects_non_media(self, client):
        response = client.post("/transcribe", files={"file": ("notes.txt", b"hello", "text/plain")})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_parameter"

    def test_rejects_empty_file(self, client):
        response = client.post("/transcribe", files={"file": ("talk.wav", b"", "audio/wav")})

        assert response.status_code == 400
        assert response.json()["error"] == "empty_upload"

    def test_missing_file_is_bad_request(self, client):
        response = client.post("/transcribe", data={"topic": "x"})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_parameter"

    def test_engine_failure(self, settings, make_whisper):
        failing = settings.model_copy(update={"whisper_bin": str(make_whisper(exit_code=1, name="bad-whisper"))})
        client = TestClient(create_app(failing))

        response = client.post("/transcribe", files={"file": ("talk.wav", WAV, "audio/wav")})

        assert response.status_code == 500
        assert response.json()["error"] == "transcription_failed"
        assert "model not found" in response.json()["detail"]


class TestSubtitles:
    def test_srt_from_upload(self, client):
        response = client.post("/transcribe/subtitles", files={"file": ("talk.wav", WAV, "audio/wav")})

        assert response.status_code == 200
        assert response.text == EXPECTED_SRT
        assert response.headers["content-type"].startswith("application/x-subrip")
        assert 'filename="talk.srt"' in response.headers["content-disposition"]

    def test_vtt_from_upload(self, client):
        response = client.post(
            "/transcribe/subtitles?format=vtt",
            files={"file": ("talk.mp4", MP4, "video/mp4")},
        )

        assert response.status_code == 200
        assert response.text.startswith("WEBVTT\n\n00:00:00.000 --> 00:00:01.500\nhello\n")
        assert response.headers["content-type"].startswith("text/vtt")

    def test_unknown_format(self, client):
        response = client.post(
            "/transcribe/subtitles?format=ass",
            files={"file": ("talk.wav", WAV, "audio/wav")},
        )

        assert response.status_code == 400

    def test_render_existing_transcript(self, client):
        response = client.post("/subtitles/render", json={"transcription": HELLO_WORLD, "format": "srt"})

        assert response.status_code == 200
        assert response.text == EXPECTED_SRT


class TestVideo:
    def test_burn_in(self, client, scratch_dir, ffmpeg_argv):
        response = client.post(
            "/transcribe/video?fontSize=28&fontColor=%23FFFF00&marginVertical=30",
            files={"video": ("holiday.mp4", MP4, "video/mp4")},
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "video/mp4"
        assert 'filename="holiday_with_subtitles.mp4"' in response.headers["content-disposition"]
        assert response.content == b"fake mp4 data"

        style = ffmpeg_argv()[ffmpeg_argv().index("-vf") + 1]
        assert "FontSize=28" in style
        assert "PrimaryColour=&H00FFFF&" in style
        assert "MarginV=30" in style
        # output removed once the body has been sent
        assert list(scratch_dir.iterdir()) == []

    def test_soft_track_with_translation(self, client, ffmpeg_argv):
        response = client.post(
            "/transcribe/video?hardcoded=false&targetLanguage=en&subtitleLanguage=eng",
            files={"video": ("holiday.mp4", MP4, "video/mp4")},
        )

        assert response.status_code == 200
        assert b"EN(hello)" in response.content
        assert "language=eng" in ffmpeg_argv()

    def test_rejects_audio(self, client):
        response = client.post("/transcribe/video", files={"video": ("talk.wav", WAV, "audio/wav")})

        assert response.status_code == 400

    def test_rejects_bad_color(self, client):
        response = client.post(
            "/transcribe/video?fontColor=red",
            files={"video": ("holiday.mp4", MP4, "video/mp4")},
        )

        assert response.status_code == 400
        assert "fontColor" in response.json()["detail"]


class TestTranslation:
    def test_translate(self, client):
        response = client.post(
            "/translate/transcription",
            json={"transcription": HELLO_WORLD, "targetLanguage": "pt", "sourceLanguage": "en"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["translatedText"] == "EN(hello world)"
        assert body["sourceLanguage"] == "en"
        assert body["targetLanguage"] == "pt"
        assert body["segments"][1] == {
            "id": 1,
            "start": 1.5,
            "end": 3.0,
            "originalText": "world",
            "translatedText": "EN(world)",
        }

    @pytest.mark.parametrize(
        "payload, message",
        [
            ({"targetLanguage": "pt"}, "Transcription data is required"),
            ({"transcription": HELLO_WORLD}, "Target language is required"),
        ],
    )
    def test_missing_fields(self, client, payload, message):
        response = client.post("/translate/transcription", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": "invalid_parameter", "detail": message}

    def test_languages(self, client):
        languages = client.get("/translation/languages").json()["languages"]

        assert {"code": "pt", "name": "Portuguese", "nativeName": "Português"} in languages

    def test_models(self, client, settings):
        models = client.get("/translation/models").json()["models"]

        assert len(models) == 5
        assert [m["id"] for m in models if m["default"]] == [settings.translation_model]


def test_control_characters_in_context_rejected(client, tmp_path):
    response = client.post(
        "/transcribe",
        files={"file": ("talk.wav", WAV, "audio/wav")},
        data={"prompt": "a\x00b"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_parameter"
    assert "prompt" in response.json()["detail"]
    assert not (tmp_path / "whisper_argv.json").exists()


@pytest.mark.parametrize("font_name", ["Arial',x", "Arial,Bold", "C:\\Fonts"])
def test_unsafe_font_name_rejected(client, font_name):
    response = client.post(
        "/transcribe/video",
        params={"fontName": font_name},
        files={"video": ("holiday.mp4", MP4, "video/mp4")},
    )

    assert response.status_code == 400
    assert "fontName" in response.json()["detail"]
