"""
Translation service
Translates a transcript (full text + every segment) with an LLM
"""

import asyncio
import re
from typing import Optional, Protocol

from loguru import logger

from whisper_api.config import Settings
from whisper_api.integrations.ollama import SUPPORTED_MODELS, sampling_options
from whisper_api.schemas import (
    LanguageInfo,
    ModelInfo,
    Transcript,
    TranslatedSegment,
    TranslationResult,
)

# code -> (English name, native name, ISO 639-2 tag for subtitle streams)
SUPPORTED_LANGUAGES: dict[str, tuple[str, str, str]] = {
    "pt": ("Portuguese", "Português", "por"),
    "en": ("English", "English", "eng"),
    "es": ("Spanish", "Español", "spa"),
    "fr": ("French", "Français", "fra"),
    "de": ("German", "Deutsch", "deu"),
    "it": ("Italian", "Italiano", "ita"),
    "ru": ("Russian", "Русский", "rus"),
    "ja": ("Japanese", "日本語", "jpn"),
    "ko": ("Korean", "한국어", "kor"),
    "zh": ("Chinese", "中文", "zho"),
    "ar": ("Arabic", "العربية", "ara"),
    "nl": ("Dutch", "Nederlands", "nld"),
    "pl": ("Polish", "Polski", "pol"),
    "sv": ("Swedish", "Svenska", "swe"),
    "no": ("Norwegian", "Norsk", "nor"),
    "da": ("Danish", "Dansk", "dan"),
    "fi": ("Finnish", "Suomi", "fin"),
    "tr": ("Turkish", "Türkçe", "tur"),
    "he": ("Hebrew", "עברית", "heb"),
    "hi": ("Hindi", "हिन्दी", "hin"),
}

PROMPT_TEMPLATE = """You are a professional translator. Translate the following text from {source} to {target}.

IMPORTANT INSTRUCTIONS:
- Only return the translated text, nothing else
- Maintain the original formatting and punctuation
- Keep technical terms when appropriate
- Preserve proper nouns unless they have standard translations
- Ensure natural and fluent translation in the target language

Text to translate:
"{text}\""""


class TextGenerator(Protocol):
    async def generate(self, prompt: str, model: str, temperature: float, top_p: float) -> str:
        ...


def language_name(code: str) -> str:
    """
    Display name for a language code

    "pt-BR" and "pt_br" resolve through their base code; unmapped codes
    come back capitalized ("xx" -> "Xx").
    """
    base = _base_code(code)
    if base in SUPPORTED_LANGUAGES:
        return SUPPORTED_LANGUAGES[base][0]
    return code[:1].upper() + code[1:]


def stream_language_tag(code: str) -> str:
    """ISO 639-2 tag for a subtitle stream ("en" -> "eng"); unmapped codes pass through lowercased"""
    base = _base_code(code)
    if base in SUPPORTED_LANGUAGES:
        return SUPPORTED_LANGUAGES[base][2]
    return base


def _base_code(code: str) -> str:
    return re.split(r"[-_]", code.strip().lower(), maxsplit=1)[0]


def supported_languages() -> list[LanguageInfo]:
    return [
        LanguageInfo(code=code, name=name, native_name=native)
        for code, (name, native, _) in SUPPORTED_LANGUAGES.items()
    ]


class TranslationService:
    """Transcript translation through a text-generation client"""

    def __init__(self, settings: Settings, client: TextGenerator):
        self.client = client
        self.default_model = settings.translation_model
        self.default_source_language = settings.default_source_language
        self.pacing = settings.translation_pacing

    def available_models(self) -> list[ModelInfo]:
        return [
            ModelInfo(
                id=model_id,
                name=config["name"],
                description=config["description"],
                default=model_id == self.default_model,
            )
            for model_id, config in SUPPORTED_MODELS.items()
        ]

    async def translate_text(
        self,
        text: str,
        target_language: str,
        source_language: Optional[str] = None,
        model: Optional[str] = None,
    ) -> str:
        """
        Translate one text unit

        Raises:
            TranslationCallError: Remote call failed
        """
        if not text or not text.strip():
            return ""

        model = model or self.default_model
        source = language_name(source_language or self.default_source_language)
        target = language_name(target_language)
        temperature, top_p = sampling_options(model)

        logger.debug(f"Translating {len(text)} characters from {source} to {target} with {model}")
        prompt = PROMPT_TEMPLATE.format(source=source, target=target, text=text.strip())
        return await self.client.generate(prompt, model=model, temperature=temperature, top_p=top_p)

    async def translate(
        self,
        transcript: Transcript,
        target_language: str,
        source_language: Optional[str] = None,
        model: Optional[str] = None,
    ) -> TranslationResult:
        """
        Translate full text, then each segment sequentially

        A failed segment keeps its original text; a failed full-text call
        fails the whole translation.

        Args:
            transcript: Transcript to translate
            target_language: Target language code
            source_language: Source language code (None = "auto")
            model: Model tag (default from settings)

        Returns:
            TranslationResult with one entry per input segment

        Raises:
            TranslationCallError: Full-text translation failed
        """
        model = model or self.default_model
        logger.info(
            f"Translating transcript to {target_language} with {model}: "
            f"{len(transcript.text)} characters, {len(transcript.segments)} segments"
        )

        translated_text = await self.translate_text(transcript.text, target_language, source_language, model)

        segments: list[TranslatedSegment] = []
        called = False
        for i, segment in enumerate(transcript.segments):
            original = segment.text
            translated = original

            if original.strip():
                if called and self.pacing > 0:
                    await asyncio.sleep(self.pacing)
                called = True
                try:
                    translated = await self.translate_text(original, target_language, source_language, model)
                except Exception as e:
                    logger.warning(
                        f"Segment {segment.id if segment.id is not None else i} translation failed, "
                        f"keeping original text: {e}"
                    )
                    translated = original

            segments.append(
                TranslatedSegment(
                    id=segment.id,
                    start=segment.start,
                    end=segment.end,
                    original_text=original,
                    translated_text=translated,
                )
            )

        logger.info(f"Translation to {target_language} completed")
        return TranslationResult(
            original_text=transcript.text,
            translated_text=translated_text,
            source_language=source_language or "auto",
            target_language=target_language,
            segments=segments,
        )
