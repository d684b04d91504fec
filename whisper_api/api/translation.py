"""
Translation API routes
"""

from fastapi import APIRouter, Depends

from whisper_api.exceptions import InvalidParameterError
from whisper_api.schemas import (
    LanguageListResponse,
    ModelListResponse,
    TranslateRequest,
    TranslationResult,
)
from whisper_api.services import TranslationService
from whisper_api.services.translation_service import supported_languages

from .deps import get_translation_service

router = APIRouter(tags=["translation"])


@router.post("/translate/transcription", response_model=TranslationResult, response_model_by_alias=True)
async def translate_transcription(
    request: TranslateRequest,
    service: TranslationService = Depends(get_translation_service),
):
    """
    Translate a transcript produced by /transcribe

    Body:
        {"transcription": {...}, "targetLanguage": "en", "sourceLanguage": "pt", "model": "..."}
    """
    if request.transcription is None:
        raise InvalidParameterError("Transcription data is required")
    if not request.target_language:
        raise InvalidParameterError("Target language is required")

    return await service.translate(
        request.transcription,
        request.target_language,
        request.source_language,
        request.model,
    )


@router.get("/translation/languages", response_model=LanguageListResponse, response_model_by_alias=True)
async def list_languages():
    return LanguageListResponse(languages=supported_languages())


@router.get("/translation/models", response_model=ModelListResponse)
async def list_models(service: TranslationService = Depends(get_translation_service)):
    return ModelListResponse(models=service.available_models())
