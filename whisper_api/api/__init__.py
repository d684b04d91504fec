"""
API routers
"""

from .monitoring import router as monitoring_router
from .transcription import router as transcription_router
from .translation import router as translation_router

__all__ = [
    "monitoring_router",
    "transcription_router",
    "translation_router",
]
