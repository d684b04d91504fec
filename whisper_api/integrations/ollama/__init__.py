"""
Ollama integration
"""

from .client import SUPPORTED_MODELS, OllamaClient, sampling_options

__all__ = ["SUPPORTED_MODELS", "OllamaClient", "sampling_options"]
