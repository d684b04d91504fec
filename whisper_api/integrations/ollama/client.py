"""
Ollama client
Non-streaming text generation used for translation
"""

from typing import Optional

import httpx
from loguru import logger

from whisper_api.config import Settings
from whisper_api.exceptions import TranslationCallError

DEFAULT_TEMPERATURE = 0.3
DEFAULT_TOP_P = 0.9

# Model catalogue: display name, description and sampling options
SUPPORTED_MODELS: dict[str, dict] = {
    "llama3.1:8b": {
        "name": "Llama 3.1 8B",
        "description": "Fast, general purpose translations",
        "temperature": 0.3,
        "top_p": 0.9,
    },
    "llama3.1:70b": {
        "name": "Llama 3.1 70B",
        "description": "Larger model for complex translations",
        "temperature": 0.2,
        "top_p": 0.8,
    },
    "llama3.2:3b": {
        "name": "Llama 3.2 3B",
        "description": "Compact and fast",
        "temperature": 0.4,
        "top_p": 0.9,
    },
    "qwen2.5:7b": {
        "name": "Qwen 2.5 7B",
        "description": "Strong on Asian languages",
        "temperature": 0.3,
        "top_p": 0.85,
    },
    "mistral:7b": {
        "name": "Mistral 7B",
        "description": "Balanced quality for European languages",
        "temperature": 0.3,
        "top_p": 0.9,
    },
}


def sampling_options(model: str) -> tuple[float, float]:
    """(temperature, top_p) for a model; defaults for unknown models"""
    config = SUPPORTED_MODELS.get(model, {})
    return config.get("temperature", DEFAULT_TEMPERATURE), config.get("top_p", DEFAULT_TOP_P)


class OllamaClient:
    """Thin wrapper over POST /api/generate"""

    def __init__(
        self,
        host: Optional[str] = None,
        timeout: Optional[float] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.host = (host or (settings.ollama_host if settings else "http://localhost:11434")).rstrip("/")
        self.timeout = timeout or (settings.translation_timeout if settings else 60.0)
        self._transport = transport

    async def generate(
        self,
        prompt: str,
        model: str,
        temperature: float = DEFAULT_TEMPERATURE,
        top_p: float = DEFAULT_TOP_P,
    ) -> str:
        """
        Generate a completion

        Args:
            prompt: Full prompt text
            model: Ollama model tag, e.g. "llama3.1:8b"
            temperature: Sampling temperature
            top_p: Nucleus sampling

        Returns:
            Response text (stripped)

        Raises:
            TranslationCallError: Transport error, timeout, HTTP error or malformed body
        """
        payload = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": temperature, "top_p": top_p, "num_predict": -1},
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.host,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            ) as client:
                response = await client.post("/api/generate", json=payload)
                response.raise_for_status()
                body = response.json()
        except httpx.TimeoutException as e:
            raise TranslationCallError(f"Ollama request timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise TranslationCallError(
                f"Ollama returned HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise TranslationCallError(f"Ollama request failed: {e}") from e
        except ValueError as e:
            raise TranslationCallError(f"Ollama returned invalid JSON: {e}") from e

        text = body.get("response") if isinstance(body, dict) else None
        if not isinstance(text, str):
            raise TranslationCallError("Ollama response has no 'response' field")

        logger.debug(f"Ollama {model} returned {len(text)} characters")
        return text.strip()
