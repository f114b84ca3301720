import time
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from .config import Settings
from .errors import GatewayError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
GROQ_BASE_URL = "https://api.groq.com/openai/v1"
RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class LLMGateway(ABC):
    """Opaque prompt -> text function backed by a hosted model."""

    name = "llm"

    def __init__(self, timeout: float = 60.0, max_retries: int = 2, retry_backoff: float = 1.0):
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        self.retry_backoff = retry_backoff

    @abstractmethod
    def generate(self, prompt: str) -> str:
        raise NotImplementedError

    def _post(self, url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST with bounded retry on transient failures; returns the decoded JSON body."""
        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
            except (requests.ConnectionError, requests.Timeout) as e:
                if attempt == attempts:
                    raise GatewayError(f"{self.name} request failed: {e}") from e
                logger.warning(f"{self.name} transport error (attempt {attempt}/{attempts}): {e}")
            else:
                if response.status_code in RETRYABLE_STATUS and attempt < attempts:
                    logger.warning(
                        f"{self.name} returned HTTP {response.status_code} (attempt {attempt}/{attempts})"
                    )
                else:
                    try:
                        response.raise_for_status()
                        return response.json()
                    except requests.HTTPError as e:
                        raise GatewayError(f"{self.name} API error: {e}") from e
                    except ValueError as e:
                        raise GatewayError(f"{self.name} returned a non-JSON body") from e
            time.sleep(self.retry_backoff * 2 ** (attempt - 1))
        raise GatewayError(f"{self.name} request failed")


class GeminiGateway(LLMGateway):
    name = "Gemini"

    def __init__(self, api_key: Optional[str], model: str = "gemini-2.5-flash",
                 temperature: Optional[float] = None, base_url: str = GEMINI_BASE_URL, **kwargs):
        super().__init__(**kwargs)
        if not api_key:
            raise GatewayError("GEMINI_API_KEY not set")
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.base_url = base_url.rstrip("/")

    def generate(self, prompt: str) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}
        payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if self.temperature is not None:
            payload["generationConfig"] = {"temperature": self.temperature}

        data = self._post(url, headers, payload)
        try:
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(p.get("text", "") for p in parts)
        except (KeyError, IndexError, TypeError) as e:
            reason = (data.get("promptFeedback") or {}).get("blockReason") if isinstance(data, dict) else None
            raise GatewayError(f"Gemini returned no content{f' ({reason})' if reason else ''}") from e
        if not text.strip():
            raise GatewayError("Gemini returned an empty response")
        return text


class GroqGateway(LLMGateway):
    name = "Groq"

    def __init__(self, api_key: Optional[str], model: str = "llama-3.3-70b-versatile",
                 temperature: float = 0.4, base_url: str = GROQ_BASE_URL, **kwargs):
        super().__init__(**kwargs)
        if not api_key:
            raise GatewayError("GROQ_API_KEY not set")
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.base_url = base_url.rstrip("/")

    def generate(self, prompt: str) -> str:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
        }

        data = self._post(url, headers, payload)
        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise GatewayError("Groq returned no choices") from e
        if not isinstance(text, str) or not text.strip():
            raise GatewayError("Groq returned an empty response")
        return text


def build_gateway(settings: Settings) -> LLMGateway:
    """Pick the provider named by LLM_PROVIDER, else the first one with an API key."""
    provider = settings.llm_provider
    if provider is None:
        if settings.gemini_api_key:
            provider = "gemini"
        elif settings.groq_api_key:
            provider = "groq"
        else:
            raise GatewayError("No LLM API key configured (set GEMINI_API_KEY or GROQ_API_KEY)")

    common = dict(
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
        retry_backoff=settings.retry_backoff,
    )
    if provider == "gemini":
        gateway: LLMGateway = GeminiGateway(
            settings.gemini_api_key, model=settings.gemini_model,
            temperature=settings.temperature, **common,
        )
        logger.info(f"Using Gemini model {settings.gemini_model}")
    elif provider == "groq":
        gateway = GroqGateway(
            settings.groq_api_key, model=settings.groq_model,
            temperature=settings.temperature, **common,
        )
        logger.info(f"Using Groq model {settings.groq_model}")
    else:
        raise GatewayError(f"Unknown LLM_PROVIDER {provider!r} (expected 'gemini' or 'groq')")
    return gateway
