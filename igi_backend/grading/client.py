import logging
from typing import Optional

import httpx

from igi_backend.config import settings
from igi_backend.grading.api_keys import ApiKeyPool
from igi_backend.grading.errors import GeminiResponseError

logger = logging.getLogger(__name__)


def build_request_body(prompt: str) -> dict:
    return {"contents": [{"parts": [{"text": prompt}]}]}


def extract_text(payload: dict) -> Optional[str]:
    """First text part of the first candidate, or None"""
    try:
        return payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None


class GeminiClient:
    def __init__(self, pool: ApiKeyPool, model: str, base_url: str):
        self.pool = pool
        self.model = model
        self.base_url = base_url.rstrip("/")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    @property
    def configured(self) -> bool:
        return self.pool.count > 0

    async def generate(self, prompt: str) -> str:
        response = await self.pool.call_with_fallback(self.endpoint, build_request_body(prompt))
        try:
            payload = response.json()
        except ValueError as e:
            raise GeminiResponseError(f"Response was not JSON: {e}") from e
        text = extract_text(payload)
        if not text:
            raise GeminiResponseError("Empty response from Gemini")
        return text


def get_gemini_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> GeminiClient:
    pool = ApiKeyPool(settings.gemini_api_keys, timeout=settings.gemini_timeout_seconds, transport=transport)
    return GeminiClient(pool, settings.gemini_model, settings.gemini_api_base)
