"""
Gemini API key pool with fallback.

Keys are tried in configured order. A 429 or 403 (or an error whose message
reads like a quota / rate limit / forbidden failure) moves the request to the
next key; anything else is returned to the caller as an error. Every call
starts again from the first key.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from igi_backend.grading.errors import (
    GeminiConfigurationError,
    GeminiKeysExhaustedError,
    GeminiRequestError,
)

logger = logging.getLogger(__name__)

FALLBACK_STATUSES = (429, 403)
_RATE_LIMIT_MARKERS = ("rate limit", "quota", "forbidden", "429", "403")


def is_rate_limit_error(error: Any) -> bool:
    """True when an exception (or status-bearing object) signals a key-level rejection."""
    if error is None:
        return False
    status = getattr(error, "status_code", None) or getattr(error, "status", None)
    response = getattr(error, "response", None)
    if status is None and isinstance(response, httpx.Response):
        status = response.status_code
    if status in FALLBACK_STATUSES:
        return True
    message = str(error).lower()
    return any(marker in message for marker in _RATE_LIMIT_MARKERS)


class ApiKeyPool:
    def __init__(
        self,
        keys: List[str],
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.keys = [k for k in keys if k]
        self.timeout = timeout
        self.transport = transport

    @property
    def count(self) -> int:
        return len(self.keys)

    async def call_with_fallback(
        self,
        endpoint: str,
        body: Dict[str, Any],
        max_retries: Optional[int] = None,
    ) -> httpx.Response:
        if not self.keys:
            raise GeminiConfigurationError("No Gemini API keys configured")

        attempts = min(max_retries or self.count, self.count)
        last_status: Optional[int] = None

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for index in range(attempts):
                key_number = index + 1
                logger.info(f"[Gemini API] Attempt {key_number}/{attempts} using key #{key_number}")
                try:
                    response = await client.post(endpoint, params={"key": self.keys[index]}, json=body)
                except httpx.HTTPError as e:
                    if not is_rate_limit_error(e):
                        logger.error(f"[Gemini API] Transport error with key #{key_number}: {e}")
                        raise
                    logger.warning(f"[Gemini API] Rate limit error with key #{key_number}: {e}")
                    last_status = getattr(getattr(e, "response", None), "status_code", None)
                    continue

                if response.is_success:
                    logger.info(f"[Gemini API] Success with key #{key_number}")
                    return response

                if response.status_code in FALLBACK_STATUSES:
                    label = "403 Forbidden" if response.status_code == 403 else "Rate limit"
                    logger.warning(f"[Gemini API] {label} hit on key #{key_number}: {response.text[:200]}")
                    last_status = response.status_code
                    continue

                logger.error(f"[Gemini API] HTTP {response.status_code} on key #{key_number}: {response.text[:200]}")
                raise GeminiRequestError(response.status_code, response.text[:500])

        logger.error("[Gemini API] No more fallback keys available")
        raise GeminiKeysExhaustedError(attempts, last_status)
