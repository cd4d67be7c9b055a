import time
import logging
from typing import Dict, Optional

from fastapi import Request

logger = logging.getLogger(__name__)

DEFAULT_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "same-origin",
}


class SecurityHeadersMiddleware:
    """Adds fixed security headers to every HTTP response"""

    def __init__(self, app, headers: Optional[Dict[str, str]] = None):
        self.app = app
        self.raw_headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or DEFAULT_SECURITY_HEADERS).items()
        ]

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_security_headers(message):
            if message["type"] == "http.response.start":
                message["headers"] = list(message.get("headers", [])) + self.raw_headers
            await send(message)

        await self.app(scope, receive, send_with_security_headers)


async def log_requests(request: Request, call_next):
    """METHOD path -> status (elapsed ms), skipping health probes"""
    started = time.perf_counter()
    response = await call_next(request)
    if request.url.path not in ("/health", "/ready"):
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f} ms)")
    return response
