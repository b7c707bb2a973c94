"""Shared-secret API key check for the HTTP surface.

When ``API_KEY`` is configured every request outside ``PUBLIC_PATHS`` must
carry it in the ``X-API-Key`` header.  With no key configured the check is
off, which is how local development runs.
"""

from __future__ import annotations

import hmac
import logging
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from fitgate.config import Settings, get_settings

logger = logging.getLogger("fitgate.auth")

API_KEY_HEADER = "X-API-Key"

# Paths that do not require the key
PUBLIC_PATHS: set[str] = {
    "/",
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
}


def _is_public(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith("/docs") or path.startswith("/redoc")


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Reject requests that do not present the configured API key."""

    def __init__(self, app: Any, settings: Settings | None = None) -> None:
        super().__init__(app)
        self._settings = settings or get_settings()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        expected = self._settings.api_key
        if not expected or _is_public(request.url.path):
            return await call_next(request)

        # OPTIONS requests pass through (CORS preflight)
        if request.method == "OPTIONS":
            return await call_next(request)

        presented = request.headers.get(API_KEY_HEADER, "")
        if not hmac.compare_digest(presented.encode(), expected.encode()):
            logger.warning("Rejected %s %s: missing or wrong API key", request.method, request.url.path)
            return Response(
                content='{"error":"unauthenticated","message":"Missing or invalid API key"}',
                status_code=401,
                media_type="application/json",
            )

        return await call_next(request)
