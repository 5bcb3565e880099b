from __future__ import annotations

import logging

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, settings: Settings) -> None:
        super().__init__(app)
        self._headers = dict(DEFAULT_SECURITY_HEADERS)
        if settings.security_enable_hsts:
            max_age = max(1, settings.security_hsts_max_age_seconds)
            self._headers["Strict-Transport-Security"] = f"max-age={max_age}; includeSubDomains"

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for name, value in self._headers.items():
            response.headers.setdefault(name, value)
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects request bodies whose declared Content-Length exceeds the limit."""

    def __init__(self, app, *, max_bytes: int) -> None:
        super().__init__(app)
        self._max_bytes = max(1, max_bytes)

    async def dispatch(self, request: Request, call_next) -> Response:
        raw_length = request.headers.get("content-length")
        if not raw_length:
            return await call_next(request)
        try:
            declared = int(raw_length)
        except ValueError:
            declared = 0
        if declared <= self._max_bytes:
            return await call_next(request)

        logger.warning(
            "REQUEST TOO LARGE | path=%s | bytes=%s | limit=%s",
            request.url.path,
            declared,
            self._max_bytes,
        )
        return JSONResponse(
            status_code=413,
            content={
                "message": "Request body too large",
                "details": {"bytes": declared, "limit": self._max_bytes},
            },
        )
