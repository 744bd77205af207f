"""
Shared-secret authentication for the operator API.
"""

import secrets
from typing import Optional

from fastapi import Request, status
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from api.config.settings import settings

API_TOKEN_HEADER = "X-API-Token"

# Probes, scrapers and API docs stay reachable without a token
PUBLIC_PATHS = frozenset({"/health", "/metrics", "/docs", "/redoc", "/openapi.json"})


def _presented_token(request: Request) -> Optional[str]:
    token = request.headers.get(API_TOKEN_HEADER)
    if token:
        return token
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return None


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": error, "message": message}
    )


class APITokenMiddleware(BaseHTTPMiddleware):
    """Accepts the token in ``X-API-Token`` or as an ``Authorization: Bearer`` value."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        expected = settings.api_token
        if not expected:
            logger.error("Rejecting request: no API token configured")
            return _error(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "ServiceUnavailable",
                "API token is not configured",
            )

        presented = _presented_token(request) or ""
        if not secrets.compare_digest(presented.encode(), expected.encode()):
            logger.warning(
                f"Unauthorized {request.method} {request.url.path} "
                f"from {request.client.host if request.client else 'unknown'}"
            )
            return _error(
                status.HTTP_401_UNAUTHORIZED,
                "Unauthorized",
                "Invalid or missing API token",
            )

        return await call_next(request)
