"""
FastAPI middleware for automatic observability.
Captures HTTP metrics and tags document requests in the logs.
"""

import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging import clear_document_id, set_document_id
from core.observability import get_metrics_endpoint, record_http_request


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Middleware to automatically capture HTTP metrics and logs."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id

        start_time = time.time()
        method = request.method

        # /documents/{id} routes log under the document they address
        parts = request.url.path.strip("/").split("/")
        if len(parts) == 2 and parts[0] == "documents" and parts[1] != "submit":
            set_document_id(parts[1])
        try:
            response = await call_next(request)
        finally:
            clear_document_id()

        # Route template keeps the label cardinality bounded
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)

        record_http_request(
            method=method,
            endpoint=endpoint,
            status_code=response.status_code,
            duration=time.time() - start_time,
        )

        response.headers["X-Request-ID"] = request_id
        return response


def add_observability_middleware(app: FastAPI) -> None:
    """Add observability middleware to FastAPI app."""
    app.add_middleware(ObservabilityMiddleware)


def add_metrics_endpoint(app: FastAPI) -> None:
    """Add metrics endpoint for Prometheus scraping."""

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        """Prometheus metrics endpoint."""
        content, content_type = get_metrics_endpoint()
        return Response(content=content, media_type=content_type)
