"""
Request pipeline: token check, request ids, HTTP metrics.
"""

from api.middleware.auth import API_TOKEN_HEADER, APITokenMiddleware
from api.middleware.observability import (
    ObservabilityMiddleware,
    add_metrics_endpoint,
    add_observability_middleware,
)

__all__ = [
    "API_TOKEN_HEADER",
    "APITokenMiddleware",
    "ObservabilityMiddleware",
    "add_observability_middleware",
    "add_metrics_endpoint",
]
