"""
Observability module for the DTE contingency service.
Provides metrics capabilities.
"""

from core.observability.metrics import (
    get_metrics_endpoint,
    metrics_registry,
    record_authority_call,
    record_contingency_operation,
    record_http_request,
    record_status_poll,
    record_tracking_outcome,
    set_contingency_pending,
    set_tracked_documents,
)

__all__ = [
    "metrics_registry",
    "record_contingency_operation",
    "set_contingency_pending",
    "record_status_poll",
    "record_tracking_outcome",
    "set_tracked_documents",
    "record_authority_call",
    "record_http_request",
    "get_metrics_endpoint",
]
