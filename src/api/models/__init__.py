"""
API models module - organized by Single Responsibility Principle.
"""

# Request models - input validation and structure
from api.models.requests import SubmitDocumentRequest

# Response models - output serialization
from api.models.responses import (
    AutoSubmissionResponse,
    CleanupResponse,
    ContingencyRequestListResponse,
    ContingencyStatsResponse,
    DocumentStateResponse,
    ErrorResponse,
    HealthCheckResponse,
    RequestRemovalResponse,
    StopTrackingResponse,
    TrackingStatusResponse,
)

__all__ = [
    # Requests
    "SubmitDocumentRequest",
    # Responses
    "AutoSubmissionResponse",
    "CleanupResponse",
    "ContingencyRequestListResponse",
    "ContingencyStatsResponse",
    "DocumentStateResponse",
    "ErrorResponse",
    "HealthCheckResponse",
    "RequestRemovalResponse",
    "StopTrackingResponse",
    "TrackingStatusResponse",
]
