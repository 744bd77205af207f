"""
Response models module - organized by responsibility.
"""

from api.models.responses.contingency_responses import (
    AutoSubmissionResponse,
    CleanupResponse,
    ContingencyRequestListResponse,
    ContingencyStatsResponse,
    RequestRemovalResponse,
)
from api.models.responses.document_responses import DocumentStateResponse
from api.models.responses.error_responses import ErrorResponse
from api.models.responses.system_responses import HealthCheckResponse
from api.models.responses.tracking_responses import (
    StopTrackingResponse,
    TrackingStatusResponse,
)

__all__ = [
    "AutoSubmissionResponse",
    "CleanupResponse",
    "ContingencyRequestListResponse",
    "ContingencyStatsResponse",
    "RequestRemovalResponse",
    "DocumentStateResponse",
    "ErrorResponse",
    "HealthCheckResponse",
    "StopTrackingResponse",
    "TrackingStatusResponse",
]
