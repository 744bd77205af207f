"""
Domain models shared by the contingency outbox and the status tracker.
"""

from core.models.contingency import (
    ContingencyReason,
    ContingencyRequest,
    ContingencyRequestResult,
    ContingencyStats,
    ContingencySubmissionOutcome,
    ContingencySubmissionResult,
)
from core.models.document import (
    CompanyContext,
    DocumentStatus,
    DocumentSubmissionResult,
    DTEDocument,
)
from core.models.tracking import (
    StatusQueryResponse,
    SubmissionReceipt,
    TrackingOptions,
    TrackingRecord,
    TrackingState,
    TrackingStats,
)

__all__ = [
    "CompanyContext",
    "DocumentStatus",
    "DocumentSubmissionResult",
    "DTEDocument",
    "ContingencyReason",
    "ContingencyRequest",
    "ContingencyRequestResult",
    "ContingencyStats",
    "ContingencySubmissionOutcome",
    "ContingencySubmissionResult",
    "StatusQueryResponse",
    "SubmissionReceipt",
    "TrackingOptions",
    "TrackingRecord",
    "TrackingState",
    "TrackingStats",
]
