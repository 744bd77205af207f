"""
Core services package for the DTE contingency service.
Contains the submission client, the contingency outbox and the status tracker.
"""

# Authority transport
from core.services.submission import HaciendaAPIClient, SubmissionClient

# Outbox and tracking
from core.services.contingency import ContingencyQueueManager
from core.services.tracking import StatusTracker

# Coordination
from core.services.document_state_store import DocumentStateStore
from core.services.dte_submission_service import DTESubmissionService

__all__ = [
    "SubmissionClient",
    "HaciendaAPIClient",
    "ContingencyQueueManager",
    "StatusTracker",
    "DocumentStateStore",
    "DTESubmissionService",
]
