"""
Contingency outbox models.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from core.models.document import CompanyContext, DTEDocument


class ContingencyReason(str, Enum):
    """Why a document went to the outbox instead of the authority."""

    # API issues
    API_UNAVAILABLE = "API_UNAVAILABLE"
    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    SERVER_ERROR = "SERVER_ERROR"
    CERTIFICATE_ERROR = "CERTIFICATE_ERROR"

    # System issues
    SYSTEM_MAINTENANCE = "SYSTEM_MAINTENANCE"
    CONNECTION_LOST = "CONNECTION_LOST"

    # Emergency
    EMERGENCY = "EMERGENCY"
    FORCE_OFFLINE = "FORCE_OFFLINE"


class ContingencyRequest(BaseModel):
    """One document waiting in the outbox."""

    id: str
    document_snapshot: DTEDocument
    company: CompanyContext
    reason: ContingencyReason = ContingencyReason.API_UNAVAILABLE
    created_at: datetime
    last_attempt_at: Optional[datetime] = None
    submission_attempts: int = 0
    last_error: Optional[str] = None
    rejected: bool = False
    is_submitted: bool = False
    submitted_at: Optional[datetime] = None
    control_number: Optional[str] = None
    generation_code: Optional[str] = None
    reception_seal: Optional[str] = None

    @property
    def document_id(self) -> str:
        return self.document_snapshot.id

    @property
    def document_number(self) -> str:
        return self.document_snapshot.document_number

    def is_exhausted(self, max_attempts: int) -> bool:
        """Attempt budget spent; only a manual retry or delete moves it on."""
        return not self.is_submitted and self.submission_attempts >= max_attempts


class ContingencyRequestResult(BaseModel):
    """Outcome of an enqueue attempt."""

    success: bool
    message: str
    request_id: Optional[str] = None
    should_retry_later: bool = False


class ContingencySubmissionOutcome(BaseModel):
    """Per-request result of a resubmission."""

    request_id: str
    document_id: str
    document_number: str
    success: bool
    error: Optional[str] = None
    control_number: Optional[str] = None
    generation_code: Optional[str] = None
    reception_seal: Optional[str] = None


class ContingencySubmissionResult(BaseModel):
    """Aggregate result of a sweep."""

    success: bool
    submitted: int = 0
    failed: int = 0
    results: List[ContingencySubmissionOutcome] = Field(default_factory=list)


class ContingencyStats(BaseModel):
    total_requests: int = 0
    pending_requests: int = 0
    submitted_requests: int = 0
    failed_requests: int = 0
