"""
Status tracking models.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field

from core.models.document import CompanyContext, DTEDocument


class TrackingState(str, Enum):
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self is not TrackingState.POLLING


class TrackingOptions(BaseModel):
    """Per-entry polling options, all durations in seconds."""

    polling_interval: float = Field(30.0, gt=0, description="Seconds between polls")
    max_retries: int = Field(10, ge=0, description="Failed polls tolerated")
    timeout: float = Field(
        600.0, gt=0, description="Wall-clock ceiling for the whole tracking"
    )
    request_timeout: float = Field(15.0, gt=0, description="Timeout of one poll")


class TrackingRecord(BaseModel):
    """Persisted bookkeeping for one in-flight document."""

    document: DTEDocument
    company: CompanyContext
    options: TrackingOptions
    started_at: datetime


class TrackingStats(BaseModel):
    total_tracked: int
    retry_counters: Dict[str, int]
    polling_interval: float


class StatusQueryResponse(BaseModel):
    """Authority answer to a status query."""

    status: str
    generation_code: Optional[str] = None
    control_number: Optional[str] = None
    reception_seal: Optional[str] = None


class SubmissionReceipt(BaseModel):
    """Identifiers issued by the authority when it accepts a document."""

    control_number: Optional[str] = None
    generation_code: str
    reception_seal: Optional[str] = None
