"""
Contingency outbox response models.
"""

from typing import List

from pydantic import BaseModel, Field

from core.models.contingency import ContingencyRequest


class ContingencyRequestListResponse(BaseModel):
    requests: List[ContingencyRequest]
    count: int


class ContingencyStatsResponse(BaseModel):
    """Outbox counters and the state of the automatic sweep."""

    total_requests: int = Field(..., description="Requests in the outbox")
    pending_requests: int = Field(..., description="Requests the sweep will submit")
    submitted_requests: int = Field(..., description="Requests accepted by the authority")
    failed_requests: int = Field(
        ..., description="Requests rejected or out of attempts"
    )
    auto_submission_active: bool

    class Config:
        json_schema_extra = {
            "example": {
                "total_requests": 4,
                "pending_requests": 2,
                "submitted_requests": 1,
                "failed_requests": 1,
                "auto_submission_active": True,
            }
        }


class CleanupResponse(BaseModel):
    removed: int = Field(..., description="Requests purged from the outbox")


class RequestRemovalResponse(BaseModel):
    request_id: str
    removed: bool


class AutoSubmissionResponse(BaseModel):
    active: bool = Field(..., description="Automatic sweep is running")
    changed: bool = Field(..., description="The call started or stopped the sweep")
