"""
Status tracking response models.
"""

from typing import Dict, List

from pydantic import BaseModel, Field


class TrackingStatusResponse(BaseModel):
    total_tracked: int
    retry_counters: Dict[str, int] = Field(
        ..., description="Consecutive failed polls per document"
    )
    polling_interval: float = Field(..., description="Default seconds between polls")
    document_ids: List[str]


class StopTrackingResponse(BaseModel):
    stopped_count: int
