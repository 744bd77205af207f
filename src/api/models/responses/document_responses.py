"""
Document state response models.
"""

from pydantic import BaseModel, Field

from core.models.document import CompanyContext, DTEDocument


class DocumentStateResponse(BaseModel):
    """Stored state of a submitted document."""

    document: DTEDocument
    company: CompanyContext
    tracking: bool = Field(..., description="Status is currently being polled")
