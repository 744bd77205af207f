"""
DTE document and company context models - the parts of the application's
invoice state the submission core needs to read.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DocumentStatus(str, Enum):
    """Lifecycle status of a document as the user sees it."""

    NEW = "new"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    VOIDED = "voided"
    MODIFIED = "modified"

    @classmethod
    def is_terminal(cls, status: "DocumentStatus") -> bool:
        """Check if the authority has reached a final disposition."""
        return status in (cls.COMPLETED, cls.VOIDED)


class CompanyContext(BaseModel):
    """Tenant context needed to submit a document and query its status."""

    company_id: str = Field(..., description="Internal company identifier")
    nit: str = Field(..., description="Tax identification number of the issuer")
    name: Optional[str] = Field(None, description="Company display name")
    is_production: bool = Field(
        False, description="Submit against the production environment"
    )


class DTEDocument(BaseModel):
    """Electronic tax document as handed to the submission core."""

    id: str = Field(..., description="Source document identifier")
    document_number: str = Field(..., description="Human-facing invoice number")
    document_type: str = Field("01", description="Authority DTE type code")
    status: DocumentStatus = Field(DocumentStatus.NEW)
    payload: Dict[str, Any] = Field(
        default_factory=dict, description="DTE body sent to the authority"
    )
    control_number: Optional[str] = None
    generation_code: Optional[str] = None
    reception_seal: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "id": "inv-0001",
                "document_number": "DTE-01-00000001",
                "document_type": "01",
                "status": "new",
                "payload": {"identificacion": {"tipoDte": "01"}},
            }
        }


class DocumentSubmissionResult(BaseModel):
    """What the caller learns from submitting a document."""

    success: bool
    document_id: str
    status: DocumentStatus
    message: str
    contingency: bool = Field(
        False, description="Document was queued instead of submitted online"
    )
    request_id: Optional[str] = None
    generation_code: Optional[str] = None
    control_number: Optional[str] = None
    reception_seal: Optional[str] = None
    observations: List[str] = Field(default_factory=list)
