"""
Document submission request model.
"""

from pydantic import BaseModel, Field

from core.models.document import CompanyContext, DTEDocument


class SubmitDocumentRequest(BaseModel):
    """Document to submit together with the issuing company."""

    document: DTEDocument
    company: CompanyContext = Field(..., description="Issuing company context")

    class Config:
        json_schema_extra = {
            "example": {
                "document": {
                    "id": "inv-0001",
                    "document_number": "DTE-01-00000001",
                    "document_type": "01",
                    "payload": {"identificacion": {"tipoDte": "01"}},
                },
                "company": {
                    "company_id": "company-1",
                    "nit": "06142803901121",
                    "name": "Demo S.A. de C.V.",
                    "is_production": False,
                },
            }
        }
