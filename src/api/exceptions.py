"""
API-specific exceptions for the DTE contingency service.
"""

from core.exceptions import BusinessException, ExceptionCode


class APIDocumentNotFoundError(BusinessException):
    """Raised when a document id is unknown to the document store."""

    def __init__(self, document_id: str):
        super().__init__(
            message=f"Document not found: {document_id}",
            code=ExceptionCode.DATA_NOT_FOUND,
            details={"document_id": document_id},
        )
