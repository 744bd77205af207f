"""
Request models module - organized by responsibility.
"""

from api.models.requests.document_request import SubmitDocumentRequest

__all__ = [
    "SubmitDocumentRequest",
]
