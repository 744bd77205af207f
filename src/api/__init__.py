"""
API package for the DTE contingency service.
"""

from api.exceptions import APIDocumentNotFoundError

__all__ = [
    "APIDocumentNotFoundError",
]
