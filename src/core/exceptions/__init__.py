"""
Exception module for the DTE contingency system.
Contains custom exceptions for different error types.
"""

from core.exceptions.base_exceptions import (
    BusinessException,
    DTEBaseException,
    ExceptionCode,
    ExternalServiceException,
    SystemException,
)
from core.exceptions.contingency_exceptions import (
    ContingencyRequestNotFoundError,
    ContingencyRequestStateError,
)
from core.exceptions.infrastructure_exceptions import StorageException
from core.exceptions.submission_exceptions import (
    AuthorityRejectionError,
    SubmissionException,
    SubmissionTimeoutError,
    TransientSubmissionError,
)

__all__ = [
    "DTEBaseException",
    "BusinessException",
    "SystemException",
    "ExternalServiceException",
    "ExceptionCode",
    "StorageException",
    "ContingencyRequestNotFoundError",
    "ContingencyRequestStateError",
    "SubmissionException",
    "TransientSubmissionError",
    "SubmissionTimeoutError",
    "AuthorityRejectionError",
]
