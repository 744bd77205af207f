"""
Exceptions raised by submission clients talking to the tax authority.
"""

from typing import List, Optional

from core.exceptions.base_exceptions import (
    BusinessException,
    ExceptionCode,
    ExternalServiceException,
)


class SubmissionException(ExternalServiceException):
    """Base class for every failure reported by a submission client."""

    pass


class TransientSubmissionError(SubmissionException):
    """Network loss or authority-side outage. Safe to retry."""

    def __init__(
        self,
        message: str = "Tax authority API unavailable",
        status_code: Optional[int] = None,
        original_exception: Exception = None,
    ):
        self.status_code = status_code
        super().__init__(
            message=message,
            code=ExceptionCode.EXTERNAL_SERVICE_UNAVAILABLE,
            details={"status_code": status_code},
            original_exception=original_exception,
        )


class SubmissionTimeoutError(TransientSubmissionError):
    """The call did not complete within its timeout."""

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(message=f"{operation} timed out after {timeout:g}s")
        self.code = ExceptionCode.EXTERNAL_SERVICE_TIMEOUT.value
        self.details.update({"operation": operation, "timeout": timeout})


class AuthorityRejectionError(SubmissionException, BusinessException):
    """The authority refused the document. Retrying will not help."""

    def __init__(
        self,
        message: str = "Document rejected by the tax authority",
        observations: Optional[List[str]] = None,
        status_code: Optional[int] = None,
    ):
        self.observations = observations or []
        self.status_code = status_code
        super().__init__(
            message=message,
            code=ExceptionCode.DOCUMENT_REJECTED,
            details={"observations": self.observations, "status_code": status_code},
        )
