"""
Exception hierarchy shared by the outbox, the tracker and the API.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ExceptionCode(Enum):
    # Durable store (STORE_XXXX)
    STORAGE_UNAVAILABLE = "STORE_1001"

    # Outbox and document rules (DTE_XXXX)
    VALIDATION_ERROR = "DTE_2001"
    DATA_NOT_FOUND = "DTE_2002"
    INVALID_STATE = "DTE_2003"
    DUPLICATE_RESOURCE = "DTE_2004"

    # Tax authority (AUTH_XXXX)
    EXTERNAL_SERVICE_UNAVAILABLE = "AUTH_3001"
    EXTERNAL_SERVICE_TIMEOUT = "AUTH_3002"
    DOCUMENT_REJECTED = "AUTH_3003"

    INTERNAL_ERROR = "SYS_9001"


class DTEBaseException(Exception):
    """
    Root of every domain error.

    ``code`` holds the enum value so it serializes as-is; ``details`` carries
    the identifiers an operator needs to find the failing request or document.
    """

    def __init__(
        self,
        message: str,
        code: ExceptionCode = ExceptionCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code.value
        self.details = details or {}
        self.original_exception = original_exception

    def __str__(self):
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        data = {"code": self.code, "message": self.message, "details": self.details}
        if self.original_exception is not None:
            data["cause"] = type(self.original_exception).__name__
        return data


class BusinessException(DTEBaseException):
    """The request breaks an outbox or document rule."""


class SystemException(DTEBaseException):
    """Local infrastructure failed."""


class ExternalServiceException(DTEBaseException):
    """The tax authority failed or refused."""
