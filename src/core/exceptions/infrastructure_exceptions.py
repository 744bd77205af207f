"""
Durable store failures.
"""

from core.exceptions.base_exceptions import ExceptionCode, SystemException


class StorageException(SystemException):
    """Raised when the durable store cannot be read or written at all."""

    def __init__(
        self,
        message: str = "Durable store unavailable",
        operation: str = None,
        key: str = None,
        original_exception: Exception = None,
    ):
        super().__init__(
            message=message,
            code=ExceptionCode.STORAGE_UNAVAILABLE,
            details={"operation": operation, "key": key},
            original_exception=original_exception,
        )
