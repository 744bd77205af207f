"""
Contingency outbox related exceptions.
"""

from core.exceptions.base_exceptions import BusinessException, ExceptionCode


class ContingencyRequestNotFoundError(BusinessException):
    """Raised when a request id is not in the outbox."""

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__(
            message=f"Contingency request not found: {request_id}",
            code=ExceptionCode.DATA_NOT_FOUND,
            details={"request_id": request_id},
        )


class ContingencyRequestStateError(BusinessException):
    """Raised when an operation is not allowed in the request's current state."""

    def __init__(self, request_id: str, message: str):
        self.request_id = request_id
        super().__init__(
            message=message,
            code=ExceptionCode.INVALID_STATE,
            details={"request_id": request_id},
        )
