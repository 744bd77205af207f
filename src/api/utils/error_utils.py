"""
Simplified error handling utilities.
"""

from fastapi import status
from fastapi.responses import JSONResponse

from api.models.responses import ErrorResponse
from core.exceptions import DTEBaseException, ExceptionCode

_STATUS_BY_CODE = {
    ExceptionCode.DATA_NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    ExceptionCode.INVALID_STATE.value: status.HTTP_409_CONFLICT,
    ExceptionCode.DUPLICATE_RESOURCE.value: status.HTTP_409_CONFLICT,
    ExceptionCode.VALIDATION_ERROR.value: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ExceptionCode.STORAGE_UNAVAILABLE.value: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def handle_domain_error(error: DTEBaseException) -> JSONResponse:
    """Render a domain exception as an ErrorResponse with a matching status code."""
    error_response = ErrorResponse(
        error=type(error).__name__,
        message=error.message,
        details=error.details or None,
    )
    return JSONResponse(
        status_code=_STATUS_BY_CODE.get(
            error.code, status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        content=error_response.model_dump(mode="json"),
    )
