"""
Utility for classifying submission errors as retryable or not using specific exception types.
"""

import asyncio
from typing import Optional

from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import Timeout as RequestsTimeout

from core.exceptions import (
    AuthorityRejectionError,
    SubmissionTimeoutError,
    TransientSubmissionError,
)
from core.models.contingency import ContingencyReason

RETRYABLE_TYPES = (
    TransientSubmissionError,
    TimeoutError,
    asyncio.TimeoutError,
    ConnectionRefusedError,
    ConnectionAbortedError,
    ConnectionResetError,
    RequestsConnectionError,
    RequestsTimeout,
)


def is_retryable_error(error: Exception) -> bool:
    """
    Check if an exception indicates a retryable error based on its type.

    Authority rejections are never retryable, even when they arrive wrapped
    in an otherwise transient-looking response.
    """
    if isinstance(error, AuthorityRejectionError):
        return False
    return isinstance(error, RETRYABLE_TYPES)


def contingency_reason_for(error: Optional[Exception]) -> ContingencyReason:
    """Pick the contingency reason recorded when a document is queued after a failure."""
    if error is None:
        return ContingencyReason.API_UNAVAILABLE
    if isinstance(
        error,
        (SubmissionTimeoutError, TimeoutError, asyncio.TimeoutError, RequestsTimeout),
    ):
        return ContingencyReason.NETWORK_TIMEOUT
    if isinstance(error, TransientSubmissionError) and error.status_code:
        if error.status_code >= 500:
            return ContingencyReason.SERVER_ERROR
    if isinstance(
        error,
        (
            ConnectionRefusedError,
            ConnectionAbortedError,
            ConnectionResetError,
            RequestsConnectionError,
        ),
    ):
        return ContingencyReason.CONNECTION_LOST
    return ContingencyReason.API_UNAVAILABLE


def describe_error(error: BaseException) -> str:
    """Human-readable description of a failure, stored on the entity that failed."""
    if isinstance(error, AuthorityRejectionError) and error.observations:
        return "\n".join([error.message, *error.observations])
    if isinstance(error, (TimeoutError, asyncio.TimeoutError)) and not str(error):
        return "Request timed out"
    return getattr(error, "message", None) or str(error) or type(error).__name__
