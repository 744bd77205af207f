"""
Test suite for the submission error classifier.
"""

import asyncio

import pytest
import requests

from core.exceptions import (
    AuthorityRejectionError,
    SubmissionTimeoutError,
    TransientSubmissionError,
)
from core.models.contingency import ContingencyReason
from core.utils.error_classifier import (
    contingency_reason_for,
    describe_error,
    is_retryable_error,
)


class TestIsRetryableError:
    @pytest.mark.parametrize(
        "error",
        [
            TransientSubmissionError("down", 503),
            SubmissionTimeoutError("submit", 30),
            asyncio.TimeoutError(),
            ConnectionResetError(),
            ConnectionRefusedError(),
            ConnectionAbortedError(),
            requests.ConnectionError("refused"),
            requests.Timeout("slow"),
        ],
    )
    def test_retryable(self, error):
        assert is_retryable_error(error) is True

    @pytest.mark.parametrize(
        "error",
        [
            AuthorityRejectionError("Documento invalido", ["Falta NIT"], 400),
            ValueError("bad payload"),
            KeyError("estado"),
        ],
    )
    def test_not_retryable(self, error):
        assert is_retryable_error(error) is False


class TestContingencyReason:
    @pytest.mark.parametrize(
        "error, reason",
        [
            (None, ContingencyReason.API_UNAVAILABLE),
            (SubmissionTimeoutError("submit", 30), ContingencyReason.NETWORK_TIMEOUT),
            (asyncio.TimeoutError(), ContingencyReason.NETWORK_TIMEOUT),
            (TransientSubmissionError("HTTP 502", 502), ContingencyReason.SERVER_ERROR),
            (requests.ConnectionError("refused"), ContingencyReason.CONNECTION_LOST),
            (ConnectionRefusedError(), ContingencyReason.CONNECTION_LOST),
            (TransientSubmissionError("HTTP 429", 429), ContingencyReason.API_UNAVAILABLE),
        ],
    )
    def test_reason_for_error(self, error, reason):
        assert contingency_reason_for(error) is reason


class TestDescribeError:
    def test_rejection_includes_observations(self):
        error = AuthorityRejectionError(
            "Documento invalido", ["Falta NIT", "Fecha fuera de rango"], 400
        )

        assert describe_error(error) == (
            "Documento invalido\nFalta NIT\nFecha fuera de rango"
        )

    def test_bare_timeout(self):
        assert describe_error(asyncio.TimeoutError()) == "Request timed out"

    def test_domain_exception_uses_message(self):
        assert describe_error(TransientSubmissionError("HTTP 503", 503)) == "HTTP 503"

    def test_plain_exception(self):
        assert describe_error(RuntimeError("boom")) == "boom"
