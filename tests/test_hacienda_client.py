"""
Test suite for the HTTP submission client and the status vocabulary.
"""

import asyncio
from unittest.mock import Mock

import pytest
import requests

from conftest import make_document
from core.config import AuthorityAPIConfig
from core.exceptions import (
    AuthorityRejectionError,
    SubmissionTimeoutError,
    TransientSubmissionError,
)
from core.models.document import CompanyContext, DocumentStatus
from core.services.submission import HaciendaAPIClient, map_authority_status

API_CONFIG = AuthorityAPIConfig(
    base_url="https://prod.example/api",
    test_base_url="https://test.example/api",
    api_key="secret-key",
    is_production=False,
    health_timeout=1,
)


def make_response(status_code=200, body=None):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body if body is not None else {}
    return response


def make_client(session, credentials_provider=None):
    return HaciendaAPIClient(
        API_CONFIG,
        credentials_provider=credentials_provider,
        request_timeout=5,
        session=session,
    )


class TestSubmit:
    def test_accepted_document_returns_receipt(self, company):
        session = Mock()
        session.post.return_value = make_response(
            200,
            {
                "codigoGeneracion": "GEN-1",
                "numeroControl": "DTE-01-0001",
                "selloRecibido": "SEAL-1",
            },
        )
        client = make_client(session, lambda c: {"Authorization": f"Bearer {c.nit}"})

        receipt = asyncio.run(client.submit(make_document("inv-1"), company))

        assert receipt.generation_code == "GEN-1"
        assert receipt.control_number == "DTE-01-0001"
        assert receipt.reception_seal == "SEAL-1"

        args, kwargs = session.post.call_args
        assert args[0] == "https://test.example/api/document/dte/sync"
        assert kwargs["headers"]["apiKey"] == "secret-key"
        assert kwargs["headers"]["Authorization"] == f"Bearer {company.nit}"
        assert kwargs["headers"]["reference"] == "DTE-01-inv-1"
        assert kwargs["timeout"] == 5

    def test_endpoint_depends_on_document_type_and_environment(self):
        session = Mock()
        session.post.return_value = make_response(200, {"codigoGeneracion": "GEN-1"})
        production = CompanyContext(company_id="c", nit="1", is_production=True)

        asyncio.run(
            make_client(session).submit(
                make_document("inv-1", document_type="14"), production
            )
        )

        assert session.post.call_args[0][0] == (
            "https://prod.example/api/document/dte/se/sync/"
        )

    def test_client_error_is_a_rejection(self, company):
        session = Mock()
        session.post.return_value = make_response(
            400,
            {"descripcionMsg": "Documento invalido", "observaciones": ["Falta NIT"]},
        )

        with pytest.raises(AuthorityRejectionError) as exc_info:
            asyncio.run(make_client(session).submit(make_document("inv-1"), company))

        assert exc_info.value.message == "Documento invalido"
        assert exc_info.value.observations == ["Falta NIT"]
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("status_code", [408, 429, 500, 503])
    def test_busy_or_failing_authority_is_transient(self, company, status_code):
        session = Mock()
        session.post.return_value = make_response(status_code, ValueError("no json"))

        with pytest.raises(TransientSubmissionError) as exc_info:
            asyncio.run(make_client(session).submit(make_document("inv-1"), company))

        assert exc_info.value.status_code == status_code

    def test_connection_failure_is_transient(self, company):
        session = Mock()
        session.post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(TransientSubmissionError):
            asyncio.run(make_client(session).submit(make_document("inv-1"), company))

    def test_request_timeout_is_reported_as_timeout(self, company):
        session = Mock()
        session.post.side_effect = requests.Timeout("read timed out")

        with pytest.raises(SubmissionTimeoutError):
            asyncio.run(make_client(session).submit(make_document("inv-1"), company))

    def test_acceptance_without_generation_code_is_transient(self, company):
        session = Mock()
        session.post.return_value = make_response(200, {"estado": "PROCESADO"})

        with pytest.raises(TransientSubmissionError):
            asyncio.run(make_client(session).submit(make_document("inv-1"), company))


class TestStatusAndHealth:
    def test_status_query(self, company):
        session = Mock()
        session.get.return_value = make_response(
            200, {"estado": "procesado", "codigoGeneracion": "GEN-1"}
        )

        response = asyncio.run(make_client(session).get_status("GEN-1", company))

        assert response.status == "procesado"
        assert response.generation_code == "GEN-1"
        args, kwargs = session.get.call_args
        assert args[0] == "https://test.example/api/document/dte/status/GEN-1"
        assert kwargs["params"] == {"nit": company.nit}

    def test_status_without_estado_is_transient(self, company):
        session = Mock()
        session.get.return_value = make_response(200, {})

        with pytest.raises(TransientSubmissionError):
            asyncio.run(make_client(session).get_status("GEN-1", company))

    def test_health_check(self):
        session = Mock()
        session.get.return_value = make_response(200)

        assert asyncio.run(make_client(session).health_check()) is True

    def test_health_check_unreachable(self):
        session = Mock()
        session.get.side_effect = requests.ConnectionError("refused")

        assert asyncio.run(make_client(session).health_check()) is False

    def test_health_check_timeout(self):
        session = Mock()
        session.get.side_effect = requests.Timeout("slow")

        assert asyncio.run(make_client(session).health_check()) is False


class TestStatusMapping:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("procesado", DocumentStatus.COMPLETED),
            ("AUTORIZADO", DocumentStatus.COMPLETED),
            ("completado", DocumentStatus.COMPLETED),
            ("rechazado", DocumentStatus.VOIDED),
            ("anulado", DocumentStatus.VOIDED),
            ("invalidado", DocumentStatus.VOIDED),
            ("procesando", DocumentStatus.SUBMITTING),
            ("en_proceso", DocumentStatus.SUBMITTING),
            ("pendiente", DocumentStatus.SUBMITTING),
            ("modificado", DocumentStatus.MODIFIED),
            ("desconocido", DocumentStatus.SUBMITTING),
            ("", DocumentStatus.SUBMITTING),
        ],
    )
    def test_map_authority_status(self, raw, expected):
        assert map_authority_status(raw) is expected

    def test_terminal_statuses(self):
        assert DocumentStatus.is_terminal(DocumentStatus.COMPLETED)
        assert DocumentStatus.is_terminal(DocumentStatus.VOIDED)
        assert not DocumentStatus.is_terminal(DocumentStatus.MODIFIED)
        assert not DocumentStatus.is_terminal(DocumentStatus.SUBMITTING)
