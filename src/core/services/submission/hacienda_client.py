"""
HTTP submission client for the Ministry of Finance DTE API.
"""

import asyncio
import time
from functools import partial
from typing import Any, Callable, Dict, Optional

import requests
from loguru import logger

from core.config import AuthorityAPIConfig
from core.exceptions import (
    AuthorityRejectionError,
    SubmissionTimeoutError,
    TransientSubmissionError,
)
from core.models.document import CompanyContext, DTEDocument
from core.models.tracking import StatusQueryResponse, SubmissionReceipt
from core.observability import record_authority_call
from core.services.submission.client import SubmissionClient

# Endpoint by DTE type code
_DTE_ENDPOINTS = {
    "14": "/document/dte/se/sync/",  # Sujeto excluido
    "11": "/document/dte/fe/sync/",  # Factura de exportacion
    "08": "/document/dte/cl/sync/",  # Comprobante de liquidacion
}
_DEFAULT_DTE_ENDPOINT = "/document/dte/sync"
_STATUS_ENDPOINT = "/document/dte/status/{generation_code}"

CredentialsProvider = Callable[[CompanyContext], Dict[str, str]]


class HaciendaAPIClient(SubmissionClient):
    """Blocking requests calls executed off the event loop."""

    def __init__(
        self,
        api_config: AuthorityAPIConfig,
        credentials_provider: Optional[CredentialsProvider] = None,
        request_timeout: float = 90.0,
        session: Optional[requests.Session] = None,
    ):
        self._config = api_config
        self._credentials_provider = credentials_provider
        self._request_timeout = request_timeout
        self._session = session or requests.Session()

    def _headers(
        self, company: Optional[CompanyContext], reference: Optional[str] = None
    ) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Cache-Control": "no-cache",
        }
        if self._config.api_key:
            headers["apiKey"] = self._config.api_key
        if company and self._credentials_provider:
            headers.update(self._credentials_provider(company))
        if reference:
            headers["reference"] = reference
        return headers

    def _url(self, path: str, company: Optional[CompanyContext]) -> str:
        production = company.is_production if company else None
        return self._config.resolve_base_url(production).rstrip("/") + path

    async def _call(
        self, operation: str, fn: Callable[[], requests.Response]
    ) -> requests.Response:
        loop = asyncio.get_running_loop()
        started = time.time()
        try:
            return await loop.run_in_executor(None, fn)
        except requests.Timeout as e:
            raise SubmissionTimeoutError(operation, self._request_timeout) from e
        except requests.ConnectionError as e:
            raise TransientSubmissionError(
                f"{operation} failed: {e}", original_exception=e
            ) from e
        finally:
            record_authority_call(operation, time.time() - started)

    async def submit(
        self, document: DTEDocument, company: CompanyContext
    ) -> SubmissionReceipt:
        endpoint = _DTE_ENDPOINTS.get(document.document_type, _DEFAULT_DTE_ENDPOINT)
        request = partial(
            self._session.post,
            self._url(endpoint, company),
            json=document.payload,
            headers=self._headers(company, reference=document.document_number),
            timeout=self._request_timeout,
        )
        response = await self._call("submit", request)
        body = self._raise_for_response(response)
        if not body.get("codigoGeneracion"):
            raise TransientSubmissionError(
                "Authority accepted the request but returned no generation code",
                status_code=response.status_code,
            )

        logger.info(f"DTE {document.document_number} accepted by the authority")
        return SubmissionReceipt(
            generation_code=body["codigoGeneracion"],
            control_number=body.get("numeroControl")
            or document.payload.get("identificacion", {}).get("numeroControl"),
            reception_seal=body.get("selloRecibido"),
        )

    async def get_status(
        self, generation_code: str, company: CompanyContext
    ) -> StatusQueryResponse:
        request = partial(
            self._session.get,
            self._url(
                _STATUS_ENDPOINT.format(generation_code=generation_code), company
            ),
            params={"nit": company.nit},
            headers=self._headers(company),
            timeout=self._request_timeout,
        )
        response = await self._call("get_status", request)
        body = self._raise_for_response(response)
        if not body.get("estado"):
            raise TransientSubmissionError(
                "Invalid response from status query API",
                status_code=response.status_code,
            )
        return StatusQueryResponse(
            status=body["estado"],
            generation_code=body.get("codigoGeneracion"),
            control_number=body.get("numeroControl"),
            reception_seal=body.get("selloRecibido"),
        )

    async def health_check(self) -> bool:
        request = partial(
            self._session.get,
            self._url("/health", None),
            timeout=self._config.health_timeout,
        )
        try:
            response = await self._call("health_check", request)
        except TransientSubmissionError as e:
            logger.warning(f"Authority health check failed: {e}")
            return False
        return response.ok

    @staticmethod
    def _raise_for_response(response: requests.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        if response.ok:
            return body

        # 408 and 429 are the authority being busy, not the document being wrong
        if 400 <= response.status_code < 500 and response.status_code not in (
            408,
            429,
        ):
            observations = list(body.get("observaciones") or [])
            message = body.get("descripcionMsg") or f"HTTP {response.status_code}"
            raise AuthorityRejectionError(
                message, observations=observations, status_code=response.status_code
            )
        raise TransientSubmissionError(
            f"Authority responded HTTP {response.status_code}",
            status_code=response.status_code,
        )
