"""
Submission client contract - the only way the core talks to the tax authority.
"""

from abc import ABC, abstractmethod

from core.models.document import CompanyContext, DTEDocument
from core.models.tracking import StatusQueryResponse, SubmissionReceipt


class SubmissionClient(ABC):
    """
    Opaque transport to the tax authority.

    Implementations raise ``TransientSubmissionError`` for retryable failures
    and ``AuthorityRejectionError`` when the authority refuses a document.
    """

    @abstractmethod
    async def submit(
        self, document: DTEDocument, company: CompanyContext
    ) -> SubmissionReceipt:
        """Submit a document, returning the identifiers issued on acceptance."""

    @abstractmethod
    async def get_status(
        self, generation_code: str, company: CompanyContext
    ) -> StatusQueryResponse:
        """Query the processing status of an accepted document."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Cheap reachability probe."""
