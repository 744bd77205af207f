"""
DTE submission service.
Entry point for submitting a document: online when the authority answers,
through the contingency outbox when it does not, and status tracking once
the authority has accepted it.
"""

import asyncio
from typing import Dict, List, Optional

from loguru import logger

from core.config import config as app_config
from core.events import StatusUpdateEvent, Subscription
from core.exceptions import AuthorityRejectionError
from core.logging import clear_document_id, set_document_id
from core.models.contingency import ContingencyReason, ContingencySubmissionOutcome
from core.models.document import (
    CompanyContext,
    DocumentStatus,
    DocumentSubmissionResult,
    DTEDocument,
)
from core.services.contingency import ContingencyQueueManager
from core.services.document_state_store import DocumentStateStore, StoredDocument
from core.services.submission import SubmissionClient
from core.services.tracking import StatusTracker
from core.utils.error_classifier import (
    contingency_reason_for,
    describe_error,
    is_retryable_error,
)


class DTESubmissionService:
    """
    Coordinates the submission client, the contingency outbox and the tracker.

    - Documents accepted online are tracked right away
    - Documents the authority could not take are queued and swept later
    - Outbox resubmissions and status changes flow back into the document store
    """

    def __init__(
        self,
        client: SubmissionClient,
        contingency_manager: ContingencyQueueManager,
        tracker: StatusTracker,
        documents: DocumentStateStore,
        request_timeout: Optional[float] = None,
    ):
        self._client = client
        self.contingency_manager = contingency_manager
        self.tracker = tracker
        self.documents = documents
        self.request_timeout = request_timeout or app_config.contingency.request_timeout

        self._subscriptions: List[Subscription] = [
            contingency_manager.request_submitted.subscribe(self._on_request_submitted),
            tracker.events.status_update.subscribe(self._on_status_update),
        ]

    async def submit_document(
        self, document: DTEDocument, company: CompanyContext
    ) -> DocumentSubmissionResult:
        set_document_id(document.id)
        try:
            await self.documents.save(document, company)

            if await self.contingency_manager.should_activate_contingency():
                logger.warning("Authority unavailable, using contingency mode")
                return await self._enqueue(
                    document, company, ContingencyReason.API_UNAVAILABLE
                )

            try:
                receipt = await asyncio.wait_for(
                    self._client.submit(document, company),
                    timeout=self.request_timeout,
                )
            except AuthorityRejectionError as e:
                logger.error(f"Authority rejected {document.document_number}: {e}")
                return DocumentSubmissionResult(
                    success=False,
                    document_id=document.id,
                    status=document.status,
                    message=e.message,
                    observations=e.observations,
                )
            except Exception as e:
                if not is_retryable_error(e):
                    raise
                logger.warning(
                    f"Submission of {document.document_number} failed, "
                    f"using contingency mode: {describe_error(e)}"
                )
                return await self._enqueue(document, company, contingency_reason_for(e))

            submitted = document.model_copy(
                update={
                    "status": DocumentStatus.SUBMITTING,
                    "generation_code": receipt.generation_code,
                    "control_number": receipt.control_number,
                    "reception_seal": receipt.reception_seal,
                }
            )
            await self.documents.save(submitted, company)
            await self.tracker.start_tracking(submitted, company)
            return DocumentSubmissionResult(
                success=True,
                document_id=document.id,
                status=submitted.status,
                message="Document submitted, tracking status",
                generation_code=receipt.generation_code,
                control_number=receipt.control_number,
                reception_seal=receipt.reception_seal,
            )
        finally:
            clear_document_id()

    async def _enqueue(
        self,
        document: DTEDocument,
        company: CompanyContext,
        reason: ContingencyReason,
    ) -> DocumentSubmissionResult:
        result = await self.contingency_manager.create_contingency_request(
            document, company, reason
        )
        queued = document.model_copy(update={"status": DocumentStatus.SUBMITTING})
        await self.documents.save(queued, company)
        self.contingency_manager.start_auto_submission()
        return DocumentSubmissionResult(
            success=result.success,
            document_id=document.id,
            status=queued.status,
            message=result.message,
            contingency=True,
            request_id=result.request_id,
        )

    async def get_document(self, document_id: str) -> Optional[StoredDocument]:
        return await self.documents.get(document_id)

    async def _on_request_submitted(self, outcome: ContingencySubmissionOutcome):
        request = await self.contingency_manager.get_request(outcome.request_id)
        if request is None:
            logger.warning(f"Submitted request {outcome.request_id} is gone")
            return

        document = request.document_snapshot.model_copy(
            update={
                "status": DocumentStatus.SUBMITTING,
                "generation_code": outcome.generation_code,
                "control_number": outcome.control_number,
                "reception_seal": outcome.reception_seal,
            }
        )
        await self.documents.save(document, request.company)
        await self.tracker.start_tracking(document, request.company)

    async def _on_status_update(self, event: StatusUpdateEvent):
        await self.documents.apply_status_update(event)

    async def resume(self) -> Dict[str, int]:
        """Pick up where a previous process left off."""
        restored = await self.tracker.restore_tracking()

        by_company: Dict[str, List[StoredDocument]] = {}
        for stored in await self.documents.list_by_status(DocumentStatus.SUBMITTING):
            by_company.setdefault(stored.company.company_id, []).append(stored)
        resumed = 0
        for stored_documents in by_company.values():
            resumed += await self.tracker.resume_in_flight(
                [s.document for s in stored_documents], stored_documents[0].company
            )

        stats = await self.contingency_manager.get_contingency_stats()
        if stats.pending_requests:
            self.contingency_manager.start_auto_submission()

        summary = {
            "restored_tracking": restored,
            "resumed_documents": resumed,
            "pending_requests": stats.pending_requests,
        }
        logger.info(f"Submission service resumed: {summary}")
        return summary

    async def shutdown(self):
        self.contingency_manager.stop_auto_submission()
        self.tracker.stop_all_tracking()
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        await self.contingency_manager.request_submitted.drain()
        await self.tracker.events.drain()
