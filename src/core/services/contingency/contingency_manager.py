"""
Contingency queue manager.
Keeps a durable outbox of documents the authority could not take and
resubmits them on a fixed interval.
"""

import asyncio
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncIterator, Callable, Dict, List, Optional, Set, Tuple

from loguru import logger
from pydantic import ValidationError

from core.config import ContingencyConfig
from core.config import config as app_config
from core.events import EventChannel
from core.exceptions import (
    AuthorityRejectionError,
    ContingencyRequestNotFoundError,
    ContingencyRequestStateError,
)
from core.infrastructure import KeyValueStore
from core.logging import clear_document_id, set_document_id
from core.models.contingency import (
    ContingencyReason,
    ContingencyRequest,
    ContingencyRequestResult,
    ContingencyStats,
    ContingencySubmissionOutcome,
    ContingencySubmissionResult,
)
from core.models.document import CompanyContext, DocumentStatus, DTEDocument
from core.models.tracking import SubmissionReceipt
from core.observability import record_contingency_operation, set_contingency_pending
from core.scheduling import PeriodicTask
from core.services.submission import SubmissionClient
from core.utils.error_classifier import describe_error

CONTINGENCY_REQUESTS_KEY = "contingency:requests"


class ContingencyQueueManager:
    """
    Durable outbox for documents that could not be submitted online.

    Responsibilities:
    - Queue one request per document while the authority is unreachable
    - Resubmit pending requests in FIFO order, one at a time
    - Track attempts, rejections and the identifiers issued on acceptance
    - Run the periodic automatic sweep and purge old requests
    """

    def __init__(
        self,
        client: SubmissionClient,
        store: KeyValueStore,
        contingency_config: Optional[ContingencyConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        settings = contingency_config or app_config.contingency
        self._client = client
        self._store = store
        self._clock = clock
        self.max_attempts = settings.max_attempts
        self.retention = timedelta(hours=settings.retention_hours)
        self.submission_delay = settings.submission_delay
        self.request_timeout = settings.request_timeout
        self._in_flight: Set[str] = set()
        # document id -> (lock, holders and waiters)
        self._enqueue_locks: Dict[str, Tuple[asyncio.Lock, int]] = {}
        self._auto_submission = PeriodicTask(
            "contingency-auto-submission",
            self._auto_submission_tick,
            settings.sweep_interval,
        )

        # Successful resubmissions, consumed by whoever starts status tracking
        self.request_submitted: EventChannel[ContingencySubmissionOutcome] = (
            EventChannel("request_submitted")
        )

    # ====== PERSISTENCE ======

    async def _load_all(self) -> List[ContingencyRequest]:
        raw_requests = await self._store.get_hash(CONTINGENCY_REQUESTS_KEY)
        requests = []
        for request_id, raw in raw_requests.items():
            try:
                requests.append(ContingencyRequest.model_validate_json(raw))
            except ValidationError as e:
                logger.error(f"Skipping unreadable contingency request {request_id}: {e}")
        return requests

    async def _load(self, request_id: str) -> Optional[ContingencyRequest]:
        raw = await self._store.get_hash_field(CONTINGENCY_REQUESTS_KEY, request_id)
        if raw is None:
            return None
        return ContingencyRequest.model_validate_json(raw)

    async def _save(self, request: ContingencyRequest) -> None:
        await self._store.set_hash_field(
            CONTINGENCY_REQUESTS_KEY, request.id, request.model_dump_json()
        )

    # ====== QUEUE OPERATIONS ======

    async def create_contingency_request(
        self,
        document: DTEDocument,
        company: CompanyContext,
        reason: ContingencyReason = ContingencyReason.API_UNAVAILABLE,
    ) -> ContingencyRequestResult:
        """Queue a document for later submission. A document is never queued twice."""
        async with self._enqueue_guard(document.id):
            return await self._create_unless_queued(document, company, reason)

    @asynccontextmanager
    async def _enqueue_guard(self, document_id: str) -> AsyncIterator[None]:
        """Serialize lookup-then-save for one document id within this process."""
        lock, users = self._enqueue_locks.get(document_id, (asyncio.Lock(), 0))
        self._enqueue_locks[document_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._enqueue_locks[document_id]
            if users == 1:
                del self._enqueue_locks[document_id]
            else:
                self._enqueue_locks[document_id] = (lock, users - 1)

    async def _create_unless_queued(
        self,
        document: DTEDocument,
        company: CompanyContext,
        reason: ContingencyReason,
    ) -> ContingencyRequestResult:
        existing = await self._find_active_request(document.id)
        if existing:
            logger.warning(
                f"Document {document.document_number} already queued as {existing.id}"
            )
            record_contingency_operation("enqueue", "duplicate")
            return ContingencyRequestResult(
                success=False,
                message=f"Document {document.document_number} is already in contingency",
                request_id=existing.id,
                should_retry_later=True,
            )

        request = ContingencyRequest(
            id=f"contingency_{uuid.uuid4().hex}",
            document_snapshot=document.model_copy(
                deep=True, update={"status": DocumentStatus.SUBMITTING}
            ),
            company=company.model_copy(deep=True),
            reason=reason,
            created_at=self._clock(),
        )
        await self._save(request)
        record_contingency_operation("enqueue", "success")
        logger.info(
            f"Contingency request {request.id} created for document "
            f"{document.document_number} (reason={reason.value})"
        )
        return ContingencyRequestResult(
            success=True,
            message="Document saved in contingency mode, will be submitted automatically",
            request_id=request.id,
            should_retry_later=True,
        )

    async def _find_active_request(
        self, document_id: str
    ) -> Optional[ContingencyRequest]:
        for request in await self._load_all():
            if request.document_id == document_id and not request.is_submitted:
                return request
        return None

    def _is_eligible(self, request: ContingencyRequest) -> bool:
        return (
            not request.is_submitted
            and not request.rejected
            and not request.is_exhausted(self.max_attempts)
        )

    async def submit_pending_requests(self) -> ContingencySubmissionResult:
        """Resubmit every eligible request, oldest first, pacing the authority."""
        pending = [r for r in await self.get_pending_requests() if self._is_eligible(r)]
        if not pending:
            logger.debug("No pending contingency requests")
            set_contingency_pending(0)
            return ContingencySubmissionResult(success=True)

        logger.info(f"Submitting {len(pending)} pending contingency requests")
        results: List[ContingencySubmissionOutcome] = []
        for index, request in enumerate(pending):
            if not self._claim(request.id):
                logger.debug(f"Request {request.id} already in flight, skipping")
                continue

            outcome = await self._submit_single_request(request.id)
            if outcome is not None:
                results.append(outcome)

            if self.submission_delay > 0 and index < len(pending) - 1:
                await asyncio.sleep(self.submission_delay)

        submitted = sum(1 for r in results if r.success)
        failed = len(results) - submitted
        set_contingency_pending(
            sum(1 for r in await self.get_pending_requests() if self._is_eligible(r))
        )
        logger.info(f"Contingency sweep finished: {submitted} submitted, {failed} failed")
        return ContingencySubmissionResult(
            success=submitted > 0 or not results,
            submitted=submitted,
            failed=failed,
            results=results,
        )

    def _claim(self, request_id: str) -> bool:
        """Mark a request in flight. Check and mark happen with no await in between."""
        if request_id in self._in_flight:
            return False
        self._in_flight.add(request_id)
        return True

    async def _submit_single_request(
        self, request_id: str
    ) -> Optional[ContingencySubmissionOutcome]:
        """Submit a request the caller has claimed; the claim is released here."""
        try:
            # Re-read so a request changed since the claim is not sent stale
            request = await self._load(request_id)
            if request is None or request.is_submitted:
                return None

            set_document_id(request.document_id)
            try:
                receipt = await asyncio.wait_for(
                    self._client.submit(request.document_snapshot, request.company),
                    timeout=self.request_timeout,
                )
            except asyncio.CancelledError:
                await self._record_failure(request, "Submission cancelled")
                raise
            except Exception as e:
                return await self._record_failure(request, e)
            return await self._record_success(request, receipt)
        finally:
            self._in_flight.discard(request_id)
            clear_document_id()

    async def _record_success(
        self, request: ContingencyRequest, receipt: SubmissionReceipt
    ) -> ContingencySubmissionOutcome:
        now = self._clock()
        updated = request.model_copy(
            update={
                "is_submitted": True,
                "submitted_at": now,
                "last_attempt_at": now,
                "submission_attempts": request.submission_attempts + 1,
                "last_error": None,
                "control_number": receipt.control_number,
                "generation_code": receipt.generation_code,
                "reception_seal": receipt.reception_seal,
            }
        )
        outcome = ContingencySubmissionOutcome(
            request_id=request.id,
            document_id=request.document_id,
            document_number=request.document_number,
            success=True,
            control_number=receipt.control_number,
            generation_code=receipt.generation_code,
            reception_seal=receipt.reception_seal,
        )
        if not await self._save_if_present(updated):
            return outcome

        record_contingency_operation("submit", "success")
        logger.info(
            f"Contingency request {request.id} submitted "
            f"(generation_code={receipt.generation_code})"
        )
        self.request_submitted.publish(outcome)
        return outcome

    async def _record_failure(
        self, request: ContingencyRequest, error
    ) -> ContingencySubmissionOutcome:
        message = error if isinstance(error, str) else describe_error(error)
        attempts = request.submission_attempts + 1
        if attempts >= self.max_attempts:
            message = f"Max attempts exceeded: {message}"

        updated = request.model_copy(
            update={
                "submission_attempts": attempts,
                "last_attempt_at": self._clock(),
                "last_error": message,
                "rejected": isinstance(error, AuthorityRejectionError),
            }
        )
        await self._save_if_present(updated)
        record_contingency_operation(
            "submit", "rejected" if updated.rejected else "failed"
        )
        logger.warning(
            f"Contingency request {request.id} failed "
            f"(attempt {attempts}/{self.max_attempts}): {message}"
        )
        return ContingencySubmissionOutcome(
            request_id=request.id,
            document_id=request.document_id,
            document_number=request.document_number,
            success=False,
            error=message,
        )

    async def _save_if_present(self, request: ContingencyRequest) -> bool:
        """Persist an attempt result unless the request was removed meanwhile."""
        if await self._load(request.id) is None:
            logger.warning(
                f"Contingency request {request.id} was removed during submission"
            )
            return False
        await self._save(request)
        return True

    async def retry_request(self, request_id: str) -> ContingencySubmissionOutcome:
        """Manually resubmit one request, regardless of its attempt budget."""
        request = await self._load(request_id)
        if request is None:
            raise ContingencyRequestNotFoundError(request_id)
        if request.is_submitted:
            raise ContingencyRequestStateError(
                request_id, f"Contingency request {request_id} was already submitted"
            )
        if not self._claim(request_id):
            raise ContingencyRequestStateError(
                request_id, f"Contingency request {request_id} is being submitted"
            )

        logger.info(f"Manual retry of contingency request {request_id}")
        outcome = await self._submit_single_request(request_id)
        if outcome is None:
            # Submitted or removed between the checks above and the claim
            if await self._load(request_id) is None:
                raise ContingencyRequestNotFoundError(request_id)
            raise ContingencyRequestStateError(
                request_id, f"Contingency request {request_id} was already submitted"
            )
        return outcome

    async def remove_request(self, request_id: str, force: bool = False) -> bool:
        """Delete a request. Submitted requests are kept unless ``force`` is set."""
        request = await self._load(request_id)
        if request is None:
            return False
        if request.is_submitted and not force:
            raise ContingencyRequestStateError(
                request_id,
                f"Contingency request {request_id} was submitted, use force to remove it",
            )

        removed = await self._store.delete_hash_fields(
            CONTINGENCY_REQUESTS_KEY, request_id
        )
        record_contingency_operation("remove", "success" if removed else "missing")
        logger.info(f"Contingency request {request_id} removed")
        return removed > 0

    async def cleanup_old_requests(self) -> int:
        """Purge submitted or exhausted requests older than the retention window."""
        cutoff = self._clock() - self.retention
        stale = [
            r.id
            for r in await self._load_all()
            if (r.is_submitted or r.submission_attempts >= self.max_attempts)
            and r.created_at <= cutoff
            and r.id not in self._in_flight
        ]
        if not stale:
            return 0

        removed = await self._store.delete_hash_fields(CONTINGENCY_REQUESTS_KEY, *stale)
        record_contingency_operation("cleanup", "success")
        logger.info(f"Cleaned up {removed} old contingency requests")
        return removed

    # ====== QUERIES ======

    async def get_pending_requests(self) -> List[ContingencyRequest]:
        """Requests not yet accepted by the authority, oldest first."""
        return sorted(
            (r for r in await self._load_all() if not r.is_submitted),
            key=lambda r: r.created_at,
        )

    async def get_all_requests(self) -> List[ContingencyRequest]:
        return sorted(await self._load_all(), key=lambda r: r.created_at)

    async def get_request(self, request_id: str) -> Optional[ContingencyRequest]:
        return await self._load(request_id)

    async def get_contingency_stats(self) -> ContingencyStats:
        requests = await self._load_all()
        return ContingencyStats(
            total_requests=len(requests),
            pending_requests=sum(1 for r in requests if self._is_eligible(r)),
            submitted_requests=sum(1 for r in requests if r.is_submitted),
            failed_requests=sum(
                1
                for r in requests
                if not r.is_submitted
                and (r.rejected or r.is_exhausted(self.max_attempts))
            ),
        )

    async def should_activate_contingency(self) -> bool:
        """True when the authority does not answer its health probe."""
        try:
            healthy = await asyncio.wait_for(
                self._client.health_check(), timeout=self.request_timeout
            )
        except Exception as e:
            logger.warning(f"Authority health check raised: {e}")
            return True
        return not healthy

    # ====== AUTOMATIC SUBMISSION ======

    def start_auto_submission(self) -> bool:
        started = self._auto_submission.start()
        if started:
            logger.info(
                f"Automatic contingency submission started "
                f"(every {self._auto_submission.interval}s)"
            )
        return started

    def stop_auto_submission(self) -> bool:
        stopped = self._auto_submission.stop()
        if stopped:
            logger.info("Automatic contingency submission stopped")
        return stopped

    def is_auto_submission_active(self) -> bool:
        return self._auto_submission.is_running

    async def _auto_submission_tick(self):
        pending = [r for r in await self.get_pending_requests() if self._is_eligible(r)]
        if not pending:
            return
        logger.info(f"Auto-submitting {len(pending)} contingency requests")
        await self.submit_pending_requests()
