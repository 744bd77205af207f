"""
Status tracker.
Polls the authority for documents it accepted until each reaches a final
disposition, fails repeatedly or runs out of time.
"""

import asyncio
import random
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Dict, Iterable, List, Optional

from loguru import logger
from pydantic import ValidationError

from core.config import TrackingConfig
from core.config import config as app_config
from core.events import (
    AllTrackingStoppedEvent,
    StatusErrorEvent,
    StatusUpdateEvent,
    TrackingEvents,
    TrackingFailedEvent,
    TrackingTimeoutEvent,
)
from core.exceptions import StorageException
from core.infrastructure import KeyValueStore
from core.logging import clear_document_id, set_document_id
from core.models.document import CompanyContext, DocumentStatus, DTEDocument
from core.models.tracking import (
    StatusQueryResponse,
    TrackingOptions,
    TrackingRecord,
    TrackingState,
    TrackingStats,
)
from core.observability import (
    record_status_poll,
    record_tracking_outcome,
    set_tracked_documents,
)
from core.scheduling import PeriodicTask
from core.services.submission import SubmissionClient, map_authority_status
from core.utils.error_classifier import describe_error

TRACKING_ENTRIES_KEY = "tracking:entries"


@dataclass
class TrackingEntry:
    """Runtime state of one tracked document."""

    document: DTEDocument
    company: CompanyContext
    options: TrackingOptions
    started_at: datetime
    deadline_at: float
    last_known_status: DocumentStatus
    retry_count: int = 0
    state: TrackingState = TrackingState.POLLING
    poller: Optional[PeriodicTask] = field(default=None, repr=False)
    deadline: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def document_id(self) -> str:
        return self.document.id

    @property
    def document_number(self) -> str:
        return self.document.document_number

    @property
    def generation_code(self) -> str:
        return self.document.generation_code


class StatusTracker:
    """
    Polls document status until a terminal state is reached.

    Every entry owns a poller (first poll immediately, then every
    ``polling_interval``) and a deadline task enforcing the wall-clock
    ``timeout``. A response that arrives after its entry was stopped or
    replaced is discarded.
    """

    def __init__(
        self,
        client: SubmissionClient,
        store: KeyValueStore,
        tracking_config: Optional[TrackingConfig] = None,
    ):
        settings = tracking_config or app_config.tracking
        self._client = client
        self._store = store
        self.default_options = settings.default_options()
        self.batch_stagger = settings.batch_stagger
        self._entries: Dict[str, TrackingEntry] = {}
        self.events = TrackingEvents()

    # ====== LIFECYCLE ======

    async def start_tracking(
        self,
        document: DTEDocument,
        company: CompanyContext,
        options: Optional[TrackingOptions] = None,
        initial_delay: Optional[float] = None,
    ) -> TrackingEntry:
        """
        Start polling a document. Tracking an already tracked document restarts
        it with the new options; there is never more than one poller per document.
        """
        if not document.generation_code:
            raise ValueError(
                f"Document {document.document_number} has no generation code to track"
            )

        options = options or self.default_options
        started_at = datetime.now()
        await self._store.set_hash_field(
            TRACKING_ENTRIES_KEY,
            document.id,
            TrackingRecord(
                document=document,
                company=company,
                options=options,
                started_at=started_at,
            ).model_dump_json(),
        )
        return self._activate(document, company, options, started_at, initial_delay)

    def _activate(
        self,
        document: DTEDocument,
        company: CompanyContext,
        options: TrackingOptions,
        started_at: datetime,
        initial_delay: Optional[float] = None,
    ) -> TrackingEntry:
        previous = self._entries.pop(document.id, None)
        if previous is not None:
            self._cancel_timers(previous)
            logger.info(f"Restarting tracking of document {document.document_number}")

        loop = asyncio.get_running_loop()
        elapsed = max((datetime.now() - started_at).total_seconds(), 0.0)
        remaining = options.timeout - elapsed
        entry = TrackingEntry(
            document=document.model_copy(deep=True),
            company=company,
            options=options,
            started_at=started_at,
            deadline_at=loop.time() + remaining,
            last_known_status=document.status,
        )
        entry.poller = PeriodicTask(
            f"tracking:{document.id}",
            partial(self._poll, entry),
            options.polling_interval,
            run_immediately=True,
            initial_delay=initial_delay,
        )
        entry.deadline = loop.create_task(
            self._deadline(entry, remaining), name=f"tracking-deadline:{document.id}"
        )
        self._entries[document.id] = entry
        entry.poller.start()
        set_tracked_documents(len(self._entries))

        logger.info(
            f"Tracking document {document.document_number} "
            f"(generation_code={document.generation_code}, "
            f"every {options.polling_interval}s, timeout {options.timeout}s)"
        )
        return entry

    def stop_tracking(self, document_id: str) -> bool:
        """Stop polling a document. Persisted bookkeeping is left untouched."""
        entry = self._entries.pop(document_id, None)
        if entry is None:
            return False
        self._cancel_timers(entry)
        record_tracking_outcome("stopped")
        set_tracked_documents(len(self._entries))
        logger.info(f"Stopped tracking document {entry.document_number}")
        return True

    async def forget_tracking(self, document_id: str) -> bool:
        """Stop polling and drop the persisted bookkeeping so a restart won't resume it."""
        stopped = self.stop_tracking(document_id)
        removed = await self._store.delete_hash_fields(TRACKING_ENTRIES_KEY, document_id)
        return stopped or removed > 0

    async def start_batch_tracking(
        self,
        documents: Iterable[DTEDocument],
        company: CompanyContext,
        options: Optional[TrackingOptions] = None,
    ) -> int:
        """Track several documents, staggering their first polls."""
        started = 0
        for document in documents:
            if not document.generation_code:
                logger.warning(
                    f"Document {document.document_number} has no generation code, "
                    f"not tracking"
                )
                continue
            await self.start_tracking(
                document,
                company,
                options,
                initial_delay=random.uniform(0, self.batch_stagger),
            )
            started += 1
        logger.info(f"Batch tracking started for {started} documents")
        return started

    def stop_all_tracking(self) -> int:
        entries = list(self._entries.values())
        self._entries.clear()
        for entry in entries:
            self._cancel_timers(entry)
            record_tracking_outcome("stopped")
        set_tracked_documents(0)
        self.events.all_tracking_stopped.publish(
            AllTrackingStoppedEvent(stopped_count=len(entries))
        )
        logger.info(f"Stopped tracking {len(entries)} documents")
        return len(entries)

    @staticmethod
    def _cancel_timers(entry: TrackingEntry) -> None:
        if entry.poller is not None:
            entry.poller.stop()
        current = _current_task()
        if entry.deadline is not None and entry.deadline is not current:
            entry.deadline.cancel()

    # ====== POLLING ======

    def _is_current(self, entry: TrackingEntry) -> bool:
        return (
            self._entries.get(entry.document_id) is entry
            and entry.state is TrackingState.POLLING
        )

    async def _poll(self, entry: TrackingEntry):
        if not self._is_current(entry):
            return

        set_document_id(entry.document_id)
        try:
            remaining = entry.deadline_at - asyncio.get_running_loop().time()
            if remaining <= 0:
                return
            bounded_by_deadline = remaining < entry.options.request_timeout
            try:
                response = await asyncio.wait_for(
                    self._client.get_status(entry.generation_code, entry.company),
                    timeout=min(entry.options.request_timeout, remaining),
                )
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if not self._is_current(entry):
                    record_status_poll("discarded")
                    return
                if bounded_by_deadline and isinstance(e, asyncio.TimeoutError):
                    # Cut short by the wall-clock ceiling, not a failed poll
                    await self._expire(entry)
                    return
                await self._handle_poll_error(entry, e)
                return

            if not self._is_current(entry):
                record_status_poll("discarded")
                logger.debug(f"Discarding late status for {entry.document_number}")
                return
            await self._handle_status(entry, response)
        finally:
            clear_document_id()

    async def _handle_status(self, entry: TrackingEntry, response: StatusQueryResponse):
        new_status = map_authority_status(response.status)
        old_status = entry.last_known_status
        terminal = DocumentStatus.is_terminal(new_status)
        entry.retry_count = 0
        entry.document = entry.document.model_copy(
            update={
                "status": new_status,
                "generation_code": response.generation_code
                or entry.document.generation_code,
                "control_number": response.control_number
                or entry.document.control_number,
                "reception_seal": response.reception_seal
                or entry.document.reception_seal,
            }
        )
        record_status_poll("terminal" if terminal else "processing")

        if new_status != old_status or terminal:
            entry.last_known_status = new_status
            logger.info(
                f"Document {entry.document_number} status "
                f"{old_status.value} -> {new_status.value}"
            )
            self.events.status_update.publish(
                StatusUpdateEvent(
                    document_id=entry.document_id,
                    document_number=entry.document_number,
                    old_status=old_status,
                    new_status=new_status,
                    generation_code=entry.document.generation_code,
                    control_number=entry.document.control_number,
                    reception_seal=entry.document.reception_seal,
                )
            )

        if terminal:
            await self._finish(entry, TrackingState.COMPLETED)

    async def _handle_poll_error(self, entry: TrackingEntry, error: Exception):
        entry.retry_count += 1
        message = describe_error(error)
        record_status_poll("error")
        logger.warning(
            f"Status query for {entry.document_number} failed "
            f"({entry.retry_count}/{entry.options.max_retries}): {message}"
        )
        self.events.status_error.publish(
            StatusErrorEvent(
                document_id=entry.document_id,
                document_number=entry.document_number,
                error=message,
                retry_count=entry.retry_count,
            )
        )

        if entry.retry_count > entry.options.max_retries and self._is_current(entry):
            reason = f"Max retries exceeded: {message}"
            if await self._finish(entry, TrackingState.FAILED):
                self.events.tracking_failed.publish(
                    TrackingFailedEvent(
                        document_id=entry.document_id,
                        document_number=entry.document_number,
                        reason=reason,
                    )
                )

    async def _deadline(self, entry: TrackingEntry, remaining: float):
        await asyncio.sleep(max(remaining, 0))
        await self._expire(entry)

    async def _expire(self, entry: TrackingEntry):
        if await self._finish(entry, TrackingState.TIMED_OUT):
            logger.warning(
                f"Tracking of document {entry.document_number} timed out "
                f"after {entry.options.timeout}s"
            )
            self.events.tracking_timeout.publish(
                TrackingTimeoutEvent(
                    document_id=entry.document_id,
                    document_number=entry.document_number,
                )
            )

    async def _finish(self, entry: TrackingEntry, state: TrackingState) -> bool:
        """Move an entry to a terminal state. Returns False if it was no longer current."""
        if not self._is_current(entry):
            return False

        entry.state = state
        del self._entries[entry.document_id]
        self._cancel_timers(entry)
        record_tracking_outcome(state.value)
        set_tracked_documents(len(self._entries))

        try:
            await self._store.delete_hash_fields(TRACKING_ENTRIES_KEY, entry.document_id)
        except StorageException as e:
            logger.error(
                f"Could not drop tracking record of {entry.document_number}: {e}"
            )
        return True

    # ====== RESTORE ======

    async def restore_tracking(self) -> int:
        """Resume every persisted entry, keeping its original start time."""
        records = await self._store.get_hash(TRACKING_ENTRIES_KEY)
        restored = 0
        for document_id, raw in records.items():
            if document_id in self._entries:
                continue
            try:
                record = TrackingRecord.model_validate_json(raw)
            except ValidationError as e:
                logger.error(f"Skipping unreadable tracking record {document_id}: {e}")
                continue
            self._activate(
                record.document, record.company, record.options, record.started_at
            )
            restored += 1

        if restored:
            logger.info(f"Restored tracking of {restored} documents")
        return restored

    async def resume_in_flight(
        self, documents: Iterable[DTEDocument], company: CompanyContext
    ) -> int:
        """Re-track documents still submitting that already carry a generation code."""
        resumed = 0
        for document in documents:
            if (
                document.status is DocumentStatus.SUBMITTING
                and document.generation_code
                and document.id not in self._entries
            ):
                await self.start_tracking(document, company)
                resumed += 1
        return resumed

    # ====== QUERIES ======

    def get_tracked_document_ids(self) -> List[str]:
        return list(self._entries.keys())

    def is_tracking(self, document_id: str) -> bool:
        return document_id in self._entries

    def get_entry(self, document_id: str) -> Optional[TrackingEntry]:
        return self._entries.get(document_id)

    def get_tracking_stats(self) -> TrackingStats:
        return TrackingStats(
            total_tracked=len(self._entries),
            retry_counters={
                document_id: entry.retry_count
                for document_id, entry in self._entries.items()
            },
            polling_interval=self.default_options.polling_interval,
        )

    def update_polling_interval(self, seconds: float) -> None:
        """Change the default interval. Entries already tracked keep theirs."""
        if seconds <= 0:
            raise ValueError("polling interval must be positive")
        self.default_options = self.default_options.model_copy(
            update={"polling_interval": seconds}
        )
        logger.info(f"Default polling interval set to {seconds}s")


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
