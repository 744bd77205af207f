"""
Test suite for the submission service: online path, contingency fallback and
the hand-off from the outbox to status tracking.
"""

import asyncio

import pytest

from conftest import make_document, wait_until
from core.config import ContingencyConfig, TrackingConfig
from core.exceptions import AuthorityRejectionError, TransientSubmissionError
from core.models.contingency import ContingencyReason
from core.models.document import DocumentStatus
from core.services import (
    ContingencyQueueManager,
    DocumentStateStore,
    DTESubmissionService,
    StatusTracker,
)

CONTINGENCY = ContingencyConfig(
    sweep_interval=60,
    max_attempts=3,
    retention_hours=24,
    submission_delay=0,
    request_timeout=1,
)
TRACKING = TrackingConfig(
    polling_interval=0.05, max_retries=2, timeout=5, request_timeout=1, batch_stagger=0
)


def make_service(client, store, clock):
    manager = ContingencyQueueManager(client, store, CONTINGENCY, clock=clock)
    tracker = StatusTracker(client, store, TRACKING)
    return DTESubmissionService(
        client, manager, tracker, DocumentStateStore(store), request_timeout=1
    )


class TestSubmitDocument:
    def test_online_submission_starts_tracking(self, client, store, clock, company):
        async def scenario():
            service = make_service(client, store, clock)
            try:
                result = await service.submit_document(make_document("inv-1"), company)
                stored = await service.get_document("inv-1")
                return result, stored, service.tracker.is_tracking("inv-1")
            finally:
                await service.shutdown()

        result, stored, tracking = asyncio.run(scenario())

        assert result.success is True
        assert result.contingency is False
        assert result.generation_code == "GEN-inv-1"
        assert result.status is DocumentStatus.SUBMITTING
        assert stored.document.status is DocumentStatus.SUBMITTING
        assert stored.document.reception_seal == "SEAL-inv-1"
        assert stored.company == company
        assert tracking is True

    def test_unhealthy_authority_queues_without_submitting(
        self, client, store, clock, company
    ):
        client.healthy = False

        async def scenario():
            service = make_service(client, store, clock)
            try:
                result = await service.submit_document(make_document("inv-1"), company)
                request = await service.contingency_manager.get_request(
                    result.request_id
                )
                return (
                    result,
                    request,
                    service.contingency_manager.is_auto_submission_active(),
                    service.tracker.is_tracking("inv-1"),
                )
            finally:
                await service.shutdown()

        result, request, sweeping, tracking = asyncio.run(scenario())

        assert client.submitted == []
        assert result.success is True
        assert result.contingency is True
        assert result.status is DocumentStatus.SUBMITTING
        assert request.reason is ContingencyReason.API_UNAVAILABLE
        assert sweeping is True
        assert tracking is False

    def test_transient_failure_falls_back_to_contingency(
        self, client, store, clock, company
    ):
        client.submit_outcomes["inv-1"] = [
            TransientSubmissionError("Service unavailable", status_code=503)
        ]

        async def scenario():
            service = make_service(client, store, clock)
            try:
                result = await service.submit_document(make_document("inv-1"), company)
                return result, await service.contingency_manager.get_request(
                    result.request_id
                )
            finally:
                await service.shutdown()

        result, request = asyncio.run(scenario())

        assert result.contingency is True
        assert request.reason is ContingencyReason.SERVER_ERROR
        assert request.submission_attempts == 0

    def test_slow_authority_falls_back_to_contingency(
        self, client, store, clock, company
    ):
        client.submit_delay = 5

        async def scenario():
            service = make_service(client, store, clock)
            service.request_timeout = 0.05
            try:
                result = await service.submit_document(make_document("inv-1"), company)
                return result, await service.contingency_manager.get_request(
                    result.request_id
                )
            finally:
                await service.shutdown()

        result, request = asyncio.run(scenario())

        assert result.contingency is True
        assert request.reason is ContingencyReason.NETWORK_TIMEOUT

    def test_rejection_is_reported_not_queued(self, client, store, clock, company):
        client.submit_outcomes["inv-1"] = [
            AuthorityRejectionError("Documento invalido", observations=["Falta NIT"])
        ]

        async def scenario():
            service = make_service(client, store, clock)
            try:
                result = await service.submit_document(make_document("inv-1"), company)
                stats = await service.contingency_manager.get_contingency_stats()
                return result, stats
            finally:
                await service.shutdown()

        result, stats = asyncio.run(scenario())

        assert result.success is False
        assert result.contingency is False
        assert result.message == "Documento invalido"
        assert result.observations == ["Falta NIT"]
        assert stats.total_requests == 0

    def test_unexpected_errors_propagate(self, client, store, clock, company):
        client.submit_outcomes["inv-1"] = [ValueError("payload is not serializable")]

        async def scenario():
            service = make_service(client, store, clock)
            try:
                await service.submit_document(make_document("inv-1"), company)
            finally:
                await service.shutdown()

        with pytest.raises(ValueError):
            asyncio.run(scenario())


class TestHandOff:
    def test_resubmitted_request_is_tracked(self, client, store, clock, company):
        client.healthy = False

        async def scenario():
            service = make_service(client, store, clock)
            try:
                await service.submit_document(make_document("inv-1"), company)
                client.healthy = True
                sweep = await service.contingency_manager.submit_pending_requests()
                await service.contingency_manager.request_submitted.drain()
                stored = await service.get_document("inv-1")
                return sweep, stored, service.tracker.is_tracking("inv-1")
            finally:
                await service.shutdown()

        sweep, stored, tracking = asyncio.run(scenario())

        assert sweep.submitted == 1
        assert tracking is True
        assert stored.document.generation_code == "GEN-inv-1"
        assert stored.document.control_number == "CTRL-inv-1"
        assert stored.document.status is DocumentStatus.SUBMITTING

    def test_status_changes_reach_the_document_store(
        self, client, store, clock, company
    ):
        client.status_outcomes = ["procesado"]

        async def scenario():
            service = make_service(client, store, clock)
            try:
                await service.submit_document(make_document("inv-1"), company)
                await wait_until(lambda: not service.tracker.is_tracking("inv-1"))
                await service.tracker.events.drain()
                return await service.get_document("inv-1")
            finally:
                await service.shutdown()

        stored = asyncio.run(scenario())

        assert stored.document.status is DocumentStatus.COMPLETED
        assert stored.document.generation_code == "GEN-inv-1"
        assert stored.document.reception_seal == "SEAL-inv-1"


class TestResume:
    def test_resume_picks_up_tracking_and_outbox(self, client, store, clock, company):
        async def scenario():
            first = make_service(client, store, clock)
            client.healthy = False
            await first.submit_document(make_document("queued"), company)
            await first.documents.save(
                make_document(
                    "accepted",
                    status=DocumentStatus.SUBMITTING,
                    generation_code="GEN-accepted",
                ),
                company,
            )
            await first.shutdown()

            second = make_service(client, store, clock)
            try:
                summary = await second.resume()
                return (
                    summary,
                    second.tracker.get_tracked_document_ids(),
                    second.contingency_manager.is_auto_submission_active(),
                )
            finally:
                await second.shutdown()

        summary, tracked, sweeping = asyncio.run(scenario())

        assert summary == {
            "restored_tracking": 0,
            "resumed_documents": 1,
            "pending_requests": 1,
        }
        assert tracked == ["accepted"]
        assert sweeping is True

    def test_shutdown_stops_background_work(self, client, store, clock, company):
        async def scenario():
            service = make_service(client, store, clock)
            await service.submit_document(make_document("inv-1"), company)
            await service.shutdown()
            return (
                service.tracker.get_tracked_document_ids(),
                service.contingency_manager.is_auto_submission_active(),
                service.contingency_manager.request_submitted.listener_count,
            )

        tracked, sweeping, listeners = asyncio.run(scenario())

        assert tracked == []
        assert sweeping is False
        assert listeners == 0
