"""
Shared fixtures: a scripted submission client, a controllable clock and
document factories.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Dict, List

import pytest

from core.infrastructure import InMemoryStore
from core.models.document import CompanyContext, DocumentStatus, DTEDocument
from core.models.tracking import StatusQueryResponse, SubmissionReceipt
from core.services.submission import SubmissionClient


class FakeSubmissionClient(SubmissionClient):
    """
    Scripted authority.

    ``submit_outcomes`` maps a document id to a list of outcomes consumed one per
    call (an exception to raise or a receipt); ``status_outcomes`` is a queue of
    raw statuses or exceptions shared by every status query.
    """

    def __init__(self):
        self.healthy = True
        self.submit_outcomes: Dict[str, list] = {}
        self.status_outcomes: list = []
        self.default_status = "procesando"
        self.submit_delay = 0.0
        self.status_delay = 0.0
        self.submitted: List[str] = []
        self.status_calls = 0

    async def submit(self, document, company):
        self.submitted.append(document.id)
        if self.submit_delay:
            await asyncio.sleep(self.submit_delay)
        outcomes = self.submit_outcomes.get(document.id)
        outcome = outcomes.pop(0) if outcomes else None
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome or SubmissionReceipt(
            generation_code=f"GEN-{document.id}",
            control_number=f"CTRL-{document.id}",
            reception_seal=f"SEAL-{document.id}",
        )

    async def get_status(self, generation_code, company):
        self.status_calls += 1
        if self.status_delay:
            await asyncio.sleep(self.status_delay)
        outcome = (
            self.status_outcomes.pop(0) if self.status_outcomes else self.default_status
        )
        if isinstance(outcome, BaseException):
            raise outcome
        return StatusQueryResponse(status=outcome, generation_code=generation_code)

    async def health_check(self):
        if isinstance(self.healthy, BaseException):
            raise self.healthy
        return self.healthy


class YieldingStore(InMemoryStore):
    """InMemoryStore that gives up the event loop on every call, like a network store."""

    async def get_hash(self, key):
        await asyncio.sleep(0)
        return await super().get_hash(key)

    async def get_hash_field(self, key, field):
        await asyncio.sleep(0)
        return await super().get_hash_field(key, field)

    async def set_hash_field(self, key, field, value):
        await asyncio.sleep(0)
        await super().set_hash_field(key, field, value)

    async def delete_hash_fields(self, key, *fields):
        await asyncio.sleep(0)
        return await super().delete_hash_fields(key, *fields)


class FakeClock:
    def __init__(self, start: datetime = datetime(2025, 1, 15, 10, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


async def wait_until(predicate, timeout: float = 2.0, interval: float = 0.01) -> bool:
    """Poll ``predicate`` until it holds or ``timeout`` elapses."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()


def make_document(
    document_id: str = "inv-0001",
    status: DocumentStatus = DocumentStatus.NEW,
    generation_code: str = None,
    document_type: str = "01",
) -> DTEDocument:
    return DTEDocument(
        id=document_id,
        document_number=f"DTE-{document_type}-{document_id}",
        document_type=document_type,
        status=status,
        generation_code=generation_code,
        payload={"identificacion": {"tipoDte": document_type}},
    )


@pytest.fixture
def company():
    return CompanyContext(company_id="company-1", nit="06142803901121", name="Demo")


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def yielding_store():
    return YieldingStore()


@pytest.fixture
def client():
    return FakeSubmissionClient()


@pytest.fixture
def clock():
    return FakeClock()
