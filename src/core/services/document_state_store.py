"""
Document state store.
Keeps the application's view of each submitted document: its status and the
identifiers the authority issued for it.
"""

from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, ValidationError

from core.events import StatusUpdateEvent
from core.infrastructure import KeyValueStore
from core.models.document import CompanyContext, DocumentStatus, DTEDocument

DOCUMENTS_KEY = "documents:state"


class StoredDocument(BaseModel):
    document: DTEDocument
    company: CompanyContext


class DocumentStateStore:
    def __init__(self, store: KeyValueStore):
        self._store = store

    async def save(self, document: DTEDocument, company: CompanyContext) -> None:
        await self._store.set_hash_field(
            DOCUMENTS_KEY,
            document.id,
            StoredDocument(document=document, company=company).model_dump_json(),
        )

    async def get(self, document_id: str) -> Optional[StoredDocument]:
        raw = await self._store.get_hash_field(DOCUMENTS_KEY, document_id)
        if raw is None:
            return None
        return StoredDocument.model_validate_json(raw)

    async def list_by_status(self, status: DocumentStatus) -> List[StoredDocument]:
        documents = []
        for document_id, raw in (await self._store.get_hash(DOCUMENTS_KEY)).items():
            try:
                stored = StoredDocument.model_validate_json(raw)
            except ValidationError as e:
                logger.error(f"Skipping unreadable document {document_id}: {e}")
                continue
            if stored.document.status is status:
                documents.append(stored)
        return documents

    async def apply_status_update(self, event: StatusUpdateEvent) -> bool:
        """Write a tracker status change onto the stored document."""
        stored = await self.get(event.document_id)
        if stored is None:
            logger.warning(f"Status update for unknown document {event.document_id}")
            return False

        document = stored.document.model_copy(
            update={
                "status": event.new_status,
                "generation_code": event.generation_code
                or stored.document.generation_code,
                "control_number": event.control_number
                or stored.document.control_number,
                "reception_seal": event.reception_seal
                or stored.document.reception_seal,
            }
        )
        await self.save(document, stored.company)
        logger.info(
            f"Document {event.document_number} is now {event.new_status.value}"
        )
        return True
