"""
Composition root: builds the services once per application and hands them
to the controllers.
"""

from typing import Optional

from fastapi import HTTPException, Request, status
from loguru import logger

from api.config.settings import Settings
from core.config import AppConfig
from core.config import config as app_config
from core.infrastructure import KeyValueStore, create_store
from core.messaging import KafkaStatusEventPublisher
from core.services import (
    ContingencyQueueManager,
    DocumentStateStore,
    DTESubmissionService,
    HaciendaAPIClient,
    StatusTracker,
    SubmissionClient,
)


class ServiceContainer:
    """Owns every long-lived service; nothing here is a module-level singleton."""

    def __init__(
        self,
        store: KeyValueStore,
        client: SubmissionClient,
        config: Optional[AppConfig] = None,
        kafka_publisher: Optional[KafkaStatusEventPublisher] = None,
    ):
        config = config or app_config
        self.store = store
        self.client = client
        self.contingency_manager = ContingencyQueueManager(
            client, store, config.contingency
        )
        self.tracker = StatusTracker(client, store, config.tracking)
        self.documents = DocumentStateStore(store)
        self.submission_service = DTESubmissionService(
            client,
            self.contingency_manager,
            self.tracker,
            self.documents,
            request_timeout=config.contingency.request_timeout,
        )

        self.kafka_publisher = kafka_publisher
        if kafka_publisher is not None:
            kafka_publisher.attach(self.tracker.events)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceContainer":
        store = create_store(redis_url=settings.redis_url, use_redis=settings.redis_enabled)
        client = HaciendaAPIClient(app_config.authority)
        kafka_publisher = None
        if settings.kafka_enabled:
            kafka_publisher = KafkaStatusEventPublisher(
                settings.kafka_bootstrap_servers, settings.kafka_topic
            )
            logger.info(f"Publishing status events to Kafka topic {settings.kafka_topic}")
        return cls(store, client, kafka_publisher=kafka_publisher)

    async def startup(self):
        await self.submission_service.resume()

    async def shutdown(self):
        await self.submission_service.shutdown()
        if self.kafka_publisher is not None:
            self.kafka_publisher.close()
        await self.store.close()


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(
            status.HTTP_503_SERVICE_UNAVAILABLE, "Services are not initialized"
        )
    return container
