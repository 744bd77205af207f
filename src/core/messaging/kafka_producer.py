"""
Kafka publisher for status tracking events.
"""

import asyncio
import json
import os
from typing import List, Optional

from kafka import KafkaProducer
from kafka.errors import KafkaError
from loguru import logger

from core.events import Subscription, TrackingEvents


class KafkaStatusEventPublisher:
    """Forwards every tracker event to a Kafka topic, keyed by document id."""

    def __init__(
        self, bootstrap_servers: Optional[str] = None, topic: Optional[str] = None
    ):
        # Use environment variable for Docker, fallback to localhost for local development
        if bootstrap_servers is None:
            bootstrap_servers = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:29092")

        self.bootstrap_servers = bootstrap_servers
        self.topic = topic or os.getenv("KAFKA_TOPIC", "dte-status-events")
        self._producer: Optional[KafkaProducer] = None
        self._subscriptions: List[Subscription] = []

    def _get_producer(self) -> KafkaProducer:
        """Get or create Kafka producer instance."""
        if self._producer is None:
            try:
                self._producer = KafkaProducer(
                    bootstrap_servers=self.bootstrap_servers,
                    value_serializer=lambda v: json.dumps(v).encode("utf-8"),
                    key_serializer=lambda k: k.encode("utf-8") if k else None,
                    retries=3,
                    retry_backoff_ms=100,
                )
                logger.info(f"Kafka producer connected to {self.bootstrap_servers}")
            except Exception as e:
                logger.error(f"Failed to create Kafka producer: {e}")
                raise
        return self._producer

    def attach(self, events: TrackingEvents) -> None:
        """Subscribe to every tracker channel."""
        for channel in events.channels():
            self._subscriptions.append(channel.subscribe(self.publish_event))

    def detach(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()

    async def publish_event(self, event) -> bool:
        """Publish off the event loop; the producer blocks on acknowledgment."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.publish, event.to_dict())

    def publish(self, value: dict) -> bool:
        try:
            producer = self._get_producer()

            # Document id as message key keeps one document's events ordered
            key = value.get("document_id")
            future = producer.send(self.topic, key=key, value=value)

            # Wait for acknowledgment (optional - for reliability)
            record_metadata = future.get(timeout=10)

            logger.debug(
                f"{value.get('event_type')} published: document_id={key}, "
                f"topic={record_metadata.topic}, partition={record_metadata.partition}, "
                f"offset={record_metadata.offset}"
            )
            return True

        except KafkaError as e:
            logger.error(f"Kafka error publishing status event: {e}")
            return False
        except Exception as e:
            logger.error(f"Error publishing status event: {e}")
            return False

    def close(self):
        """Close the Kafka producer."""
        self.detach()
        if self._producer:
            try:
                self._producer.close()
                logger.info("Kafka producer closed")
            except Exception as e:
                logger.error(f"Error closing Kafka producer: {e}")
            finally:
                self._producer = None
