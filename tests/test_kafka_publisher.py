"""
Test suite for forwarding tracker events to Kafka.
"""

import asyncio
from unittest.mock import Mock, patch

from kafka.errors import KafkaError

from core.events import (
    AllTrackingStoppedEvent,
    StatusUpdateEvent,
    TrackingEvents,
    TrackingTimeoutEvent,
)
from core.messaging import KafkaStatusEventPublisher
from core.models.document import DocumentStatus


def make_producer():
    producer = Mock()
    metadata = Mock(topic="dte-status-events", partition=0, offset=7)
    producer.send.return_value.get.return_value = metadata
    return producer


@patch("core.messaging.kafka_producer.KafkaProducer")
def test_publish_keys_by_document_id(producer_class):
    producer = make_producer()
    producer_class.return_value = producer
    publisher = KafkaStatusEventPublisher("kafka:9092", "status-topic")

    assert publisher.publish({"event_type": "X", "document_id": "inv-1"}) is True

    producer_class.assert_called_once()
    assert producer_class.call_args.kwargs["bootstrap_servers"] == "kafka:9092"
    producer.send.assert_called_once_with(
        "status-topic", key="inv-1", value={"event_type": "X", "document_id": "inv-1"}
    )


@patch("core.messaging.kafka_producer.KafkaProducer")
def test_publish_failure_returns_false(producer_class):
    producer = make_producer()
    producer.send.return_value.get.side_effect = KafkaError("broker down")
    producer_class.return_value = producer

    assert KafkaStatusEventPublisher("kafka:9092").publish({"document_id": "a"}) is False


@patch("core.messaging.kafka_producer.KafkaProducer")
def test_attached_publisher_forwards_every_channel(producer_class):
    producer = make_producer()
    producer_class.return_value = producer
    publisher = KafkaStatusEventPublisher("kafka:9092", "status-topic")
    events = TrackingEvents()
    publisher.attach(events)

    async def scenario():
        events.status_update.publish(
            StatusUpdateEvent(
                document_id="inv-1",
                document_number="DTE-01-inv-1",
                old_status=DocumentStatus.SUBMITTING,
                new_status=DocumentStatus.COMPLETED,
            )
        )
        events.tracking_timeout.publish(
            TrackingTimeoutEvent(document_id="inv-2", document_number="DTE-01-inv-2")
        )
        events.all_tracking_stopped.publish(AllTrackingStoppedEvent(stopped_count=0))
        await events.drain()

    asyncio.run(scenario())

    # Listeners publish from executor threads, so arrival order is not fixed
    sent = {
        c.kwargs["value"]["event_type"]: c.kwargs for c in producer.send.call_args_list
    }
    assert set(sent) == {
        "StatusUpdateEvent",
        "TrackingTimeoutEvent",
        "AllTrackingStoppedEvent",
    }
    assert sent["StatusUpdateEvent"]["key"] == "inv-1"
    assert sent["StatusUpdateEvent"]["value"]["new_status"] == "completed"
    assert sent["TrackingTimeoutEvent"]["key"] == "inv-2"
    assert sent["AllTrackingStoppedEvent"]["key"] is None


@patch("core.messaging.kafka_producer.KafkaProducer")
def test_close_detaches_and_closes_producer(producer_class):
    producer = make_producer()
    producer_class.return_value = producer
    publisher = KafkaStatusEventPublisher("kafka:9092")
    events = TrackingEvents()
    publisher.attach(events)
    publisher.publish({"document_id": "inv-1"})

    publisher.close()

    producer.close.assert_called_once()
    assert all(channel.listener_count == 0 for channel in events.channels())
