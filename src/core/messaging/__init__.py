"""
Messaging module for Kafka integration.
"""

from core.messaging.kafka_producer import KafkaStatusEventPublisher

__all__ = ["KafkaStatusEventPublisher"]
