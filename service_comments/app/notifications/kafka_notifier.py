"""
Kafka notification transport for the Comments Service.
"""

import asyncio
import json
from typing import Optional
from kafka import KafkaProducer
from kafka.errors import KafkaError

from shared.logging import get_logger
from shared.errors import CommentServiceException, ExternalServiceError

from ..domain.models import CommentReplyMessage


class KafkaNotificationService:
    """Publishes comment notifications for the mail/push delivery workers."""

    def __init__(self, bootstrap_servers: str, topic: str):
        self.bootstrap_servers = bootstrap_servers
        self.topic = topic
        self.logger = get_logger("comments.notifications.kafka")
        self.producer: Optional[KafkaProducer] = None

    async def start(self):
        """Start the Kafka producer."""
        try:
            self.producer = KafkaProducer(
                bootstrap_servers=self.bootstrap_servers,
                value_serializer=lambda x: json.dumps(x).encode('utf-8'),
                key_serializer=lambda x: x.encode('utf-8') if x else None,
                acks='all',
                retries=3,
                linger_ms=10,
                compression_type='gzip'
            )

            self.logger.info("Kafka producer started", topic=self.topic)

        except Exception as e:
            self.logger.error("Failed to start Kafka producer", error=str(e))
            raise CommentServiceException("KAFKA_PRODUCER_START_FAILED", str(e))

    async def stop(self):
        """Stop the Kafka producer."""
        if self.producer:
            self.producer.flush()
            self.producer.close()
            self.producer = None
            self.logger.info("Kafka producer stopped")

    async def send_notification(self, message: CommentReplyMessage) -> None:
        """Publish one notification, keyed by recipient."""
        if not self.producer:
            raise CommentServiceException("KAFKA_PRODUCER_NOT_STARTED", "Producer not started")

        try:
            future = self.producer.send(
                topic=self.topic,
                value=message.to_event(),
                key=message.recipient.username,
                headers=[("event_type", message.event_type.encode('utf-8'))]
            )

            # KafkaProducer futures block; wait for the ack off the event loop
            record_metadata = await asyncio.to_thread(future.get, timeout=10)

            self.logger.debug(
                "Notification published",
                topic=self.topic,
                recipient=message.recipient.username,
                partition=record_metadata.partition,
                offset=record_metadata.offset
            )

        except KafkaError as e:
            self.logger.error("Kafka error publishing notification", topic=self.topic, error=str(e))
            raise ExternalServiceError("kafka", str(e))

    async def health_check(self) -> bool:
        """Return True when the producer is connected to the cluster."""
        return bool(self.producer and self.producer.bootstrap_connected())
