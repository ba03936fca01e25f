"""Broker adapter: publishes saga events to Kafka with aiokafka."""
import logging
from typing import Any, Optional, Protocol

from aiokafka import AIOKafkaProducer

from app.core.config import KAFKA_BOOTSTRAP_SERVERS
from app.schemas.events import SagaEvent, serialize_event

log = logging.getLogger(__name__)


class EventPublisher(Protocol):
    async def publish(self, topic: str, key: Any, event: SagaEvent) -> None:
        ...


class KafkaEventPublisher:
    """
    Lazily started Kafka producer. ``publish`` only returns once the broker
    acknowledged the record, so callers may treat a normal return as a
    confirmed publish and any exception as "not sent".
    """

    def __init__(self, bootstrap_servers: str = KAFKA_BOOTSTRAP_SERVERS):
        self._bootstrap_servers = bootstrap_servers
        self._producer: Optional[AIOKafkaProducer] = None

    async def _get_producer(self) -> AIOKafkaProducer:
        if self._producer is None:
            producer = AIOKafkaProducer(
                bootstrap_servers=self._bootstrap_servers,
                acks="all",
            )
            try:
                await producer.start()
            except Exception:
                # Leave no half-started client behind; next call retries
                await producer.stop()
                raise
            self._producer = producer
            log.info("Kafka Producer started")
        return self._producer

    async def publish(self, topic: str, key: Any, event: SagaEvent) -> None:
        producer = await self._get_producer()
        await producer.send_and_wait(
            topic,
            key=str(key).encode("utf-8"),
            value=serialize_event(event).encode("utf-8"),
            headers=[("eventType", event.event_type.encode("utf-8"))],
        )
        log.debug(f"Published {event.event_type} with key {key} to {topic}")

    async def close(self) -> None:
        if self._producer is not None:
            await self._producer.stop()
            self._producer = None
            log.info("Kafka Producer stopped")
