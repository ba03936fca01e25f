import argparse
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Union

from aiokafka import AIOKafkaConsumer, TopicPartition

from app.consumers.inventory_consumer import handle_order_created
from app.consumers.order_status_consumer import handle_stock_reservation_failed, handle_stock_reserved
from app.core.config import (
    CONSUMER_RETRY_DELAY,
    INVENTORY_CONSUMER_GROUP,
    KAFKA_BOOTSTRAP_SERVERS,
    ORDER_CONSUMER_GROUP,
    ORDER_CREATED_TOPIC,
    STOCK_RESERVATION_FAILED_TOPIC,
    STOCK_RESERVED_TOPIC,
)
from app.core.db import close_db, init_db
from app.core.exceptions import MalformedPayloadError
from app.core.logging_config import configure_logging
from app.schemas.events import TOPIC_EVENT_TYPES, SagaEvent, deserialize_event

log = logging.getLogger(__name__)

Handler = Callable[[SagaEvent], Awaitable[object]]

# One callback per event type per participant
INVENTORY_HANDLERS: Dict[str, Handler] = {
    ORDER_CREATED_TOPIC: handle_order_created,
}

ORDER_HANDLERS: Dict[str, Handler] = {
    STOCK_RESERVED_TOPIC: handle_stock_reserved,
    STOCK_RESERVATION_FAILED_TOPIC: handle_stock_reservation_failed,
}


async def dispatch(handlers: Dict[str, Handler], topic: str, value: Union[str, bytes]) -> bool:
    """
    Routes a raw broker record to its handler.
    Returns False when no handler is registered for the topic.
    """
    handler = handlers.get(topic)
    if handler is None:
        log.warning(f"WARNING: No handler found for topic: {topic}")
        return False

    event_type = TOPIC_EVENT_TYPES.get(topic, topic)
    event = deserialize_event(event_type, value)
    await handler(event)
    return True


class KafkaEventListener:
    """Consumes saga topics with manual offset commits (at-least-once)."""

    def __init__(
        self,
        handlers: Dict[str, Handler],
        group_id: str,
        bootstrap_servers: str = KAFKA_BOOTSTRAP_SERVERS,
        retry_delay: float = CONSUMER_RETRY_DELAY,
    ):
        self.handlers = handlers
        self.retry_delay = retry_delay
        self._consumer = AIOKafkaConsumer(
            *handlers.keys(),
            bootstrap_servers=bootstrap_servers,
            group_id=group_id,
            enable_auto_commit=False,
            auto_offset_reset="earliest",
        )

    async def run(self):
        await self._consumer.start()
        log.info(f"Kafka Consumer started on topics: {list(self.handlers)}")
        try:
            async for message in self._consumer:
                await self.handle_message(message)
        finally:
            await self._consumer.stop()
            log.info("Kafka Consumer stopped")

    async def handle_message(self, message):
        try:
            await dispatch(self.handlers, message.topic, message.value)
        except MalformedPayloadError as e:
            # Redelivery cannot fix a bad payload
            log.error(f"Discarding malformed message at {message.topic}[{message.partition}]@{message.offset}: {e}")
        except Exception:
            log.exception(
                f"Error handling message at {message.topic}[{message.partition}]@{message.offset}; "
                "it will be redelivered."
            )
            self._consumer.seek(TopicPartition(message.topic, message.partition), message.offset)
            await asyncio.sleep(self.retry_delay)
            return
        await self._consumer.commit()


async def main(role: str):
    configure_logging()
    await init_db()
    if role == "inventory":
        listener = KafkaEventListener(INVENTORY_HANDLERS, INVENTORY_CONSUMER_GROUP)
    else:
        listener = KafkaEventListener(ORDER_HANDLERS, ORDER_CONSUMER_GROUP)
    try:
        await listener.run()
    finally:
        await close_db()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run a saga event consumer.")
    parser.add_argument("role", choices=["inventory", "orders"])
    args = parser.parse_args()
    try:
        asyncio.run(main(args.role))
    except KeyboardInterrupt:
        log.info("Consumer service stopped.")
