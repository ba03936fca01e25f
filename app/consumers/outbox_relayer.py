import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from tortoise.transactions import in_transaction

from app.core.config import RELAY_BATCH_SIZE, RELAY_INTERVAL, RELAY_QUARANTINE_MALFORMED
from app.core.db import close_db, init_db
from app.core.exceptions import MalformedPayloadError
from app.core.logging_config import configure_logging
from app.events.publisher import EventPublisher, KafkaEventPublisher
from app.models.outbox import OutboxDeadLetter, OutboxMessage
from app.schemas.events import deserialize_event, topic_for

log = logging.getLogger(__name__)


@dataclass
class RelayResult:
    published: List[OutboxMessage] = field(default_factory=list)
    retained: List[OutboxMessage] = field(default_factory=list)
    malformed: List[Tuple[OutboxMessage, str]] = field(default_factory=list)


async def relay_batch(messages: Sequence[OutboxMessage], publisher: EventPublisher) -> RelayResult:
    """
    Publishes each pending row independently and sorts it into published,
    retained (send failed, try again next cycle) or malformed (payload cannot
    be rebuilt). Does not touch the database.
    """
    result = RelayResult()
    for message in messages:
        try:
            event = deserialize_event(message.event_type, message.payload)
            topic = topic_for(message.event_type)
        except MalformedPayloadError as e:
            log.error(f"Failed to deserialize outbox message payload for ID: {message.id}. Skipping. {e}")
            result.malformed.append((message, str(e)))
            continue

        try:
            await publisher.publish(topic, message.aggregate_id, event)
        except Exception:
            # Broker unreachable, timeout, ... the row stays for the next cycle
            log.exception(f"Failed to send outbox message with ID: {message.id}. Will retry later.")
            result.retained.append(message)
            continue

        log.info(
            f"Successfully published event '{message.event_type}' for aggregateId "
            f"'{message.aggregate_id}' to {topic}."
        )
        result.published.append(message)
    return result


async def quarantine_messages(malformed: Sequence[Tuple[OutboxMessage, str]]) -> None:
    """Moves malformed rows into the dead-letter table."""
    async with in_transaction() as conn:
        for message, error in malformed:
            await OutboxDeadLetter.create(
                outbox_message_id=message.id,
                aggregate_type=message.aggregate_type,
                aggregate_id=message.aggregate_id,
                event_type=message.event_type,
                payload=message.payload,
                error=error,
                created_at=message.created_at,
                using_db=conn
            )
        await OutboxMessage.filter(id__in=[message.id for message, _ in malformed]).using_db(conn).delete()
    log.warning(f"Quarantined {len(malformed)} malformed outbox message(s).")


async def process_outbox_messages(
    publisher: EventPublisher,
    batch_size: int = RELAY_BATCH_SIZE,
    quarantine_malformed: bool = RELAY_QUARANTINE_MALFORMED,
) -> RelayResult:
    """One relay cycle over the oldest pending outbox rows."""
    messages = await OutboxMessage.all().order_by("created_at").limit(batch_size)

    if not messages:
        return RelayResult()

    log.info(f"Processing {len(messages)} outbox messages...")
    result = await relay_batch(messages, publisher)

    # Delete only after a confirmed publish. A crash before this point means
    # the rows are sent again; consumers deduplicate.
    if result.published:
        deleted = await OutboxMessage.filter(id__in=[m.id for m in result.published]).delete()
        log.debug(f"Deleted {deleted} published outbox message(s).")

    if result.malformed and quarantine_malformed:
        await quarantine_messages(result.malformed)

    return result


async def start_outbox_relayer(publisher: EventPublisher, interval: float = RELAY_INTERVAL):
    """Main loop for the relayer. One cycle at a time, fixed delay between cycles."""
    log.info("--- Outbox Relayer Started ---")

    while True:
        try:
            await process_outbox_messages(publisher)
        except Exception:
            log.exception("Relayer cycle failed; retrying on the next interval.")

        await asyncio.sleep(interval)


async def main(publisher: Optional[KafkaEventPublisher] = None):
    configure_logging()
    await init_db()
    publisher = publisher or KafkaEventPublisher()
    try:
        await start_outbox_relayer(publisher)
    finally:
        await publisher.close()
        await close_db()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        log.info("Relayer service stopped.")
