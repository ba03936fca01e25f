import logging
from typing import Any, Awaitable, Callable, TypeVar
from tortoise.transactions import in_transaction
from app.core.exceptions import OutboxSerializationError
from app.models.outbox import OutboxMessage
from app.schemas.events import SagaEvent, serialize_event

log = logging.getLogger(__name__)

T = TypeVar("T")


async def create_outbox_message(
    aggregate_type: str,
    aggregate_id: Any,
    event: SagaEvent,
    conn: Any = None
) -> OutboxMessage:
    """
    Serializes ``event`` and inserts it as a new Outbox row using the provided
    database connection (transaction).

    CRITICAL: Passing 'conn' ensures the row is created atomically with the
    business data. A serialization failure raises OutboxSerializationError,
    which aborts the surrounding transaction.
    """
    try:
        payload = serialize_event(event)
    except (TypeError, ValueError) as e:
        log.error(f"Failed to serialize {event.event_type} for {aggregate_type} {aggregate_id}: {e}")
        raise OutboxSerializationError(event.event_type, e) from e

    message = await OutboxMessage.create(
        aggregate_type=aggregate_type,
        aggregate_id=str(aggregate_id),
        event_type=event.event_type,
        payload=payload,
        using_db=conn
    )
    log.info(f"{event.event_type} added to outbox for {aggregate_type} {aggregate_id}")
    return message


async def write_with_outbox(
    aggregate_type: str,
    persist: Callable[[Any], Awaitable[T]],
    build_event: Callable[[T], SagaEvent],
) -> T:
    """
    Runs ``persist(conn)`` and records the event built from its result in one
    local transaction. Either both commit or neither does.
    """
    async with in_transaction() as conn:
        aggregate = await persist(conn)
        await create_outbox_message(
            aggregate_type=aggregate_type,
            aggregate_id=aggregate.id,
            event=build_event(aggregate),
            conn=conn
        )
    return aggregate
