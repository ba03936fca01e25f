import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4
from app.consumers.listener import KafkaEventListener, dispatch
from app.core.config import STOCK_RESERVED_TOPIC
from app.core.exceptions import MalformedPayloadError
from app.schemas.events import ReservedItem, StockReservedEvent, serialize_event


def reserved_payload(order_id):
    event = StockReservedEvent(
        order_id=order_id, customer_id=3, reserved_items=[ReservedItem(product_id=1, quantity_reserved=2)]
    )
    return serialize_event(event).encode("utf-8")


@pytest.mark.asyncio
async def test_dispatch_deserializes_and_routes_by_topic():
    handler = AsyncMock()
    order_id = uuid4()

    handled = await dispatch({STOCK_RESERVED_TOPIC: handler}, STOCK_RESERVED_TOPIC, reserved_payload(order_id))

    assert handled is True
    event = handler.await_args.args[0]
    assert isinstance(event, StockReservedEvent)
    assert event.order_id == order_id
    assert event.reserved_items[0].quantity_reserved == 2


@pytest.mark.asyncio
async def test_dispatch_ignores_topics_without_handler():
    assert await dispatch({}, "unrelated-topic", b"{}") is False


@pytest.mark.asyncio
async def test_dispatch_rejects_malformed_payload():
    handler = AsyncMock()

    with pytest.raises(MalformedPayloadError):
        await dispatch({STOCK_RESERVED_TOPIC: handler}, STOCK_RESERVED_TOPIC, b'{"orderId": 1}')

    handler.assert_not_awaited()


def make_listener(handler):
    consumer = MagicMock()
    consumer.commit = AsyncMock()
    with patch("app.consumers.listener.AIOKafkaConsumer", return_value=consumer):
        listener = KafkaEventListener({STOCK_RESERVED_TOPIC: handler}, "order-service", retry_delay=0)
    return listener, consumer


def record(value):
    return SimpleNamespace(topic=STOCK_RESERVED_TOPIC, partition=0, offset=17, value=value)


@pytest.mark.asyncio
async def test_handled_message_is_committed():
    listener, consumer = make_listener(AsyncMock())

    await listener.handle_message(record(reserved_payload(uuid4())))

    consumer.commit.assert_awaited_once()
    consumer.seek.assert_not_called()


@pytest.mark.asyncio
async def test_malformed_message_is_committed_and_skipped():
    handler = AsyncMock()
    listener, consumer = make_listener(handler)

    await listener.handle_message(record(b"not json"))

    handler.assert_not_awaited()
    consumer.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_failing_handler_rewinds_offset_for_redelivery():
    listener, consumer = make_listener(AsyncMock(side_effect=RuntimeError("database down")))

    await listener.handle_message(record(reserved_payload(uuid4())))

    consumer.commit.assert_not_awaited()
    partition, offset = consumer.seek.call_args.args
    assert (partition.topic, partition.partition, offset) == (STOCK_RESERVED_TOPIC, 0, 17)
