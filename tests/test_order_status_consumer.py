import pytest
from decimal import Decimal
from uuid import uuid4
from tortoise import timezone
from app.consumers.order_status_consumer import handle_stock_reservation_failed, handle_stock_reserved
from app.models.order import Order, OrderStatus
from app.models.processed_event import ProcessedInventoryEvent
from app.schemas.events import FailedItem, ReservedItem, StockReservationFailedEvent, StockReservedEvent


async def make_order(status=OrderStatus.PENDING):
    return await Order.create(
        customer_id=1, order_date=timezone.now(), status=status, total_amount=Decimal("12.00")
    )


def reserved_event(order_id):
    return StockReservedEvent(
        order_id=order_id, customer_id=1, reserved_items=[ReservedItem(product_id=1, quantity_reserved=1)]
    )


def failed_event(order_id):
    return StockReservationFailedEvent(
        order_id=order_id,
        customer_id=1,
        reason="Insufficient stock",
        failed_items=[FailedItem(product_id=1, requested_quantity=5, available_quantity=3)],
    )


@pytest.mark.asyncio
async def test_stock_reserved_confirms_pending_order(db):
    order = await make_order()

    assert await handle_stock_reserved(reserved_event(order.id)) is True

    assert (await Order.get(id=order.id)).status == OrderStatus.CONFIRMED


@pytest.mark.asyncio
async def test_stock_reservation_failed_fails_pending_order(db):
    order = await make_order()

    assert await handle_stock_reservation_failed(failed_event(order.id)) is True

    assert (await Order.get(id=order.id)).status == OrderStatus.FAILED


@pytest.mark.asyncio
async def test_stock_reserved_after_failure_keeps_order_failed(db):
    order = await make_order()
    await handle_stock_reservation_failed(failed_event(order.id))

    assert await handle_stock_reserved(reserved_event(order.id)) is False

    assert (await Order.get(id=order.id)).status == OrderStatus.FAILED


@pytest.mark.asyncio
async def test_duplicate_delivery_is_a_no_op(db):
    order = await make_order()
    event = reserved_event(order.id)

    await handle_stock_reserved(event)
    assert await handle_stock_reserved(event) is False

    assert (await Order.get(id=order.id)).status == OrderStatus.CONFIRMED
    assert await ProcessedInventoryEvent.filter(order_id=order.id).count() == 1


@pytest.mark.asyncio
async def test_missing_order_is_logged_and_considered_handled(db):
    order_id = uuid4()

    assert await handle_stock_reserved(reserved_event(order_id)) is False

    assert await Order.all().count() == 0
    # The claim stays: a redelivery is not retried
    assert await ProcessedInventoryEvent.filter(order_id=order_id, event_type="StockReservedEvent").exists()


@pytest.mark.asyncio
async def test_non_pending_order_is_left_untouched(db):
    order = await make_order(status=OrderStatus.CANCELLED)

    assert await handle_stock_reserved(reserved_event(order.id)) is False

    assert (await Order.get(id=order.id)).status == OrderStatus.CANCELLED
