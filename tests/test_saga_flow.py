"""End-to-end saga: order -> outbox -> relay -> inventory -> outbox -> relay -> order status."""
import pytest
from decimal import Decimal
from app.consumers.listener import INVENTORY_HANDLERS, ORDER_HANDLERS, dispatch
from app.consumers.outbox_relayer import process_outbox_messages
from app.models.inventory import InventoryItem
from app.models.order import Order, OrderStatus
from app.models.outbox import OutboxMessage
from app.schemas.events import serialize_event
from app.services.order_service import OrderLine, place_order


async def deliver(publisher, handlers, times=1):
    """Feeds everything published so far to the handlers, as a broker would (possibly repeatedly)."""
    sent, publisher.sent = publisher.sent, []
    for _ in range(times):
        for topic, _key, event in sent:
            await dispatch(handlers, topic, serialize_event(event).encode("utf-8"))


async def run_saga(publisher, times=1):
    await process_outbox_messages(publisher)
    await deliver(publisher, INVENTORY_HANDLERS, times)
    await process_outbox_messages(publisher)
    await deliver(publisher, ORDER_HANDLERS, times)


@pytest.mark.asyncio
async def test_order_is_confirmed_when_stock_is_available(db, publisher, make_stock):
    await make_stock(product_id=1, available=10)
    order = await place_order(1, [OrderLine(1, 4, Decimal("2.50"), "Cable")])

    await run_saga(publisher)

    assert (await Order.get(id=order.id)).status == OrderStatus.CONFIRMED
    item = await InventoryItem.get(product_id=1)
    assert (item.quantity_available, item.quantity_reserved) == (6, 4)
    assert await OutboxMessage.all().count() == 0


@pytest.mark.asyncio
async def test_order_fails_when_stock_is_short(db, publisher, make_stock):
    await make_stock(product_id=1, available=3)
    order = await place_order(1, [OrderLine(1, 5, Decimal("2.50"), "Cable")])

    await run_saga(publisher)

    assert (await Order.get(id=order.id)).status == OrderStatus.FAILED
    item = await InventoryItem.get(product_id=1)
    assert (item.quantity_available, item.quantity_reserved) == (3, 0)


@pytest.mark.asyncio
async def test_duplicated_deliveries_apply_each_effect_once(db, publisher, make_stock):
    await make_stock(product_id=1, available=10)
    order = await place_order(1, [OrderLine(1, 4, Decimal("2.50"), "Cable")])

    await run_saga(publisher, times=3)

    assert (await Order.get(id=order.id)).status == OrderStatus.CONFIRMED
    item = await InventoryItem.get(product_id=1)
    assert (item.quantity_available, item.quantity_reserved) == (6, 4)
    assert await OutboxMessage.all().count() == 0
