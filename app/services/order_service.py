import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID
from tortoise import timezone
from app.events.outbox_utility import write_with_outbox
from app.models.order import Order, OrderItem, OrderStatus
from app.schemas.events import OrderCreatedEvent, OrderItemEvent

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderLine:
    """A pre-validated order line: price and name already come from the catalog."""
    product_id: int
    quantity: int
    unit_price: Decimal
    product_name: str


def build_order_created_event(order: Order, lines: List[OrderLine]) -> OrderCreatedEvent:
    return OrderCreatedEvent(
        order_id=order.id,
        customer_id=order.customer_id,
        order_date=order.order_date,
        total_amount=order.total_amount,
        items=[
            OrderItemEvent(product_id=line.product_id, quantity=line.quantity)
            for line in lines
        ],
    )


async def place_order(customer_id: int, lines: List[OrderLine]) -> Order:
    """
    FAST PATH: Creates the PENDING Order, its items and the OrderCreatedEvent
    outbox row atomically. Stock reservation happens later in the inventory
    consumer.
    """
    log.info(f"Creating new order for customerId: {customer_id}")

    async def persist(conn: Any) -> Order:
        # 1. Create the Order header
        order = await Order.create(
            customer_id=customer_id,
            order_date=timezone.now(),
            status=OrderStatus.PENDING,
            total_amount=Decimal("0"),
            using_db=conn
        )

        # 2. Create the Order Item lines with their price snapshot
        total = Decimal("0")
        for line in lines:
            subtotal = line.unit_price * line.quantity
            total += subtotal
            await OrderItem.create(
                order=order,
                product_id=line.product_id,
                product_name=line.product_name,
                unit_price=line.unit_price,
                quantity=line.quantity,
                subtotal=subtotal,
                using_db=conn
            )

        order.total_amount = total
        await order.save(update_fields=['total_amount', 'updated_at'], using_db=conn)
        return order

    # 3. ATOMIC EVENT: the outbox row commits with the order or not at all
    order = await write_with_outbox(
        "Order", persist, lambda saved: build_order_created_event(saved, lines)
    )
    log.info(f"Order created successfully with ID: {order.id}")
    return order


async def get_order_by_id(order_id: UUID) -> Optional[Order]:
    """Fetches order details with items."""
    return await Order.get_or_none(id=order_id).prefetch_related('items')
