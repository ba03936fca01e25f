"""
Inventory-side saga step: all-or-nothing stock reservation for one order.

Planning is separated from applying. ``plan_reservation`` decides the outcome
for every line without touching the database, and stock is only mutated when
the plan has no failed lines, so a failed order never leaves partial
reservations behind.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Union

from app.models.inventory import InventoryItem
from app.schemas.events import (
    FailedItem,
    OrderCreatedEvent,
    OrderItemEvent,
    ReservedItem,
    StockReservationFailedEvent,
    StockReservedEvent,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReservationResult:
    reserved_items: List[ReservedItem] = field(default_factory=list)
    failed_items: List[FailedItem] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failed_items

    def to_event(self, event: OrderCreatedEvent) -> Union[StockReservedEvent, StockReservationFailedEvent]:
        if self.succeeded:
            return StockReservedEvent(
                order_id=event.order_id,
                customer_id=event.customer_id,
                reserved_items=self.reserved_items,
            )
        return StockReservationFailedEvent(
            order_id=event.order_id,
            customer_id=event.customer_id,
            reason=f"Insufficient stock for some items in order {event.order_id}",
            failed_items=self.failed_items,
        )


def plan_reservation(items: Iterable[OrderItemEvent], inventory: Dict[int, InventoryItem]) -> ReservationResult:
    """
    Evaluates every line against the given stock. Lines for the same product
    draw on one running balance.
    """
    remaining = {product_id: inv.quantity_available for product_id, inv in inventory.items()}
    reserved: List[ReservedItem] = []
    failed: List[FailedItem] = []

    for item in items:
        available = remaining.get(item.product_id)
        if available is None:
            log.warning(f"Product ID {item.product_id} not found in inventory. Cannot reserve.")
            failed.append(FailedItem(product_id=item.product_id, requested_quantity=item.quantity, available_quantity=0))
        elif available < item.quantity:
            log.warning(
                f"Insufficient stock for Product ID: {item.product_id}. "
                f"Available: {available}, Requested: {item.quantity}"
            )
            failed.append(
                FailedItem(product_id=item.product_id, requested_quantity=item.quantity, available_quantity=available)
            )
        else:
            remaining[item.product_id] = available - item.quantity
            reserved.append(ReservedItem(product_id=item.product_id, quantity_reserved=item.quantity))

    return ReservationResult(reserved_items=reserved, failed_items=failed)


async def apply_reservation(result: ReservationResult, inventory: Dict[int, InventoryItem], conn: Any) -> None:
    """Moves the planned units from available to reserved."""
    totals: Dict[int, int] = {}
    for item in result.reserved_items:
        totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity_reserved

    for product_id, quantity in totals.items():
        inv = inventory[product_id]
        inv.quantity_available -= quantity
        inv.quantity_reserved += quantity
        await inv.save(update_fields=['quantity_available', 'quantity_reserved', 'updated_at'], using_db=conn)


async def reserve_stock(event: OrderCreatedEvent, conn: Any) -> ReservationResult:
    """
    Reserves every line of ``event`` or none of them, inside the caller's
    transaction ``conn``.
    """
    log.info(f"Attempting to reserve stock for Order ID: {event.order_id}")
    product_ids = sorted({item.product_id for item in event.items})

    # CRITICAL: Lock rows so concurrent orders for the same product serialize.
    # Locking in product-id order keeps two multi-item orders from deadlocking.
    locked = await (
        InventoryItem.filter(product_id__in=product_ids)
        .order_by("product_id")
        .using_db(conn)
        .select_for_update()
    )
    inventory = {inv.product_id: inv for inv in locked}

    result = plan_reservation(event.items, inventory)
    if result.succeeded:
        await apply_reservation(result, inventory, conn)
        for item in result.reserved_items:
            log.info(
                f"Reserved {item.quantity_reserved} units of Product ID: {item.product_id} "
                f"for Order ID: {event.order_id}"
            )
    else:
        log.warning(
            f"Stock reservation failed for Order ID: {event.order_id}; "
            f"{len(result.failed_items)} item(s) could not be reserved"
        )
    return result
