import logging
from tortoise.transactions import in_transaction
from app.core.exceptions import DuplicateEventError
from app.events.dedup import ClaimResult, try_claim
from app.models.order import Order, OrderStatus
from app.models.processed_event import ProcessedInventoryEvent
from app.schemas.events import StockReservationFailedEvent, StockReservedEvent
from uuid import UUID

log = logging.getLogger(__name__)


async def _project_status(order_id: UUID, event_type: str, new_status: OrderStatus) -> bool:
    """
    Moves a PENDING order to ``new_status`` exactly once per (order, event type).
    Returns True when the order status was changed.
    """
    try:
        async with in_transaction() as conn:
            # Idempotency: (order_id, event_type) is unique
            claim = await try_claim(ProcessedInventoryEvent, conn, order_id=order_id, event_type=event_type)
            if claim is ClaimResult.ALREADY_CLAIMED:
                raise DuplicateEventError(f"{event_type} for order {order_id}")

            order = await Order.get_or_none(id=order_id).using_db(conn)
            if not order:
                # Not retried: the event counts as handled
                log.warning(f"Order ID: {order_id} not found. Cannot apply {event_type}.")
                return False

            # Only the initial PENDING state may move; anything else is already decided
            if order.status != OrderStatus.PENDING:
                log.warning(
                    f"Order ID: {order_id} is not in PENDING status (current: {order.status.value}). "
                    "Skipping status update."
                )
                return False

            order.status = new_status
            await order.save(update_fields=['status', 'updated_at'], using_db=conn)
            log.info(f"Status UPDATE: Order {order_id} moved to {new_status.value}.")
            return True
    except DuplicateEventError:
        log.warning(
            f"{event_type} for Order ID: {order_id} has already been processed or is being processed "
            "concurrently. Skipping."
        )
        return False


async def handle_stock_reserved(event: StockReservedEvent) -> bool:
    """Consumer logic for StockReservedEvent. Moves the Order from PENDING to CONFIRMED."""
    log.info(f"Received StockReservedEvent for Order ID: {event.order_id}")
    return await _project_status(event.order_id, event.event_type, OrderStatus.CONFIRMED)


async def handle_stock_reservation_failed(event: StockReservationFailedEvent) -> bool:
    """Consumer logic for StockReservationFailedEvent. Moves the Order from PENDING to FAILED."""
    log.info(f"Received StockReservationFailedEvent for Order ID: {event.order_id}. Reason: {event.reason}")
    return await _project_status(event.order_id, event.event_type, OrderStatus.FAILED)
