import logging
from tortoise.transactions import in_transaction
from app.core.exceptions import DuplicateEventError
from app.events.dedup import ClaimResult, try_claim
from app.events.outbox_utility import create_outbox_message
from app.models.processed_event import ProcessedOrderEvent
from app.schemas.events import OrderCreatedEvent
from app.services.stock_reservation import ReservationResult, reserve_stock
from typing import Optional

log = logging.getLogger(__name__)


async def handle_order_created(event: OrderCreatedEvent) -> Optional[ReservationResult]:
    """
    Consumer logic for OrderCreatedEvent. Claims the order id, reserves stock
    and records the outcome event in the outbox, all in one transaction.

    Returns the reservation result, or None when the delivery was a duplicate.
    """
    order_id = event.order_id
    log.info(f"Received OrderCreatedEvent for Order ID: {order_id} by Customer ID: {event.customer_id}")

    try:
        async with in_transaction() as conn:
            # Idempotency: the unique order_id insert decides first delivery wins
            if await try_claim(ProcessedOrderEvent, conn, order_id=order_id) is ClaimResult.ALREADY_CLAIMED:
                raise DuplicateEventError(f"OrderCreatedEvent for order {order_id}")
            log.debug(f"Recorded Order ID: {order_id} as new for processing.")

            result = await reserve_stock(event, conn)

            # The outcome travels through the outbox so it can never be sent
            # for a reservation that did not commit.
            await create_outbox_message(
                aggregate_type="StockReservation",
                aggregate_id=order_id,
                event=result.to_event(event),
                conn=conn
            )
    except DuplicateEventError:
        log.warning(
            f"Order ID: {order_id} has already been processed or is being processed concurrently. "
            "Skipping stock reservation."
        )
        return None

    if result.succeeded:
        log.info(f"SUCCESS: Stock reserved for Order ID: {order_id}")
    else:
        log.warning(f"FAILURE: Stock reservation failed for Order ID: {order_id}")
    return result
