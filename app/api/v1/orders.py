import logging
from fastapi import APIRouter, HTTPException, status
from app.schemas.response import SuccessResponse
from app.services.order_service import OrderLine, place_order, get_order_by_id
from app.schemas.order import OrderRequest, OrderPlacementResponse, OrderDetailResponse, OrderItemResponse
from uuid import UUID

router = APIRouter()
log = logging.getLogger(__name__)


@router.post("/", status_code=status.HTTP_202_ACCEPTED, response_model=SuccessResponse)
async def create_order_endpoint(request_data: OrderRequest):
    """
    Places a new order. Returns 202 Accepted because stock reservation is async.
    """
    if not request_data.items:
        raise HTTPException(status_code=400, detail="Order must contain items.")

    lines = [
        OrderLine(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            product_name=item.product_name,
        )
        for item in request_data.items
    ]
    # Serialization faults propagate to the generic handler (500): nothing was committed
    order = await place_order(customer_id=request_data.customer_id, lines=lines)
    log.info(f"Order {order.id} placed successfully for customer {request_data.customer_id}.")
    data = OrderPlacementResponse(
        order_id=order.id,
        status=order.status,
        total_amount=order.total_amount,
        message="Order Accepted and is being processed."
    ).model_dump()
    return SuccessResponse(data=data)


@router.get("/{order_id}", response_model=SuccessResponse)
async def get_order_endpoint(order_id: UUID):
    """Fetches details for a specific order."""
    order = await get_order_by_id(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    items = [
        OrderItemResponse(
            product_id=i.product_id,
            product_name=i.product_name,
            quantity=i.quantity,
            unit_price=str(i.unit_price),
            subtotal=str(i.subtotal),
        )
        for i in order.items
    ]
    data = OrderDetailResponse(
        id=order.id,
        customer_id=order.customer_id,
        status=order.status,
        total_amount=order.total_amount,
        items=items,
        order_date=str(order.order_date)
    ).model_dump()
    return SuccessResponse(data=data)
