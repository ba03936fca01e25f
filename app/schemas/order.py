from pydantic import BaseModel, Field
from typing import List
import uuid
from decimal import Decimal
from app.models.order import OrderStatus


class OrderItemRequest(BaseModel):
    """Schema for a single pre-priced line in the order request."""
    product_id: int
    product_name: str = Field(..., min_length=1)
    unit_price: Decimal = Field(..., gt=0)
    quantity: int = Field(..., gt=0)

class OrderRequest(BaseModel):
    """Schema for the full order placement request body."""
    customer_id: int
    items: List[OrderItemRequest]

class OrderPlacementResponse(BaseModel):
    """Response schema for a newly placed order (202 Accepted)."""
    order_id: uuid.UUID
    status: OrderStatus
    total_amount: Decimal
    message: str

class OrderItemResponse(BaseModel):
    """Schema for an item inside the detailed order response."""
    product_id: int
    product_name: str
    quantity: int
    unit_price: str  # Use string for Decimal type serialization
    subtotal: str

class OrderDetailResponse(BaseModel):
    """Schema for fetching detailed order information."""
    id: uuid.UUID
    customer_id: int
    status: OrderStatus
    total_amount: Decimal
    items: List[OrderItemResponse]
    order_date: str
