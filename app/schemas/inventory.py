from pydantic import BaseModel, Field


class InventoryResponse(BaseModel):
    """Schema for fetching inventory stock."""
    product_id: int
    quantity_available: int
    quantity_reserved: int
    updated_at: str

class StockSetRequest(BaseModel):
    quantity: int = Field(..., ge=0, description="Absolute available quantity to set.")

class StockUpdateRequest(BaseModel):
    quantity_change: int = Field(..., description="Signed change applied to available stock (e.g. -1).")
