import logging
from fastapi import APIRouter, HTTPException, status
from app.core.exceptions import InsufficientStockError, InventoryItemNotFoundError
from app.models.inventory import InventoryItem
from app.schemas.inventory import InventoryResponse, StockSetRequest, StockUpdateRequest
from app.schemas.response import SuccessResponse
from app.services.inventory_service import get_inventory, initialize_stock, update_stock

log = logging.getLogger(__name__)

router = APIRouter()


def _to_response(item: InventoryItem) -> dict:
    return InventoryResponse(
        product_id=item.product_id,
        quantity_available=item.quantity_available,
        quantity_reserved=item.quantity_reserved,
        updated_at=str(item.updated_at)
    ).model_dump()


@router.put("/{product_id}/set-stock", response_model=SuccessResponse)
async def set_product_stock(product_id: int, request: StockSetRequest):
    """Sets the available stock level directly (initial setup or correction)."""
    item = await initialize_stock(product_id, request.quantity)
    return SuccessResponse(data=_to_response(item))


@router.put("/{product_id}/stock", response_model=SuccessResponse)
async def update_product_stock(product_id: int, request: StockUpdateRequest):
    """Adds or subtracts available stock."""
    try:
        item = await update_stock(product_id, request.quantity_change)
    except InventoryItemNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InsufficientStockError as e:
        log.error(f"Error updating stock for product {product_id}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return SuccessResponse(data=_to_response(item))


@router.get("/{product_id}/stock", response_model=SuccessResponse)
async def get_product_stock(product_id: int):
    """Fetches available and reserved stock for a product."""
    try:
        item = await get_inventory(product_id)
    except InventoryItemNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return SuccessResponse(data=_to_response(item))
