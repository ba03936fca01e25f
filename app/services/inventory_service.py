import logging
from tortoise.transactions import in_transaction
from app.core.exceptions import InsufficientStockError, InventoryItemNotFoundError
from app.models.inventory import InventoryItem

log = logging.getLogger(__name__)


async def initialize_stock(product_id: int, quantity: int) -> InventoryItem:
    """Sets available stock for a product, creating the record if needed. Clears reservations."""
    log.info(f"Initializing stock for productId: {product_id} with quantity: {quantity}")
    async with in_transaction() as conn:
        item = await InventoryItem.filter(product_id=product_id).using_db(conn).select_for_update().first()
        if item:
            item.quantity_available = quantity
            item.quantity_reserved = 0
            await item.save(using_db=conn)
            log.info(f"Updating existing stock for productId {product_id}: {item}")
        else:
            item = await InventoryItem.create(
                product_id=product_id, quantity_available=quantity, quantity_reserved=0, using_db=conn
            )
            log.info(f"Creating new stock for productId {product_id}: {item}")
    return item


async def update_stock(product_id: int, quantity_change: int) -> InventoryItem:
    """Adds (positive) or removes (negative) available units for a product."""
    log.info(f"Attempting to update stock for productId: {product_id} by quantity: {quantity_change}")
    async with in_transaction() as conn:
        item = await InventoryItem.filter(product_id=product_id).using_db(conn).select_for_update().first()
        if not item:
            raise InventoryItemNotFoundError(product_id)

        new_quantity = item.quantity_available + quantity_change
        if new_quantity < 0:
            raise InsufficientStockError(product_id, item.quantity_available, quantity_change)

        item.quantity_available = new_quantity
        await item.save(update_fields=['quantity_available', 'updated_at'], using_db=conn)
    log.info(f"Updated stock for productId {product_id}: New quantity: {new_quantity}")
    return item


async def get_inventory(product_id: int) -> InventoryItem:
    item = await InventoryItem.get_or_none(product_id=product_id)
    if not item:
        raise InventoryItemNotFoundError(product_id)
    return item
