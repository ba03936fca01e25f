# app/models/__init__.py
from .inventory import InventoryItem
from .order import Order, OrderItem, OrderStatus
from .outbox import OutboxMessage, OutboxDeadLetter
from .processed_event import ProcessedOrderEvent, ProcessedInventoryEvent

# Export all models
__all__ = [
    "InventoryItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OutboxMessage",
    "OutboxDeadLetter",
    "ProcessedOrderEvent",
    "ProcessedInventoryEvent",
]
