class SagaError(Exception):
    """Base class for errors raised by the order/inventory saga."""


class OutboxSerializationError(SagaError):
    """An event could not be serialized into an outbox row. Fatal to the request."""

    def __init__(self, event_type: str, cause: Exception):
        self.event_type = event_type
        super().__init__(f"Failed to serialize {event_type}: {cause}")


class MalformedPayloadError(SagaError):
    """A stored or received payload cannot be turned back into a known event."""

    def __init__(self, event_type: str, detail: str):
        self.event_type = event_type
        self.detail = detail
        super().__init__(f"Malformed {event_type} payload: {detail}")


class DuplicateEventError(SagaError):
    """Raised inside a consumer transaction when the dedup key was already claimed.

    Never escapes a consumer: it only exists to roll back the empty transaction.
    """


class InventoryItemNotFoundError(ValueError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Inventory item not found for product ID: {product_id}")


class InsufficientStockError(ValueError):
    def __init__(self, product_id: int, available: int, change: int):
        self.product_id = product_id
        super().__init__(
            f"Insufficient stock for product {product_id}. Available: {available}, change: {change}"
        )
