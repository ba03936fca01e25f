from tortoise import fields, models


class ProcessedOrderEvent(models.Model):
    """
    Inventory-side idempotency table. The unique order_id is the claim: the
    first OrderCreatedEvent delivery that inserts it wins.
    """
    id = fields.IntField(primary_key=True)
    order_id = fields.UUIDField(unique=True)
    processed_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "processed_order_events"


class ProcessedInventoryEvent(models.Model):
    """
    Order-side idempotency table, keyed by (order_id, event_type) so that a
    StockReservedEvent and a StockReservationFailedEvent for the same order
    are claimed independently.
    """
    id = fields.IntField(primary_key=True)
    order_id = fields.UUIDField()
    event_type = fields.CharField(max_length=128)
    processed_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "processed_inventory_events"
        unique_together = (("order_id", "event_type"),)
