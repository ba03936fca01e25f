from tortoise import fields, models
import uuid


class OutboxMessage(models.Model):
    """
    The Outbox table stores events atomically with the database transaction.
    A row exists only while its event has not been confirmed-published; the
    relayer deletes it after a successful send. Rows are never updated.
    """
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    aggregate_type = fields.CharField(max_length=64) # e.g., 'Order', 'StockReservation'
    aggregate_id = fields.CharField(max_length=64) # ID of the entity that generated the event
    event_type = fields.CharField(max_length=128) # e.g., 'OrderCreatedEvent'
    payload = fields.TextField() # JSON text of the event
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "outbox_messages"
        indexes = [
            ("created_at",),  # Relayer reads oldest first
        ]


class OutboxDeadLetter(models.Model):
    """Outbox rows whose payload could not be deserialized, moved aside by the relayer."""
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    outbox_message_id = fields.UUIDField(unique=True)
    aggregate_type = fields.CharField(max_length=64)
    aggregate_id = fields.CharField(max_length=64)
    event_type = fields.CharField(max_length=128)
    payload = fields.TextField()
    error = fields.TextField()
    created_at = fields.DatetimeField()
    quarantined_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "outbox_dead_letters"
