from enum import Enum
from tortoise import fields, models
import uuid


class OrderStatus(str, Enum):
    PENDING = "PENDING"  # Created, waiting for the inventory outcome
    CONFIRMED = "CONFIRMED"  # Stock reserved
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"  # Stock reservation failed


class Order(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    customer_id = fields.BigIntField()
    order_date = fields.DatetimeField()
    status = fields.CharEnumField(OrderStatus, default=OrderStatus.PENDING)
    total_amount = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "customer_orders"
        indexes = [
            ("status",),                 # Status-based filtering
            ("customer_id",),            # Customer order history
            ("status", "order_date"),    # Composite: status with time
        ]


class OrderItem(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    order = fields.ForeignKeyField("models.Order", related_name="items")
    product_id = fields.BigIntField()
    # Name and price are snapshots taken when the order was placed
    product_name = fields.CharField(max_length=255)
    unit_price = fields.DecimalField(max_digits=12, decimal_places=2)
    quantity = fields.IntField()
    subtotal = fields.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        table = "order_items"
        indexes = [
            ("order_id",),
            ("product_id",),
        ]
