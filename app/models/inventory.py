from tortoise import fields, models


class InventoryItem(models.Model):
    id = fields.IntField(primary_key=True)
    # One stock record per catalog product
    product_id = fields.BigIntField(unique=True)
    quantity_available = fields.IntField(default=0)
    quantity_reserved = fields.IntField(default=0)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "inventory_items"

    def __str__(self):
        return (
            f"InventoryItem(product_id={self.product_id}, available={self.quantity_available}, "
            f"reserved={self.quantity_reserved})"
        )
