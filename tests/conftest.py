"""Shared fixtures: an in-memory Tortoise database and fake broker publishers."""
from decimal import Decimal

import pytest
import pytest_asyncio
from tortoise import Tortoise

from app.core.db import MODELS_MODULES
from app.models.inventory import InventoryItem
from app.services.order_service import OrderLine


class RecordingPublisher:
    """Collects every published (topic, key, event) instead of talking to Kafka."""

    def __init__(self):
        self.sent = []

    async def publish(self, topic, key, event):
        self.sent.append((topic, key, event))

    def events(self, event_type=None):
        return [e for _, _, e in self.sent if event_type is None or e.event_type == event_type]


class FlakyPublisher(RecordingPublisher):
    """Raises ConnectionError while ``down`` is True, like an unreachable broker."""

    def __init__(self, down=True):
        super().__init__()
        self.down = down

    async def publish(self, topic, key, event):
        if self.down:
            raise ConnectionError("broker unreachable")
        await super().publish(topic, key, event)


@pytest_asyncio.fixture
async def db():
    """A fresh schema per test."""
    await Tortoise.init(db_url="sqlite://:memory:", modules={"models": MODELS_MODULES})
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def flaky_publisher():
    return FlakyPublisher()


@pytest.fixture
def make_stock():
    async def _make(product_id, available, reserved=0):
        return await InventoryItem.create(
            product_id=product_id, quantity_available=available, quantity_reserved=reserved
        )
    return _make


@pytest.fixture
def order_lines():
    return [
        OrderLine(product_id=1, quantity=2, unit_price=Decimal("10.00"), product_name="Keyboard"),
        OrderLine(product_id=2, quantity=1, unit_price=Decimal("5.50"), product_name="Mouse"),
    ]
