"""
Saga event contracts shared by the order and inventory participants.

Events are immutable pydantic models serialized as camelCase JSON, which is
the form stored in the outbox ``payload`` column and sent on the broker.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Type, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from app.core.config import (
    ORDER_CREATED_TOPIC,
    STOCK_RESERVATION_FAILED_TOPIC,
    STOCK_RESERVED_TOPIC,
)
from app.core.exceptions import MalformedPayloadError


def _now():
    return datetime.now(timezone.utc)


class SagaEvent(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    @property
    def event_type(self) -> str:
        return type(self).__name__


class OrderItemEvent(SagaEvent):
    product_id: int
    quantity: int = Field(..., gt=0)


class OrderCreatedEvent(SagaEvent):
    order_id: UUID
    customer_id: int
    order_date: datetime
    total_amount: Decimal
    items: List[OrderItemEvent]


class ReservedItem(SagaEvent):
    product_id: int
    quantity_reserved: int


class StockReservedEvent(SagaEvent):
    order_id: UUID
    customer_id: int
    timestamp: datetime = Field(default_factory=_now)
    reserved_items: List[ReservedItem]


class FailedItem(SagaEvent):
    product_id: int
    requested_quantity: int
    available_quantity: int


class StockReservationFailedEvent(SagaEvent):
    order_id: UUID
    customer_id: int
    timestamp: datetime = Field(default_factory=_now)
    reason: str
    failed_items: List[FailedItem]


# eventType (as stored in the outbox) -> concrete event class
EVENT_TYPES: Dict[str, Type[SagaEvent]] = {
    cls.__name__: cls
    for cls in (OrderCreatedEvent, StockReservedEvent, StockReservationFailedEvent)
}

# eventType -> fixed broker destination
EVENT_TOPICS: Dict[str, str] = {
    "OrderCreatedEvent": ORDER_CREATED_TOPIC,
    "StockReservedEvent": STOCK_RESERVED_TOPIC,
    "StockReservationFailedEvent": STOCK_RESERVATION_FAILED_TOPIC,
}

TOPIC_EVENT_TYPES: Dict[str, str] = {topic: event_type for event_type, topic in EVENT_TOPICS.items()}


def serialize_event(event: SagaEvent) -> str:
    return event.model_dump_json(by_alias=True)


def deserialize_event(event_type: str, payload: Union[str, bytes]) -> SagaEvent:
    """Rebuilds the concrete event for ``event_type`` or raises MalformedPayloadError."""
    event_cls = EVENT_TYPES.get(event_type)
    if event_cls is None:
        raise MalformedPayloadError(event_type, "unknown event type")
    try:
        return event_cls.model_validate_json(payload)
    except ValidationError as e:
        raise MalformedPayloadError(event_type, str(e)) from e


def topic_for(event_type: str) -> str:
    try:
        return EVENT_TOPICS[event_type]
    except KeyError:
        raise MalformedPayloadError(event_type, "no destination configured") from None
