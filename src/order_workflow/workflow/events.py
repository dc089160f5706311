"""Order domain events.

Events are immutable and validated on construction. `parse_event` is the
boundary entry point for raw payloads (dicts or JSON strings); the state
machine itself never validates.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


class InvalidEventError(ValueError):
    """Raised when a raw payload is not one of the known order events."""


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_json(self) -> dict[str, object]:
        return self.model_dump(mode="json")


class ItemAdded(_Event):
    type: Literal["ITEM_ADDED"] = "ITEM_ADDED"
    item: str = Field(min_length=1)
    quantity: int = Field(ge=0)


class ItemRemoved(_Event):
    type: Literal["ITEM_REMOVED"] = "ITEM_REMOVED"
    item: str = Field(min_length=1)


class OrderSubmitted(_Event):
    type: Literal["ORDER_SUBMITTED"] = "ORDER_SUBMITTED"


class PaymentReceived(_Event):
    type: Literal["PAYMENT_RECEIVED"] = "PAYMENT_RECEIVED"


class OrderShipped(_Event):
    type: Literal["ORDER_SHIPPED"] = "ORDER_SHIPPED"


OrderEvent = Annotated[
    ItemAdded | ItemRemoved | OrderSubmitted | PaymentReceived | OrderShipped,
    Field(discriminator="type"),
]

CART_EVENT_TYPES: frozenset[str] = frozenset({"ITEM_ADDED", "ITEM_REMOVED"})
LIFECYCLE_EVENT_TYPES: frozenset[str] = frozenset(
    {"ORDER_SUBMITTED", "PAYMENT_RECEIVED", "ORDER_SHIPPED"}
)

_EVENT_ADAPTER: TypeAdapter[OrderEvent] = TypeAdapter(OrderEvent)


def parse_event(raw: Mapping[str, object] | str | bytes) -> OrderEvent:
    """Validate a raw payload into an order event.

    Args:
        raw: A mapping such as ``{"type": "ITEM_ADDED", "item": "book", "quantity": 2}``
            or the same object encoded as JSON.

    Returns:
        The matching immutable event model.

    Raises:
        InvalidEventError: If the payload is not a well-formed order event.
    """
    if not isinstance(raw, str | bytes | Mapping):
        raise InvalidEventError(
            f"Invalid order event: expected an object, got {type(raw).__name__}"
        )
    try:
        if isinstance(raw, str | bytes):
            return _EVENT_ADAPTER.validate_json(raw)
        return _EVENT_ADAPTER.validate_python(dict(raw))
    except ValidationError as e:
        raise InvalidEventError(f"Invalid order event: {e}") from e
