from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any

from .events import ItemAdded, ItemRemoved, OrderEvent

logger = logging.getLogger(__name__)


class OrderState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    SHIPPING = "shipping"
    COMPLETED = "completed"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPING = "shipping"
    COMPLETED = "completed"


STATUS_BY_STATE: dict[OrderState, OrderStatus] = {
    OrderState.IDLE: OrderStatus.PENDING,
    OrderState.PROCESSING: OrderStatus.PROCESSING,
    OrderState.SHIPPING: OrderStatus.SHIPPING,
    OrderState.COMPLETED: OrderStatus.COMPLETED,
}

FINAL_STATES: frozenset[OrderState] = frozenset({OrderState.COMPLETED})


@dataclass(frozen=True, slots=True)
class OrderContext:
    """Cart contents and bookkeeping carried alongside the order state.

    Instances are never mutated. Every accepted transition builds a new
    context with fresh containers, so identity changes exactly when the
    content was replaced.
    """

    items: Mapping[str, int] = field(default_factory=dict)
    total: float = 0
    status: OrderStatus = OrderStatus.PENDING
    events: tuple[ItemAdded | ItemRemoved, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", MappingProxyType(dict(self.items)))
        object.__setattr__(self, "events", tuple(self.events))

    def to_json(self) -> dict[str, object]:
        return {
            "items": dict(self.items),
            "total": self.total,
            "status": self.status.value,
            "events": [e.to_json() for e in self.events],
        }


@dataclass(frozen=True, slots=True)
class OrderSnapshot:
    value: OrderState
    context: OrderContext

    def to_json(self) -> dict[str, object]:
        return {"value": self.value.value, "context": self.context.to_json()}


_Handler = Callable[[OrderContext, Any], tuple[OrderState, OrderContext]]


def _add_item(context: OrderContext, event: ItemAdded) -> tuple[OrderState, OrderContext]:
    items = dict(context.items)
    items[event.item] = items.get(event.item, 0) + event.quantity
    return OrderState.IDLE, replace(context, items=items, events=(*context.events, event))


def _remove_item(context: OrderContext, event: ItemRemoved) -> tuple[OrderState, OrderContext]:
    items = dict(context.items)
    items.pop(event.item, None)
    return OrderState.IDLE, replace(context, items=items, events=(*context.events, event))


def _enter(target: OrderState) -> _Handler:
    def handler(context: OrderContext, _event: Any) -> tuple[OrderState, OrderContext]:
        return target, replace(context, status=STATUS_BY_STATE[target])

    return handler


# Any (state, event type) pair missing here is an identity transition.
TRANSITIONS: dict[tuple[OrderState, str], _Handler] = {
    (OrderState.IDLE, "ITEM_ADDED"): _add_item,
    (OrderState.IDLE, "ITEM_REMOVED"): _remove_item,
    (OrderState.IDLE, "ORDER_SUBMITTED"): _enter(OrderState.PROCESSING),
    (OrderState.PROCESSING, "PAYMENT_RECEIVED"): _enter(OrderState.SHIPPING),
    (OrderState.SHIPPING, "ORDER_SHIPPED"): _enter(OrderState.COMPLETED),
}


def accepts(state: OrderState, event: OrderEvent) -> bool:
    """Return whether `event` is handled in `state` (otherwise it is ignored)."""

    return (state, event.type) in TRANSITIONS


def is_final(state: OrderState) -> bool:
    return state in FINAL_STATES


def transition(
    state: OrderState, context: OrderContext, event: OrderEvent
) -> tuple[OrderState, OrderContext]:
    """Compute the next (state, context) pair for an event.

    Events with no entry in `TRANSITIONS` for the current state are absorbed:
    the same state and the same context object are returned and nothing is
    logged to `context.events`.
    """

    handler = TRANSITIONS.get((state, event.type))
    if handler is None:
        logger.debug(
            "Ignoring event",
            extra={"state": state.value, "event_type": event.type},
        )
        return state, context

    next_state, next_context = handler(context, event)
    if next_state is not state:
        logger.info(
            "Order state changed",
            extra={"from_state": state.value, "to_state": next_state.value},
        )
    return next_state, next_context


class OrderMachine:
    """The order workflow packaged for an `Actor`.

    Typically wrapped as ``ObservableStore.from_machine(OrderMachine())``.
    """

    id = "order"

    def initial_snapshot(self) -> OrderSnapshot:
        return OrderSnapshot(value=OrderState.IDLE, context=OrderContext())

    def transition(self, snapshot: OrderSnapshot, event: OrderEvent) -> OrderSnapshot:
        next_state, next_context = transition(snapshot.value, snapshot.context, event)
        if next_state is snapshot.value and next_context is snapshot.context:
            return snapshot
        return OrderSnapshot(value=next_state, context=next_context)

    def is_final(self, snapshot: OrderSnapshot) -> bool:
        return is_final(snapshot.value)


def replay(events: Iterable[OrderEvent], machine: OrderMachine | None = None) -> OrderSnapshot:
    """Fold a sequence of events over a fresh order, without an actor."""

    machine = machine or OrderMachine()
    snapshot = machine.initial_snapshot()
    for event in events:
        snapshot = machine.transition(snapshot, event)
    return snapshot
