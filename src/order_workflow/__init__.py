"""Order workflow.

An explicit order-processing state machine (cart editing, submission,
payment, shipping) and a generic reactive store that turns any actor-style
state machine into a subscribable, selector-capable data source.
"""

__version__ = "0.1.0"

from order_workflow.store.observable_store import UNINITIALIZED, ObservableStore
from order_workflow.workflow.actor import Actor
from order_workflow.workflow.events import (
    ItemAdded,
    ItemRemoved,
    OrderEvent,
    OrderShipped,
    OrderSubmitted,
    PaymentReceived,
    parse_event,
)
from order_workflow.workflow.state_machine import (
    OrderContext,
    OrderMachine,
    OrderSnapshot,
    OrderState,
    OrderStatus,
)

__all__ = [
    "__version__",
    "UNINITIALIZED",
    "Actor",
    "ItemAdded",
    "ItemRemoved",
    "ObservableStore",
    "OrderContext",
    "OrderEvent",
    "OrderMachine",
    "OrderShipped",
    "OrderSnapshot",
    "OrderState",
    "OrderStatus",
    "OrderSubmitted",
    "PaymentReceived",
    "parse_event",
]
