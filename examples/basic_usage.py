#!/usr/bin/env python3
"""Programmatic order workflow example.

This demonstrates using the store directly:

* load settings from `.env`
* subscribe to derived views of the order context
* drive an order from cart editing to shipment
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from order_workflow import (
    ItemAdded,
    ItemRemoved,
    ObservableStore,
    OrderMachine,
    OrderShipped,
    OrderSubmitted,
    PaymentReceived,
)
from order_workflow.config import OrderWorkflowSettings


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Drive one order through its lifecycle.")
    parser.add_argument("--item", default="book", help="Item to add to the cart")
    parser.add_argument("--quantity", type=int, default=2, help="Quantity to add")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = OrderWorkflowSettings()
    settings.setup_logging()

    store = ObservableStore.from_machine(OrderMachine())
    store.select("status").subscribe(lambda status: print(f"status: {status.value}"))
    store.select_many(["items", "status"]).subscribe(
        lambda record: print(f"cart: {dict(record['items'])} ({record['status'].value})")
    )

    with store:
        store.send(ItemAdded(item=args.item, quantity=args.quantity))
        store.send(ItemAdded(item="pen", quantity=1))
        store.send(ItemRemoved(item="pen"))
        store.send(OrderSubmitted())
        store.send(PaymentReceived())
        store.send(OrderShipped())

    print(f"Final state: {store.get_state().value}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
