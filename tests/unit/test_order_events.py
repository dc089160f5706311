"""Unit tests for order events and boundary parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from order_workflow.workflow.events import (
    InvalidEventError,
    ItemAdded,
    ItemRemoved,
    OrderShipped,
    OrderSubmitted,
    PaymentReceived,
    parse_event,
)


def test_parse_event_from_mapping() -> None:
    event = parse_event({"type": "ITEM_ADDED", "item": "book", "quantity": 2})

    assert event == ItemAdded(item="book", quantity=2)


def test_parse_event_from_json() -> None:
    assert parse_event('{"type": "ITEM_REMOVED", "item": "pen"}') == ItemRemoved(item="pen")
    assert parse_event('{"type": "ORDER_SUBMITTED"}') == OrderSubmitted()
    assert parse_event(b'{"type": "PAYMENT_RECEIVED"}') == PaymentReceived()
    assert parse_event({"type": "ORDER_SHIPPED"}) == OrderShipped()


@pytest.mark.parametrize(
    "raw",
    [
        {"type": "ITEM_CLONED", "item": "book"},
        {"type": "ITEM_ADDED", "item": "book"},
        {"type": "ITEM_ADDED", "item": "book", "quantity": -1},
        {"type": "ITEM_ADDED", "item": "", "quantity": 1},
        {"type": "ORDER_SUBMITTED", "extra": True},
        {"item": "book", "quantity": 1},
        "not json",
        ["ITEM_ADDED"],
    ],
)
def test_parse_event_rejects_malformed_payloads(raw: object) -> None:
    with pytest.raises(InvalidEventError):
        parse_event(raw)  # type: ignore[arg-type]


def test_events_are_immutable() -> None:
    event = ItemAdded(item="book", quantity=2)

    with pytest.raises(ValidationError):
        event.quantity = 3  # type: ignore[misc]


def test_direct_construction_validates() -> None:
    with pytest.raises(ValidationError):
        ItemAdded(item="book", quantity=-5)


def test_event_to_json() -> None:
    assert ItemAdded(item="book", quantity=2).to_json() == {
        "type": "ITEM_ADDED",
        "item": "book",
        "quantity": 2,
    }
    assert OrderShipped().to_json() == {"type": "ORDER_SHIPPED"}
