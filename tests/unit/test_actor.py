"""Unit tests for the actor runtime."""

from __future__ import annotations

import logging

import pytest

from order_workflow.workflow.actor import Actor, ActorStatus
from order_workflow.workflow.events import (
    ItemAdded,
    OrderEvent,
    OrderShipped,
    OrderSubmitted,
    PaymentReceived,
)
from order_workflow.workflow.state_machine import OrderMachine, OrderSnapshot, OrderState


def test_start_emits_initial_snapshot(machine: OrderMachine) -> None:
    actor: Actor[OrderSnapshot, OrderEvent] = Actor(machine)
    seen: list[OrderSnapshot] = []
    actor.subscribe(seen.append)

    actor.start()

    assert actor.status == ActorStatus.RUNNING
    assert [s.value for s in seen] == [OrderState.IDLE]
    assert seen[0] is actor.get_snapshot()


def test_send_emits_only_on_change(actor: Actor[OrderSnapshot, OrderEvent]) -> None:
    seen: list[OrderSnapshot] = []
    actor.subscribe(seen.append)

    actor.send(ItemAdded(item="book", quantity=1))
    actor.send(PaymentReceived())
    actor.send(OrderSubmitted())

    assert [s.value for s in seen] == [OrderState.IDLE, OrderState.PROCESSING]


def test_events_sent_before_start_are_queued(machine: OrderMachine) -> None:
    actor: Actor[OrderSnapshot, OrderEvent] = Actor(machine)
    actor.send(ItemAdded(item="book", quantity=2))
    actor.send(OrderSubmitted())

    assert actor.get_snapshot().value == OrderState.IDLE

    actor.start()

    snapshot = actor.get_snapshot()
    assert snapshot.value == OrderState.PROCESSING
    assert snapshot.context.items["book"] == 2


def test_reaching_final_state_marks_actor_done(actor: Actor[OrderSnapshot, OrderEvent]) -> None:
    for event in (OrderSubmitted(), PaymentReceived(), OrderShipped()):
        actor.send(event)

    assert actor.status == ActorStatus.DONE
    final = actor.get_snapshot()

    actor.send(ItemAdded(item="pen", quantity=1))

    assert actor.get_snapshot() is final


def test_stop_is_idempotent_and_drops_events(
    actor: Actor[OrderSnapshot, OrderEvent], caplog: pytest.LogCaptureFixture
) -> None:
    seen: list[OrderSnapshot] = []
    actor.subscribe(seen.append)

    actor.stop()
    actor.stop()
    with caplog.at_level(logging.WARNING, logger="order_workflow.workflow.actor"):
        actor.send(ItemAdded(item="book", quantity=1))

    assert actor.status == ActorStatus.STOPPED
    assert seen == []
    assert dict(actor.get_snapshot().context.items) == {}
    assert "stopped actor" in caplog.text


def test_start_after_stop_does_not_restart(actor: Actor[OrderSnapshot, OrderEvent]) -> None:
    actor.stop()
    actor.start()

    assert actor.status == ActorStatus.STOPPED


def test_unsubscribed_observer_stops_receiving(actor: Actor[OrderSnapshot, OrderEvent]) -> None:
    seen: list[OrderSnapshot] = []
    subscription = actor.subscribe(seen.append)

    actor.send(ItemAdded(item="book", quantity=1))
    subscription.unsubscribe()
    actor.send(ItemAdded(item="book", quantity=1))

    assert len(seen) == 1


def test_actor_id_comes_from_machine(actor: Actor[OrderSnapshot, OrderEvent]) -> None:
    assert actor.id == "order"


def test_send_from_observer_waits_for_current_round(
    actor: Actor[OrderSnapshot, OrderEvent],
) -> None:
    def pay_on_processing(snapshot: OrderSnapshot) -> None:
        if snapshot.value == OrderState.PROCESSING:
            actor.send(PaymentReceived())

    seen: list[OrderState] = []
    actor.subscribe(pay_on_processing)
    actor.subscribe(lambda snapshot: seen.append(snapshot.value))

    actor.send(OrderSubmitted())

    assert seen == [OrderState.PROCESSING, OrderState.SHIPPING]
    assert actor.get_snapshot().value == OrderState.SHIPPING
