"""Reactive store wrapping an actor-style state machine.

The store republishes every snapshot emitted by the wrapped actor through a
replay-latest subject. Callers can poll the latest snapshot or subscribe to
derived, change-deduplicated views of the machine's context.

Before the first publish `get_snapshot()` returns `UNINITIALIZED` and
selector subscriptions stay silent; they receive the first snapshot's
projection as soon as it is published.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Generic, Protocol, TypeVar

from order_workflow.store.stream import BehaviorSubject, Observable, Subscription
from order_workflow.workflow.actor import Actor, Machine

logger = logging.getLogger(__name__)

SnapshotT = TypeVar("SnapshotT")
EventT = TypeVar("EventT")
R = TypeVar("R")


class UnknownFieldError(KeyError):
    """Raised when a selector names a field the context does not have."""


class ActorLike(Protocol[SnapshotT, EventT]):
    """What the store needs from a running machine instance."""

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def send(self, event: EventT) -> None: ...

    def subscribe(self, on_next: Callable[[SnapshotT], None]) -> Subscription: ...

    def get_snapshot(self) -> SnapshotT: ...


@dataclasses.dataclass(frozen=True, slots=True)
class Uninitialized:
    """Placeholder returned by `get_snapshot()` before the first publish."""

    value: None = None
    context: None = None

    def __bool__(self) -> bool:
        return False


UNINITIALIZED = Uninitialized()


def _context_of(snapshot: Any) -> Any:
    return snapshot.context


def _read_field(context: Any, key: str) -> Any:
    if isinstance(context, Mapping):
        return context[key]
    return getattr(context, key)


def _has_field(context: Any, key: str) -> bool:
    if isinstance(context, Mapping):
        return key in context
    if dataclasses.is_dataclass(context):
        return key in {f.name for f in dataclasses.fields(context)}
    return hasattr(context, key)


class ObservableStore(Generic[SnapshotT, EventT]):
    """Subscribable, selector-capable view over one actor.

    The store owns the actor's lifecycle. Use it as a context manager to make
    sure the actor is stopped on every exit path:

        with ObservableStore.from_machine(OrderMachine()) as store:
            store.send(ItemAdded(item="book", quantity=2))
    """

    def __init__(self, actor: ActorLike[SnapshotT, EventT]) -> None:
        self._actor = actor
        self._state: BehaviorSubject[SnapshotT] = BehaviorSubject()
        self._actor_subscription = actor.subscribe(self._state.publish)

    @classmethod
    def from_machine(
        cls, machine: Machine[SnapshotT, EventT]
    ) -> ObservableStore[SnapshotT, EventT]:
        return cls(Actor(machine))

    @property
    def actor(self) -> ActorLike[SnapshotT, EventT]:
        return self._actor

    def start(self) -> None:
        try:
            self._actor.start()
            # Seed from the actor for runtimes that do not emit on start.
            if not self._state.has_value:
                self._state.publish(self._actor.get_snapshot())
        except BaseException:
            self._actor.stop()
            raise

    def stop(self) -> None:
        self._actor.stop()

    def __enter__(self) -> ObservableStore[SnapshotT, EventT]:
        self.start()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.stop()

    def send(self, event: EventT) -> None:
        self._actor.send(event)

    def get_snapshot(self) -> SnapshotT | Uninitialized:
        return self._state.get_value(UNINITIALIZED)

    def get_state(self) -> Any:
        """Return the discriminant of the latest snapshot, or None before start."""

        return self.get_snapshot().value  # type: ignore[union-attr]

    def select(self, key: str | None = None) -> Observable[Any]:
        """Stream the whole context, or a single context field.

        Each subscriber first receives the latest value (if any), then one
        value per published change. Field streams skip values equal to the
        previously emitted one.

        Raises:
            UnknownFieldError: If `key` is not a field of the context.
        """

        contexts = self._state.as_observable().map(_context_of)
        if key is None:
            return contexts
        self._check_fields([key])
        return contexts.map(lambda context: _read_field(context, key)).distinct_until_changed()

    def select_with(self, selector: Callable[[Any], R]) -> Observable[R]:
        """Stream an arbitrary projection of the context, deduplicated by equality."""

        contexts = self._state.as_observable().map(_context_of)
        return contexts.map(selector).distinct_until_changed()

    def select_many(self, keys: Sequence[str]) -> Observable[dict[str, Any]]:
        """Stream a dict restricted to `keys`.

        A new dict, carrying every selected field, is emitted whenever at
        least one of the fields changed.
        """

        selected = tuple(keys)
        self._check_fields(selected)

        def pick(context: Any) -> dict[str, Any]:
            return {key: _read_field(context, key) for key in selected}

        def unchanged(prev: dict[str, Any], curr: dict[str, Any]) -> bool:
            return all(prev[key] == curr[key] for key in selected)

        return (
            self._state.as_observable()
            .map(_context_of)
            .map(pick)
            .distinct_until_changed(unchanged)
        )

    def _check_fields(self, keys: Sequence[str]) -> None:
        context = _context_of(self._actor.get_snapshot())
        for key in keys:
            if not _has_field(context, key):
                raise UnknownFieldError(key)
