"""Minimal push-based streams used to deliver snapshot changes.

Only what the store needs is implemented: hot subjects (plain and
replay-latest), a lazy `Observable` with `map` / `filter` /
`distinct_until_changed`, and subscription handles. Delivery is synchronous
on the publishing thread.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")

Listener = Callable[[T], None]

_MISSING: Any = object()


class Subscription:
    """Handle returned by every `subscribe` call.

    `unsubscribe()` is idempotent. Using the handle as a context manager
    releases it when the block exits.
    """

    def __init__(self, dispose: Callable[[], None] | None = None) -> None:
        self._dispose = dispose
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def unsubscribe(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            dispose, self._dispose = self._dispose, None
        if dispose is not None:
            dispose()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.unsubscribe()


class Observable(Generic[T]):
    """A lazy stream.

    Nothing runs until `subscribe` is called, and every subscription builds
    its own chain, so operator state (e.g. the last value seen by
    `distinct_until_changed`) is never shared between subscribers.
    """

    def __init__(self, on_subscribe: Callable[[Listener[T]], Subscription]) -> None:
        self._on_subscribe = on_subscribe

    def subscribe(self, on_next: Listener[T]) -> Subscription:
        return self._on_subscribe(on_next)

    def map(self, fn: Callable[[T], R]) -> Observable[R]:
        def on_subscribe(on_next: Listener[R]) -> Subscription:
            return self.subscribe(lambda value: on_next(fn(value)))

        return Observable(on_subscribe)

    def filter(self, predicate: Callable[[T], bool]) -> Observable[T]:
        def on_subscribe(on_next: Listener[T]) -> Subscription:
            def forward(value: T) -> None:
                if predicate(value):
                    on_next(value)

            return self.subscribe(forward)

        return Observable(on_subscribe)

    def distinct_until_changed(
        self, comparer: Callable[[T, T], bool] | None = None
    ) -> Observable[T]:
        """Drop values equal to the previously forwarded one.

        Args:
            comparer: Returns True when two values count as unchanged.
                Defaults to ``==``.
        """

        equals = comparer or (lambda a, b: a == b)

        def on_subscribe(on_next: Listener[T]) -> Subscription:
            last: list[T] = []

            def forward(value: T) -> None:
                if last and equals(last[0], value):
                    return
                last[:] = [value]
                on_next(value)

            return self.subscribe(forward)

        return Observable(on_subscribe)


class Subject(Generic[T]):
    """Hot, multicast stream without replay.

    `publish` calls every active listener in registration order on the
    calling thread. Listeners added later only see later values.
    """

    def __init__(self) -> None:
        self._listeners: dict[int, Listener[T]] = {}
        self._next_id = 0
        self._lock = threading.RLock()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self, value: T) -> None:
        with self._lock:
            listeners = list(self._listeners.items())
        self._deliver(listeners, value)

    def subscribe(self, on_next: Listener[T]) -> Subscription:
        with self._lock:
            token = self._add(on_next)
        return Subscription(lambda: self._remove(token))

    def as_observable(self) -> Observable[T]:
        return Observable(self.subscribe)

    def _add(self, on_next: Listener[T]) -> int:
        token = self._next_id
        self._next_id += 1
        self._listeners[token] = on_next
        return token

    def _remove(self, token: int) -> None:
        with self._lock:
            self._listeners.pop(token, None)

    def _deliver(self, listeners: list[tuple[int, Listener[T]]], value: T) -> None:
        for token, listener in listeners:
            # A listener may have been removed by an earlier one in this round.
            if token in self._listeners:
                listener(value)


class BehaviorSubject(Subject[T]):
    """A `Subject` that remembers the latest value.

    `publish` stores the value before notifying. New listeners synchronously
    receive the stored value, then every later publish. Until the first
    publish there is nothing to replay.
    """

    def __init__(self, initial: T = _MISSING) -> None:
        super().__init__()
        self._value: T = initial

    @property
    def has_value(self) -> bool:
        return self._value is not _MISSING

    def get_value(self, default: Any = None) -> Any:
        value = self._value
        return default if value is _MISSING else value

    def publish(self, value: T) -> None:
        with self._lock:
            self._value = value
            listeners = list(self._listeners.items())
        self._deliver(listeners, value)

    def subscribe(self, on_next: Listener[T]) -> Subscription:
        with self._lock:
            token = self._add(on_next)
            value = self._value

        subscription = Subscription(lambda: self._remove(token))
        if value is not _MISSING:
            on_next(value)
        return subscription
