"""Actor runtime for state machines.

An `Actor` owns the authoritative snapshot of one running machine, delivers
events to it and notifies observers when the snapshot changes.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from enum import Enum
from typing import Generic, Protocol, TypeVar

from order_workflow.store.stream import Subject, Subscription

logger = logging.getLogger(__name__)

SnapshotT = TypeVar("SnapshotT")
EventT = TypeVar("EventT")


class Machine(Protocol[SnapshotT, EventT]):
    """Pure machine logic: no I/O, no state of its own."""

    def initial_snapshot(self) -> SnapshotT: ...

    def transition(self, snapshot: SnapshotT, event: EventT) -> SnapshotT: ...

    def is_final(self, snapshot: SnapshotT) -> bool: ...


class ActorStatus(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    DONE = "done"
    STOPPED = "stopped"


class Actor(Generic[SnapshotT, EventT]):
    """Runs a `Machine`.

    Lifecycle:
      - events sent before `start()` are queued and processed, in order,
        right after the initial snapshot is emitted;
      - while running, `send` transitions under a re-entrant lock and emits
        only when the machine returned a different snapshot object;
      - an event sent from inside an observer callback is queued and
        processed once every observer has seen the current snapshot;
      - `stop()` is idempotent; afterwards events are dropped and observers
        receive nothing further.
    """

    def __init__(self, machine: Machine[SnapshotT, EventT]) -> None:
        self.machine = machine
        self.status = ActorStatus.NOT_STARTED
        self._snapshot: SnapshotT = machine.initial_snapshot()
        self._mailbox: deque[EventT] = deque()
        self._observers: Subject[SnapshotT] = Subject()
        self._lock = threading.RLock()
        self._processing = False

    @property
    def id(self) -> str:
        return str(getattr(self.machine, "id", type(self.machine).__name__))

    def get_snapshot(self) -> SnapshotT:
        return self._snapshot

    def subscribe(self, on_next: Callable[[SnapshotT], None]) -> Subscription:
        """Observe future snapshots; nothing is replayed to late observers."""

        return self._observers.subscribe(on_next)

    def start(self) -> None:
        with self._lock:
            if self.status is not ActorStatus.NOT_STARTED:
                logger.debug("Actor already started", extra={"actor": self.id})
                return
            self.status = ActorStatus.RUNNING
            logger.info("Actor started", extra={"actor": self.id})
            self._processing = True
            try:
                self._observers.publish(self._snapshot)
                if self.machine.is_final(self._snapshot):
                    self.status = ActorStatus.DONE
                self._drain()
            finally:
                self._processing = False

    def stop(self) -> None:
        with self._lock:
            if self.status is ActorStatus.STOPPED:
                return
            self.status = ActorStatus.STOPPED
            self._mailbox.clear()
            logger.info("Actor stopped", extra={"actor": self.id})

    def send(self, event: EventT) -> None:
        with self._lock:
            if self.status is ActorStatus.STOPPED:
                logger.warning(
                    "Event sent to stopped actor; dropping",
                    extra={"actor": self.id, "event": repr(event)},
                )
                return
            self._mailbox.append(event)
            # Sends from an observer callback wait for the current round to finish.
            if self.status is ActorStatus.NOT_STARTED or self._processing:
                return
            self._processing = True
            try:
                self._drain()
            finally:
                self._processing = False

    def _drain(self) -> None:
        while self._mailbox:
            self._process(self._mailbox.popleft())

    def _process(self, event: EventT) -> None:
        if self.status is not ActorStatus.RUNNING:
            logger.debug("Actor is done; ignoring event", extra={"actor": self.id})
            return
        previous = self._snapshot
        snapshot = self.machine.transition(previous, event)
        if snapshot is previous:
            return
        self._snapshot = snapshot
        if self.machine.is_final(snapshot):
            self.status = ActorStatus.DONE
            logger.info("Actor reached a final state", extra={"actor": self.id})
        self._observers.publish(snapshot)
