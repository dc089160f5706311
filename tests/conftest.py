"""Test configuration and fixtures."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from order_workflow.store.observable_store import ObservableStore
from order_workflow.workflow.actor import Actor
from order_workflow.workflow.events import OrderEvent
from order_workflow.workflow.state_machine import OrderMachine, OrderSnapshot

_SETTINGS_ENV = (
    "ORDER_WORKFLOW_LOG_LEVEL",
    "ORDER_WORKFLOW_LOG_FORMAT",
    "ORDER_WORKFLOW_DEBUG",
)


@pytest.fixture
def machine() -> OrderMachine:
    """Provide a fresh order machine."""
    return OrderMachine()


@pytest.fixture
def actor(machine: OrderMachine) -> Iterator[Actor[OrderSnapshot, OrderEvent]]:
    """Provide a started order actor, stopped after the test."""
    order_actor: Actor[OrderSnapshot, OrderEvent] = Actor(machine)
    order_actor.start()
    yield order_actor
    order_actor.stop()


@pytest.fixture
def store(machine: OrderMachine) -> Iterator[ObservableStore[OrderSnapshot, OrderEvent]]:
    """Provide a started order store, stopped after the test."""
    with ObservableStore.from_machine(machine) as order_store:
        yield order_store


@pytest.fixture
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory with no settings in the environment."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo root/package logging changes made by `configure_logging`."""
    root = logging.getLogger()
    package = logging.getLogger("order_workflow")
    handlers, level, package_level = list(root.handlers), root.level, package.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    package.setLevel(package_level)
