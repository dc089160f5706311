"""CLI entrypoint for the order workflow.

This is the boundary layer: raw JSON events are validated here before they
reach the store.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterable, Mapping, Sequence
from enum import Enum
from typing import Any, TextIO

from pydantic import ValidationError

from order_workflow import __version__
from order_workflow.config import OrderWorkflowSettings
from order_workflow.store.observable_store import ObservableStore, UnknownFieldError
from order_workflow.store.stream import Subscription
from order_workflow.workflow.events import InvalidEventError, OrderEvent, parse_event
from order_workflow.workflow.state_machine import OrderMachine

logger = logging.getLogger(__name__)


def _to_json(value: Any) -> Any:
    if hasattr(value, "to_json"):
        return value.to_json()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): _to_json(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_to_json(v) for v in value]
    return value


def _emit(payload: object, out: TextIO) -> None:
    out.write(json.dumps(payload, ensure_ascii=False) + "\n")
    out.flush()


def _read_events(values: Sequence[str], stdin: TextIO) -> list[OrderEvent]:
    lines: Iterable[str] = values if values else stdin
    events: list[OrderEvent] = []
    for line in lines:
        if not line.strip():
            continue
        events.append(parse_event(line.strip()))
    return events


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="order-workflow",
        description="Run order events through the order workflow state machine",
    )
    parser.add_argument("--version", action="version", version=f"order-workflow {__version__}")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override ORDER_WORKFLOW_LOG_LEVEL for this run",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser(
        "run",
        help="Send events to a new order and print the final snapshot",
    )
    run.add_argument(
        "events",
        nargs="*",
        metavar="EVENT_JSON",
        help=(
            'Events as JSON objects, e.g. \'{"type": "ITEM_ADDED", "item": "book", '
            '"quantity": 2}\'. When omitted, JSON lines are read from stdin.'
        ),
    )
    run.add_argument(
        "--watch",
        action="append",
        default=[],
        metavar="FIELD",
        help="Print every change of a context field (repeatable)",
    )
    return parser


def _cmd_run(args: argparse.Namespace, *, stdin: TextIO, out: TextIO) -> int:
    try:
        events = _read_events(args.events, stdin)
    except InvalidEventError as e:
        print(str(e), file=sys.stderr)
        return 2

    store = ObservableStore.from_machine(OrderMachine())
    subscriptions: list[Subscription] = []
    try:
        for field in args.watch:
            subscriptions.append(
                store.select(field).subscribe(
                    lambda value, field=field: _emit(
                        {"field": field, "value": _to_json(value)}, out
                    )
                )
            )
    except UnknownFieldError as e:
        print(f"Unknown context field: {e.args[0]}", file=sys.stderr)
        return 2

    logger.info("Running order events", extra={"event_count": len(events)})
    try:
        with store:
            for event in events:
                store.send(event)
            snapshot = store.get_snapshot()
    finally:
        for subscription in subscriptions:
            subscription.unsubscribe()

    _emit(_to_json(snapshot), out)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = OrderWorkflowSettings()
        if args.log_level:
            settings = OrderWorkflowSettings(log_level=args.log_level)
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    settings.setup_logging()

    if args.command == "run":
        return _cmd_run(args, stdin=sys.stdin, out=sys.stdout)

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
