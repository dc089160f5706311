"""Reactive store over actor-style state machines."""

__all__: list[str] = []
