"""Order workflow domain.

This package holds:
- the order events and their boundary parser
- the order state machine (a pure transition table)
- a small actor runtime that drives any machine and emits snapshots
"""

__all__: list[str] = []
