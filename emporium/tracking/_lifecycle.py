"""
Order lifecycle — which status may follow which.

The backend drives every transition; the client only renders. This table
is what a backend (or the in-memory one) enforces.

    PENDING → CONFIRMED → PROCESSING → SHIPPED → OUT_FOR_DELIVERY → DELIVERED
       └──────────┴───────────┴───────────┴──────────────┴────────────┴──► CANCELLED | RETURNED
"""

from __future__ import annotations

from emporium.tracking._types import OrderStatus, HAPPY_PATH, BRANCH_STATUSES


_SUCCESSOR: dict[OrderStatus, OrderStatus] = dict(zip(HAPPY_PATH, HAPPY_PATH[1:]))


def is_terminal(status: OrderStatus) -> bool:
    """CANCELLED and RETURNED end the lifecycle. DELIVERED can still be returned."""
    return status in BRANCH_STATUSES


def next_statuses(status: OrderStatus) -> frozenset[OrderStatus]:
    if is_terminal(status):
        return frozenset()
    successor = _SUCCESSOR.get(status)
    following = {successor} if successor is not None else set()
    return frozenset(following | BRANCH_STATUSES)


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in next_statuses(current)


__all__ = ("is_terminal", "next_statuses", "can_transition")
