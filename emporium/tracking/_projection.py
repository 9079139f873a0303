"""
Progress projection — status → six display steps.

Pure: same inputs, same steps. Timestamps play no part.
"""

from __future__ import annotations

from emporium.tracking._types import (
    OrderStatus,
    TrackingStep,
    TerminalBadge,
    Tone,
)


# (key, title, description) per happy-path status
STEP_COPY: tuple[tuple[str, str, str], ...] = (
    ("placed", "Order Placed", "Your order has been placed and is awaiting confirmation"),
    ("confirmed", "Order Confirmed", "Your order has been confirmed and is being prepared"),
    ("processing", "Processing", "Your order is being processed and prepared for shipment"),
    ("shipped", "Shipped", "Your order has been shipped and is on its way"),
    ("out_for_delivery", "Out for Delivery", "Your order is out for delivery"),
    ("delivered", "Delivered", "Your order has been delivered"),
)

_TONES: dict[OrderStatus, Tone] = {
    OrderStatus.PENDING: Tone.PENDING,
    OrderStatus.CONFIRMED: Tone.ACTIVE,
    OrderStatus.PROCESSING: Tone.ACTIVE,
    OrderStatus.SHIPPED: Tone.TRANSIT,
    OrderStatus.OUT_FOR_DELIVERY: Tone.TRANSIT,
    OrderStatus.DELIVERED: Tone.DONE,
    OrderStatus.CANCELLED: Tone.PROBLEM,
    OrderStatus.RETURNED: Tone.PROBLEM,
}


def project(
    status: OrderStatus,
    last_known: OrderStatus | None = None,
) -> tuple[TrackingStep, ...]:
    """
    Steps up to the status's position are completed; that one is current.

    For CANCELLED / RETURNED no step is current, and completion follows
    `last_known`, the last happy-path status seen for the order (nothing
    completed when unknown).
    """
    if status.is_branch:
        reached = last_known.position if last_known is not None else None
        current = None
    else:
        reached = status.position
        current = reached

    limit = -1 if reached is None else reached
    return tuple(
        TrackingStep(
            key=key,
            title=title,
            description=description,
            completed=index <= limit,
            current=index == current,
        )
        for index, (key, title, description) in enumerate(STEP_COPY)
    )


def badge_for(status: OrderStatus) -> TerminalBadge | None:
    match status:
        case OrderStatus.CANCELLED:
            return TerminalBadge.CANCELLED
        case OrderStatus.RETURNED:
            return TerminalBadge.RETURNED
        case _:
            return None


def tone_for(status: OrderStatus) -> Tone:
    return _TONES[status]


__all__ = ("STEP_COPY", "project", "badge_for", "tone_for")
