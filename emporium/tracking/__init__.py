"""
Tracking — order status and its progress view.

    from emporium import tracking as T

    tracker = T.OrderLifecycleTracker(gateway)

    match await tracker.track("ORD-1001"):
        case Ok(view):
            [step.state for step in view.steps]   # done, done, current, pending...
            view.badge                            # TerminalBadge.CANCELLED or None
            view.days_until_delivery()
        case Error(T.OrderNotFound()):
            ...  # not-found view

The projection is usable on its own:

    T.project(T.OrderStatus.SHIPPED)
"""

from emporium.tracking._types import (
    OrderStatus,
    HAPPY_PATH,
    BRANCH_STATUSES,
    PaymentStatus,
    OrderItem,
    Order,
    StepState,
    TrackingStep,
    TerminalBadge,
    Tone,
    TrackingView,
)
from emporium.tracking._lifecycle import is_terminal, next_statuses, can_transition
from emporium.tracking._projection import STEP_COPY, project, badge_for, tone_for
from emporium.tracking._tracker import OrderLifecycleTracker
from emporium.errors import OrderNotFound

__all__ = (
    "OrderStatus",
    "HAPPY_PATH",
    "BRANCH_STATUSES",
    "PaymentStatus",
    "OrderItem",
    "Order",
    "StepState",
    "TrackingStep",
    "TerminalBadge",
    "Tone",
    "TrackingView",
    "is_terminal",
    "next_statuses",
    "can_transition",
    "STEP_COPY",
    "project",
    "badge_for",
    "tone_for",
    "OrderLifecycleTracker",
    "OrderNotFound",
)
