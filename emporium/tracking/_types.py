"""
Tracking types — order record as the backend reports it, and its view.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from emporium._types import ProductId, ZERO, money
from emporium.cart._types import effective_price

if TYPE_CHECKING:
    from emporium.payment import PaymentMethod


# ═══════════════════════════════════════════════════════════════════════════════
# Statuses
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    # Branches, only ever set by the backend
    CANCELLED = "CANCELLED"
    RETURNED = "RETURNED"

    @property
    def is_branch(self) -> bool:
        return self in BRANCH_STATUSES

    @property
    def position(self) -> int | None:
        """Index on the happy path, None for a branch status."""
        return None if self.is_branch else HAPPY_PATH.index(self)


HAPPY_PATH: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)

BRANCH_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.RETURNED})


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    PAID = "PAID"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderItem:
    """Purchased line, snapshotted at order creation."""

    product_id: ProductId
    name: str
    quantity: int
    price: Decimal
    discount_price: Decimal | None = None

    @property
    def total_price(self) -> Decimal:
        return money(effective_price(self.price, self.discount_price) * self.quantity)


@dataclass(frozen=True, slots=True)
class Order:
    """
    Read-only order record.

    Note: Amounts were frozen by the backend at creation; nothing here is
    recomputed from live prices.
    """

    order_number: str
    status: OrderStatus
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    items: tuple[OrderItem, ...]
    shipping_address: str
    subtotal: Decimal
    tax_amount: Decimal = ZERO
    shipping_amount: Decimal = ZERO
    discount_amount: Decimal = ZERO
    total_amount: Decimal = ZERO
    tracking_number: str | None = None
    estimated_delivery_date: date | None = None
    customer_notes: str | None = None
    created_at: datetime | None = None

    @property
    def totals_consistent(self) -> bool:
        """total = subtotal − discount + shipping + tax."""
        expected = money(
            self.subtotal - self.discount_amount + self.shipping_amount + self.tax_amount
        )
        return expected == money(self.total_amount)


# ═══════════════════════════════════════════════════════════════════════════════
# Tracking View
# ═══════════════════════════════════════════════════════════════════════════════


class StepState(Enum):
    DONE = "done"
    CURRENT = "current"
    PENDING = "pending"


@dataclass(frozen=True, slots=True)
class TrackingStep:
    """
    One of the six display steps.

    Note: The current step is also completed; `state` folds the two flags.
    """

    key: str
    title: str
    description: str
    completed: bool
    current: bool

    @property
    def state(self) -> StepState:
        if self.current:
            return StepState.CURRENT
        return StepState.DONE if self.completed else StepState.PENDING


class TerminalBadge(Enum):
    CANCELLED = "Cancelled"
    RETURNED = "Returned"


class Tone(Enum):
    """Display grouping of statuses."""

    PENDING = "pending"
    ACTIVE = "active"
    TRANSIT = "transit"
    DONE = "done"
    PROBLEM = "problem"


@dataclass(frozen=True, slots=True)
class TrackingView:
    order: Order
    steps: tuple[TrackingStep, ...]
    badge: TerminalBadge | None
    tone: Tone

    @property
    def current_step(self) -> TrackingStep | None:
        return next((step for step in self.steps if step.current), None)

    @property
    def progress(self) -> float:
        """Completed steps over all steps, 0.0 – 1.0."""
        if not self.steps:
            return 0.0
        return sum(step.completed for step in self.steps) / len(self.steps)

    def days_until_delivery(self, today: date | None = None) -> int | None:
        """Days left to the estimated delivery. Never negative; None if unknown."""
        eta = self.order.estimated_delivery_date
        if eta is None:
            return None
        return max(0, (eta - (today or date.today())).days)


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
)
