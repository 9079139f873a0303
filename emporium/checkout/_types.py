"""
Checkout types — steps, addresses, the order request and the session view.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from emporium.payment import PaymentSelection


class Step(Enum):
    SHIPPING = "shipping"
    PAYMENT = "payment"
    REVIEW = "review"
    SUCCESS = "success"

    @property
    def index(self) -> int:
        return STEPS.index(self)

    @property
    def next(self) -> Step | None:
        i = self.index
        return STEPS[i + 1] if i + 1 < len(STEPS) else None


STEPS: tuple[Step, ...] = (Step.SHIPPING, Step.PAYMENT, Step.REVIEW, Step.SUCCESS)

PROCESSING = "processing"
"""Pseudo-step shown while the order call is in flight. Never stored."""


@dataclass(frozen=True, slots=True)
class ShippingAddress:
    first_name: str
    last_name: str
    phone: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def formatted(self) -> str:
        """One-line form stored on the order."""
        return (
            f"{self.full_name}, {self.street}, {self.city}, {self.state} "
            f"{self.zip_code}, {self.country}"
        )


@dataclass(frozen=True, slots=True)
class ShippingDetails:
    """Shipping step data. Billing defaults to the shipping address."""

    address: ShippingAddress
    billing: ShippingAddress | None = None
    notes: str | None = None

    @property
    def billing_address(self) -> ShippingAddress:
        return self.billing or self.address


@dataclass(frozen=True, slots=True)
class CheckoutRequest:
    """What the order call sends: validated shipping + one payment variant."""

    shipping: ShippingDetails
    payment: PaymentSelection


@dataclass(frozen=True, slots=True)
class CheckoutView:
    """Read model of a session for the UI."""

    step: Step
    completed: frozenset[Step]
    processing: bool = False
    closed: bool = False

    @property
    def display_step(self) -> str:
        return PROCESSING if self.processing else self.step.value

    def can_visit(self, step: Step) -> bool:
        return not self.processing and not self.closed and (
            step is self.step or step in self.completed
        )


__all__ = (
    "Step",
    "STEPS",
    "PROCESSING",
    "ShippingAddress",
    "ShippingDetails",
    "CheckoutRequest",
    "CheckoutView",
)
