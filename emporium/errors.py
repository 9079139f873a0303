"""
Errors — everything the engine can return in the Error channel.

Every error is a frozen dataclass and a CommerceError, so callers can
either match on the concrete type or just read `code` and str(err).

Local errors (InvalidQuantity, ProductUnavailable, LineItemMissing,
MutationInProgress, PaymentValidationError, ShippingValidationError,
CheckoutError) never reach the network. GatewayError and its StockConflict
subtype come from the backend. OrderNotFound ends a tracking lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import ClassVar

from emporium._types import ProductId


class CommerceError(Exception):
    """Base for every engine error."""

    code: ClassVar[str] = "commerce_error"


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class InvalidQuantity(CommerceError):
    """Quantity below 1, or above the line's purchasable maximum."""

    code: ClassVar[str] = "invalid_quantity"

    product_id: ProductId
    requested: int
    maximum: int | None = None

    def __str__(self) -> str:
        if self.requested < 1:
            return f"Quantity must be at least 1 (got {self.requested})"
        return (
            f"Only {self.maximum} of product {self.product_id} can be purchased "
            f"(requested {self.requested})"
        )


@dataclass(frozen=True, slots=True)
class ProductUnavailable(CommerceError):
    code: ClassVar[str] = "product_unavailable"

    product_id: ProductId

    def __str__(self) -> str:
        return f"Product {self.product_id} is not available"


@dataclass(frozen=True, slots=True)
class LineItemMissing(CommerceError):
    code: ClassVar[str] = "line_item_missing"

    product_id: ProductId

    def __str__(self) -> str:
        return f"Product {self.product_id} is not in the cart"


@dataclass(frozen=True, slots=True)
class MutationInProgress(CommerceError):
    """
    Another mutation already owns this line (or the whole cart).

    Note: product_id is None for a cart-wide clear.
    Callers keep the control disabled rather than alert.
    """

    code: ClassVar[str] = "mutation_in_progress"

    product_id: ProductId | None = None

    def __str__(self) -> str:
        if self.product_id is None:
            return "The cart is being updated"
        return f"Product {self.product_id} is being updated"


# ═══════════════════════════════════════════════════════════════════════════════
# Gateway
# ═══════════════════════════════════════════════════════════════════════════════


class GatewayErrorKind(Enum):
    """How a backend round trip failed."""

    NETWORK = auto()  # Transport failure, no response
    TIMEOUT = auto()  # No response within request_timeout
    SERVER = auto()  # 5xx
    VALIDATION = auto()  # 400 / 422
    NOT_FOUND = auto()  # 404
    UNAUTHORIZED = auto()  # 401 / 403
    CONFLICT = auto()  # 409, stock changed underneath us


@dataclass(frozen=True, slots=True)
class GatewayError(CommerceError):
    kind: GatewayErrorKind
    message: str
    status: int | None = None

    @property
    def code(self) -> str:  # type: ignore[override]
        return self.kind.name.lower()

    @property
    def is_not_found(self) -> bool:
        return self.kind is GatewayErrorKind.NOT_FOUND

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class StockConflict(GatewayError):
    """
    Availability changed between validation and submission.

    Note: The cart must be re-fetched before the shopper may retry.
    """

    kind: GatewayErrorKind = GatewayErrorKind.CONFLICT
    message: str = "Stock changed, please review your cart"
    status: int | None = 409


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentValidationError(CommerceError):
    """First offending payment field of the selected method."""

    code: ClassVar[str] = "payment_invalid"

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True, slots=True)
class ShippingValidationError(CommerceError):
    """First offending shipping address field."""

    code: ClassVar[str] = "shipping_invalid"

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class CheckoutErrorCode(Enum):
    NAVIGATION_DENIED = auto()  # Target step not reachable
    STEP_INCOMPLETE = auto()  # Operation needs an earlier step's data
    SUBMISSION_IN_PROGRESS = auto()  # Order call already in flight
    CART_INELIGIBLE = auto()  # Empty cart or unavailable lines
    SESSION_CLOSED = auto()  # Session finished or cancelled


@dataclass(frozen=True, slots=True)
class CheckoutError(CommerceError):
    reason: CheckoutErrorCode
    message: str

    @property
    def code(self) -> str:  # type: ignore[override]
        return self.reason.name.lower()

    def __str__(self) -> str:
        return self.message


# ═══════════════════════════════════════════════════════════════════════════════
# Tracking
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderNotFound(CommerceError):
    code: ClassVar[str] = "order_not_found"

    order_number: str

    def __str__(self) -> str:
        return f"Order {self.order_number} not found"


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

type CartError = (
    InvalidQuantity | ProductUnavailable | LineItemMissing | MutationInProgress | GatewayError
)

__all__ = (
    "CommerceError",
    "InvalidQuantity",
    "ProductUnavailable",
    "LineItemMissing",
    "MutationInProgress",
    "GatewayErrorKind",
    "GatewayError",
    "StockConflict",
    "PaymentValidationError",
    "ShippingValidationError",
    "CheckoutErrorCode",
    "CheckoutError",
    "OrderNotFound",
    "CartError",
)
