"""
Cart types — line items, snapshots and totals.

All immutable. A Cart is a snapshot: the aggregate swaps whole snapshots,
it never edits one in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from collections.abc import Iterator

from emporium._types import ProductId, ZERO, money


# ═══════════════════════════════════════════════════════════════════════════════
# Pricing & Availability
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PriceQuote:
    """
    Current price and stock for one product.

    Note: Authoritative, never cached across round trips.
    max_quantity None means unbounded.
    """

    product_id: ProductId
    name: str
    unit_price: Decimal
    discounted_unit_price: Decimal | None = None
    is_available: bool = True
    max_quantity: int | None = None

    @property
    def effective_price(self) -> Decimal:
        return effective_price(self.unit_price, self.discounted_unit_price)


def effective_price(unit_price: Decimal, discounted: Decimal | None) -> Decimal:
    """A discount price counts only when it is set and positive."""
    if discounted is not None and discounted > 0:
        return money(discounted)
    return money(unit_price)


# ═══════════════════════════════════════════════════════════════════════════════
# Line Item
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLineItem:
    """
    One product/quantity pairing.

    total_price is derived from quantity and price on every read.
    Server snapshots may carry quantity > max_quantity after stock dropped;
    such lines are kept as reported and flagged `over_limit`.
    """

    product_id: ProductId
    quantity: int
    unit_price: Decimal
    discounted_unit_price: Decimal | None = None
    name: str = ""
    is_available: bool = True
    max_quantity: int | None = None
    sku: str | None = None
    image: str | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(
                f"line for product {self.product_id} has quantity {self.quantity}"
            )

    @classmethod
    def from_quote(cls, quote: PriceQuote, quantity: int) -> CartLineItem:
        return cls(
            product_id=quote.product_id,
            quantity=quantity,
            unit_price=quote.unit_price,
            discounted_unit_price=quote.discounted_unit_price,
            name=quote.name,
            is_available=quote.is_available,
            max_quantity=quote.max_quantity,
        )

    @property
    def effective_price(self) -> Decimal:
        return effective_price(self.unit_price, self.discounted_unit_price)

    @property
    def total_price(self) -> Decimal:
        return money(self.effective_price * self.quantity)

    @property
    def savings(self) -> Decimal:
        """What the discount price saves on this line."""
        return money((money(self.unit_price) - self.effective_price) * self.quantity)

    @property
    def over_limit(self) -> bool:
        return self.max_quantity is not None and self.quantity > self.max_quantity

    @property
    def is_eligible(self) -> bool:
        """Can go through checkout as is."""
        return self.is_available and not self.over_limit

    def with_quantity(self, quantity: int) -> CartLineItem:
        return replace(self, quantity=quantity)


# ═══════════════════════════════════════════════════════════════════════════════
# Totals
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartAdjustments:
    """Server-computed amounts on top of the item subtotal."""

    tax: Decimal = ZERO
    shipping: Decimal = ZERO
    discount: Decimal = ZERO


@dataclass(frozen=True, slots=True)
class CartTotals:
    total_items: int
    subtotal: Decimal
    tax: Decimal = ZERO
    shipping: Decimal = ZERO
    discount: Decimal = ZERO

    @property
    def grand_total(self) -> Decimal:
        """subtotal + tax + shipping − discount, floored at zero."""
        return max(ZERO, money(self.subtotal + self.tax + self.shipping - self.discount))


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Snapshot
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Cart:
    """
    Cart snapshot. Items keep display order; product ids are unique.

    Example:
        cart = Cart().with_item(CartLineItem(7, 2, Decimal("10.00")))
        cart.totals().subtotal  # Decimal("20.00")
    """

    items: tuple[CartLineItem, ...] = ()
    adjustments: CartAdjustments = field(default_factory=CartAdjustments)
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        seen: set[ProductId] = set()
        for item in self.items:
            if item.product_id in seen:
                raise ValueError(f"duplicate line for product {item.product_id}")
            seen.add(item.product_id)

    def __iter__(self) -> Iterator[CartLineItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, product_id: object) -> bool:
        return self.get(product_id) is not None  # type: ignore[arg-type]

    def get(self, product_id: ProductId) -> CartLineItem | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> Decimal:
        return money(sum((item.total_price for item in self.items), ZERO))

    @property
    def ineligible(self) -> tuple[CartLineItem, ...]:
        """Lines that block checkout (unavailable or above stock)."""
        return tuple(item for item in self.items if not item.is_eligible)

    def totals(self) -> CartTotals:
        """Pure function of the current items. Unavailable lines still count."""
        return CartTotals(
            total_items=self.total_items,
            subtotal=self.subtotal,
            tax=self.adjustments.tax,
            shipping=self.adjustments.shipping,
            discount=self.adjustments.discount,
        )

    def with_item(self, item: CartLineItem) -> Cart:
        """Replace the line for item.product_id, or append it."""
        if item.product_id in self:
            items = tuple(
                item if existing.product_id == item.product_id else existing
                for existing in self.items
            )
        else:
            items = (*self.items, item)
        return replace(self, items=items)

    def without(self, product_id: ProductId) -> Cart:
        return replace(
            self,
            items=tuple(item for item in self.items if item.product_id != product_id),
        )


EMPTY_CART = Cart()


__all__ = (
    "PriceQuote",
    "effective_price",
    "CartLineItem",
    "CartAdjustments",
    "CartTotals",
    "Cart",
    "EMPTY_CART",
)
