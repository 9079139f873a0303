"""
CartAggregate — one shopper's line items and their rules.

Validation is split from mutation: check_add / check_set are pure and are
what the coordinator runs before touching the network. add_item / set_quantity
apply the same checks locally.
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from emporium._types import ProductId
from emporium.cart._types import Cart, CartLineItem, CartTotals, PriceQuote, EMPTY_CART
from emporium.errors import InvalidQuantity, LineItemMissing, ProductUnavailable


type AddError = InvalidQuantity | ProductUnavailable | LineItemMissing
type SetError = InvalidQuantity | LineItemMissing


class CartAggregate:
    """
    Owns the current cart snapshot.

    Note: Provisional until reconciled — after each server round trip the
    coordinator calls replace() with the authoritative snapshot.
    """

    __slots__ = ("_cart",)

    def __init__(self, cart: Cart = EMPTY_CART) -> None:
        self._cart = cart

    @property
    def cart(self) -> Cart:
        return self._cart

    def totals(self) -> CartTotals:
        return self._cart.totals()

    def replace(self, cart: Cart) -> None:
        """Reconcile: the given snapshot wins wholesale."""
        self._cart = cart

    # ═══════════════════════════════════════════════════════════════════════
    # Checks (pure, no mutation)
    # ═══════════════════════════════════════════════════════════════════════

    def check_add(
        self,
        product_id: ProductId,
        quantity: int,
        quote: PriceQuote | None = None,
    ) -> Result[int, AddError]:
        """
        Resulting line quantity if `quantity` more were added.

        Adding to an existing line never duplicates it: the quantities sum,
        and a sum above the maximum is rejected, not clamped.
        A fresh quote, when given, supplies availability and the maximum.
        """
        if quantity < 1:
            return Error(InvalidQuantity(product_id, quantity))

        existing = self._cart.get(product_id)
        if existing is None and quote is None:
            return Error(LineItemMissing(product_id))

        if quote is not None and not quote.is_available:
            return Error(ProductUnavailable(product_id))

        if quote is not None:
            maximum = quote.max_quantity
        else:
            assert existing is not None
            maximum = existing.max_quantity

        target = quantity + (existing.quantity if existing is not None else 0)
        if maximum is not None and target > maximum:
            return Error(InvalidQuantity(product_id, target, maximum))
        return Ok(target)

    def check_set(
        self,
        product_id: ProductId,
        quantity: int,
        quote: PriceQuote | None = None,
    ) -> Result[int, SetError]:
        """
        Validate an absolute quantity for an existing line.

        Note: 0 or below is valid and means removal.
        A fresh quote, when given, supplies the maximum.
        """
        existing = self._cart.get(product_id)
        if existing is None:
            return Error(LineItemMissing(product_id))
        if quantity <= 0:
            return Ok(0)
        maximum = quote.max_quantity if quote is not None else existing.max_quantity
        if maximum is not None and quantity > maximum:
            return Error(InvalidQuantity(product_id, quantity, maximum))
        return Ok(quantity)

    # ═══════════════════════════════════════════════════════════════════════
    # Local mutations
    # ═══════════════════════════════════════════════════════════════════════

    def add_item(
        self,
        product_id: ProductId,
        quantity: int,
        quote: PriceQuote | None = None,
    ) -> Result[Cart, AddError]:
        match self.check_add(product_id, quantity, quote):
            case Ok(target):
                existing = self._cart.get(product_id)
                if existing is not None:
                    line = existing.with_quantity(target)
                else:
                    assert quote is not None
                    line = CartLineItem.from_quote(quote, target)
                self._cart = self._cart.with_item(line)
                return Ok(self._cart)
            case Error(e):
                return Error(e)

    def set_quantity(self, product_id: ProductId, quantity: int) -> Result[Cart, SetError]:
        """Set an absolute quantity. 0 or below removes the line."""
        match self.check_set(product_id, quantity):
            case Ok(0):
                return Ok(self.remove_item(product_id))
            case Ok(target):
                line = self._cart.get(product_id)
                assert line is not None
                self._cart = self._cart.with_item(line.with_quantity(target))
                return Ok(self._cart)
            case Error(e):
                return Error(e)

    def remove_item(self, product_id: ProductId) -> Cart:
        """Idempotent: removing an absent product is a no-op."""
        self._cart = self._cart.without(product_id)
        return self._cart

    def clear(self) -> Cart:
        self._cart = EMPTY_CART
        return self._cart


__all__ = ("CartAggregate", "AddError", "SetError")
