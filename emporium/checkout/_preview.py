"""
Order preview — review-step estimate of what the order will cost.

A small dependency graph (nodnod):

    Cart ──► Subtotal ──┬──► Shipping ◄── ShippingDetails, Settings
                        ├──► Tax      ◄── Settings
                        └──► Preview ◄── Shipping, Tax

Advisory only: the order the backend creates carries the real totals.
"""

from dataclasses import dataclass
from decimal import Decimal

from emporium._graph import node, compose
from emporium._types import ZERO, money
from emporium.cart import Cart
from emporium.checkout._types import ShippingDetails
from emporium.config import Settings


@dataclass(frozen=True, slots=True)
class OrderPreview:
    """Same shape as the order's amounts: total = subtotal − discount + shipping + tax."""

    total_items: int
    subtotal: Decimal
    discount: Decimal
    shipping: Decimal
    tax: Decimal

    @property
    def total(self) -> Decimal:
        return money(self.subtotal - self.discount + self.shipping + self.tax)

    @property
    def free_shipping(self) -> bool:
        return self.shipping == ZERO


@node
class SubtotalNode:
    """List-price subtotal and what discount prices take off it."""

    def __init__(self, total_items: int, gross: Decimal, discount: Decimal) -> None:
        self.total_items = total_items
        self.gross = gross
        self.discount = discount

    @property
    def net(self) -> Decimal:
        return money(self.gross - self.discount)

    @classmethod
    async def __compose__(cls, cart: Cart) -> "SubtotalNode":
        gross = money(sum((money(item.unit_price) * item.quantity for item in cart), ZERO))
        discount = money(sum((item.savings for item in cart), ZERO))
        return cls(cart.total_items, gross, discount)


@node
class ShippingNode:
    def __init__(self, amount: Decimal) -> None:
        self.amount = amount

    @classmethod
    async def __compose__(
        cls, subtotal: SubtotalNode, details: ShippingDetails, settings: Settings
    ) -> "ShippingNode":
        return cls(settings.shipping_for(subtotal.net, details.address.country))


@node
class TaxNode:
    def __init__(self, amount: Decimal) -> None:
        self.amount = amount

    @classmethod
    async def __compose__(cls, subtotal: SubtotalNode, settings: Settings) -> "TaxNode":
        return cls(settings.tax_for(subtotal.net))


@node
class PreviewNode:
    def __init__(self, preview: OrderPreview) -> None:
        self.preview = preview

    @classmethod
    async def __compose__(
        cls, subtotal: SubtotalNode, shipping: ShippingNode, tax: TaxNode
    ) -> "PreviewNode":
        return cls(
            OrderPreview(
                total_items=subtotal.total_items,
                subtotal=subtotal.gross,
                discount=subtotal.discount,
                shipping=shipping.amount,
                tax=tax.amount,
            )
        )


async def preview(cart: Cart, details: ShippingDetails, settings: Settings) -> OrderPreview:
    result = await compose(PreviewNode, cart, details, settings)
    return result.preview


__all__ = (
    "OrderPreview",
    "SubtotalNode",
    "ShippingNode",
    "TaxNode",
    "PreviewNode",
    "preview",
)
