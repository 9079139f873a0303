"""
Cart — line items, totals and serialized mutations.

    from emporium import cart as K

    coordinator = K.CartMutationCoordinator(gateway)
    await coordinator.refresh()

    match await coordinator.add(product_id=7, quantity=2):
        case Ok(cart):
            cart.totals().grand_total
        case Error(K.InvalidQuantity() as err):
            ...  # never reached the network

The aggregate alone is pure and synchronous:

    aggregate = K.CartAggregate(cart)
    aggregate.add_item(7, 5)   # Error(InvalidQuantity) if 2 + 5 > max
"""

from emporium.cart._types import (
    PriceQuote,
    effective_price,
    CartLineItem,
    CartAdjustments,
    CartTotals,
    Cart,
    EMPTY_CART,
)
from emporium.cart._ops import AddItem, SetQuantity, RemoveItem, CartOp
from emporium.cart._aggregate import CartAggregate
from emporium.cart._coordinator import CartMutationCoordinator
from emporium.errors import (
    InvalidQuantity,
    ProductUnavailable,
    LineItemMissing,
    MutationInProgress,
)

__all__ = (
    "PriceQuote",
    "effective_price",
    "CartLineItem",
    "CartAdjustments",
    "CartTotals",
    "Cart",
    "EMPTY_CART",
    "AddItem",
    "SetQuantity",
    "RemoveItem",
    "CartOp",
    "CartAggregate",
    "CartMutationCoordinator",
    "InvalidQuantity",
    "ProductUnavailable",
    "LineItemMissing",
    "MutationInProgress",
)
