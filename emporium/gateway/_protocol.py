"""
Gateway protocol — the REST backend as the engine sees it.

Every method is async and returns Result; transport problems arrive as
GatewayError, never as exceptions.
"""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

from kungfu import Result

from emporium._types import ProductId
from emporium.errors import GatewayError, OrderNotFound

if TYPE_CHECKING:
    from emporium.cart import Cart, PriceQuote
    from emporium.checkout import CheckoutRequest
    from emporium.tracking import Order


class CommerceGateway(Protocol):
    """
    Backend contract.

    Note: get_cart maps "not found" to Ok(empty cart).
    track_order maps "not found" to OrderNotFound.
    Cart mutations answer with the authoritative snapshot.
    """

    async def get_cart(self) -> Result[Cart, GatewayError]: ...

    async def add_item(
        self, product_id: ProductId, quantity: int
    ) -> Result[Cart, GatewayError]: ...

    async def update_item(
        self, product_id: ProductId, quantity: int
    ) -> Result[Cart, GatewayError]: ...

    async def remove_item(self, product_id: ProductId) -> Result[Cart, GatewayError]: ...

    async def clear_cart(self) -> Result[None, GatewayError]: ...

    async def validate_cart(self) -> Result[bool, GatewayError]:
        """True when every line is still purchasable at its quantity."""
        ...

    async def quote(self, product_id: ProductId) -> Result[PriceQuote, GatewayError]:
        """Fresh price and availability for one product."""
        ...

    async def checkout(self, request: CheckoutRequest) -> Result[Order, GatewayError]: ...

    async def track_order(
        self, order_number: str
    ) -> Result[Order, OrderNotFound | GatewayError]: ...


__all__ = ("CommerceGateway",)
