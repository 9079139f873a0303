"""
CartMutationCoordinator — one in-flight mutation per line, server wins.

Flow for every mutation:
    1. Guard      — reject if the line (or the whole cart) is busy
    2. Validate   — fresh product quote, then local checks
    3. Round trip — one mutating gateway call, no retry
    4. Reconcile  — the returned snapshot replaces the aggregate wholesale

Removal skips the quote. A NOT_FOUND from the delete is followed by one
GET /cart and counts as success.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from kungfu import Result, Ok, Error
import combinators as C
from combinators import lift as L
import structlog

from emporium._types import Lazy, ProductId
from emporium.cart._aggregate import CartAggregate
from emporium.cart._ops import AddItem, SetQuantity, RemoveItem, CartOp
from emporium.cart._types import Cart, CartTotals, PriceQuote
from emporium.errors import (
    CartError,
    GatewayError,
    MutationInProgress,
    StockConflict,
)

if TYPE_CHECKING:
    from emporium.gateway import CommerceGateway


log = structlog.get_logger(__name__)


class CartMutationCoordinator:
    """
    Serializes cart mutations per product and keeps the aggregate in sync.

    Note: Reject-if-busy, never queue. Different products may be in flight
    together; clear() needs the whole cart idle.

    Example:
        coordinator = CartMutationCoordinator(gateway)
        await coordinator.refresh()
        match await coordinator.add(7, 2):
            case Ok(cart): ...
            case Error(MutationInProgress()): ...  # keep the spinner
            case Error(err): show(str(err))
    """

    def __init__(
        self,
        gateway: CommerceGateway,
        aggregate: CartAggregate | None = None,
    ) -> None:
        self._gateway = gateway
        self._aggregate = aggregate if aggregate is not None else CartAggregate()
        self._in_flight: set[ProductId] = set()
        self._clearing = False
        self._stale = False

    # ═══════════════════════════════════════════════════════════════════════
    # State
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def cart(self) -> Cart:
        return self._aggregate.cart

    def totals(self) -> CartTotals:
        return self._aggregate.totals()

    @property
    def in_flight(self) -> frozenset[ProductId]:
        return frozenset(self._in_flight)

    def is_busy(self, product_id: ProductId | None = None) -> bool:
        """Line busy, or (with no product) anything busy."""
        if product_id is None:
            return self._clearing or bool(self._in_flight)
        return self._clearing or product_id in self._in_flight

    @property
    def needs_refresh(self) -> bool:
        """A stock conflict happened and the follow-up fetch failed."""
        return self._stale

    # ═══════════════════════════════════════════════════════════════════════
    # Mutations
    # ═══════════════════════════════════════════════════════════════════════

    async def add(self, product_id: ProductId, quantity: int = 1) -> Result[Cart, CartError]:
        return await self.mutate(product_id, AddItem(quantity))

    async def set_quantity(self, product_id: ProductId, quantity: int) -> Result[Cart, CartError]:
        return await self.mutate(product_id, SetQuantity(quantity))

    async def remove(self, product_id: ProductId) -> Result[Cart, CartError]:
        return await self.mutate(product_id, RemoveItem())

    async def mutate(self, product_id: ProductId, op: CartOp) -> Result[Cart, CartError]:
        # Check and claim happen before the first await
        if self.is_busy(product_id):
            log.debug("mutation_rejected", product_id=product_id, op=type(op).__name__)
            return Error(MutationInProgress(product_id))
        if self._stale:
            return Error(StockConflict(message="Cart changed on the server, refresh it first"))

        self._in_flight.add(product_id)
        try:
            match op:
                case AddItem(quantity):
                    return await self._add(product_id, quantity)
                case SetQuantity(quantity) if quantity <= 0:
                    return await self._remove(product_id)
                case SetQuantity(quantity):
                    return await self._set(product_id, quantity)
                case RemoveItem():
                    return await self._remove(product_id)
        finally:
            self._in_flight.discard(product_id)

    async def clear(self) -> Result[Cart, MutationInProgress | GatewayError]:
        if self.is_busy():
            log.debug("clear_rejected", in_flight=sorted(self._in_flight))
            return Error(MutationInProgress(None))

        self._clearing = True
        try:
            match await self._gateway.clear_cart():
                case Ok(_):
                    self._aggregate.clear()
                    self._stale = False
                    log.info("cart_cleared")
                    return Ok(self.cart)
                case Error(e):
                    log.warning("cart_clear_failed", kind=e.kind.name, error=str(e))
                    return Error(e)
        finally:
            self._clearing = False

    # ═══════════════════════════════════════════════════════════════════════
    # Reads
    # ═══════════════════════════════════════════════════════════════════════

    async def refresh(self) -> Result[Cart, GatewayError]:
        """Re-fetch the server cart. A missing cart is an empty one."""
        match await self._gateway.get_cart():
            case Ok(cart):
                self._aggregate.replace(cart)
                self._stale = False
                log.info("cart_refreshed", lines=len(cart), total_items=cart.total_items)
                return Ok(cart)
            case Error(e):
                log.warning("cart_refresh_failed", kind=e.kind.name, error=str(e))
                return Error(e)

    async def recover_from_conflict(self) -> None:
        """
        Re-fetch after a stock conflict.

        Note: If the fetch fails, mutations stay blocked (needs_refresh)
        until a later refresh() succeeds.
        """
        match await self.refresh():
            case Ok(_):
                pass
            case Error(_):
                self._stale = True

    async def validate(self) -> Result[bool, GatewayError]:
        """Server-side check for stock/price drift."""
        result = await self._gateway.validate_cart()
        if isinstance(result, Ok) and not result.value:
            log.info("cart_invalid")
        return result

    def reset(self) -> None:
        """Drop the local copy after the server emptied the cart (order placed)."""
        self._aggregate.clear()

    # ═══════════════════════════════════════════════════════════════════════
    # Internals
    # ═══════════════════════════════════════════════════════════════════════

    async def _quote(self, product_id: ProductId) -> Result[PriceQuote, GatewayError]:
        result = await self._gateway.quote(product_id)
        if isinstance(result, Error):
            log.warning("quote_failed", product_id=product_id, error=str(result.error))
        return result

    async def _add(self, product_id: ProductId, quantity: int) -> Result[Cart, CartError]:
        # The line's own max may predate a restock or a sell-out
        match await self._quote(product_id):
            case Ok(fresh):
                quote = fresh
            case Error(e):
                return Error(e)

        match self._aggregate.check_add(product_id, quantity, quote):
            case Error(e):
                log.debug("add_invalid", product_id=product_id, error=str(e))
                return Error(e)
            case Ok(_):
                return await self._round_trip(
                    product_id, L.call(self._gateway.add_item, product_id, quantity)
                )

    async def _set(self, product_id: ProductId, quantity: int) -> Result[Cart, CartError]:
        quote: PriceQuote | None = None
        if quantity > 0 and product_id in self.cart:
            match await self._quote(product_id):
                case Ok(fresh):
                    quote = fresh
                case Error(e):
                    return Error(e)

        match self._aggregate.check_set(product_id, quantity, quote):
            case Error(e):
                log.debug("set_invalid", product_id=product_id, error=str(e))
                return Error(e)
            case Ok(_):
                return await self._round_trip(
                    product_id, L.call(self._gateway.update_item, product_id, quantity)
                )

    async def _remove(self, product_id: ProductId) -> Result[Cart, CartError]:
        def already_gone(e: GatewayError) -> Lazy[Cart, GatewayError]:
            if e.is_not_found:
                log.info("remove_absent", product_id=product_id)
                return L.call(self._gateway.get_cart)
            return L.fail(e)

        removal = C.fallback_with(
            L.call(self._gateway.remove_item, product_id),
            secondary=already_gone,
        )
        return await self._round_trip(product_id, removal)

    async def _round_trip(
        self, product_id: ProductId, call: Lazy[Cart, GatewayError]
    ) -> Result[Cart, CartError]:
        reconciled = C.tap(call, effect=self._aggregate.replace)
        match await reconciled:
            case Ok(cart):
                log.info("cart_reconciled", product_id=product_id, total_items=cart.total_items)
                return Ok(cart)
            case Error(e):
                log.warning("mutation_failed", product_id=product_id, kind=e.kind.name, error=str(e))
                if isinstance(e, StockConflict):
                    await self.recover_from_conflict()
                return Error(e)


__all__ = ("CartMutationCoordinator",)
