"""
In-memory gateway — a single-shopper backend living in the process.

Implements the backend's rules (stock, availability, order amounts) so the
engine can run without a server: tests, demos, local development.

Note: Only for single-instance use / tests. State is lost on restart.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from collections.abc import Callable

from kungfu import Result, Ok, Error
import structlog

from emporium._types import ProductId, ZERO, money
from emporium.cart._types import Cart, CartLineItem, PriceQuote
from emporium.checkout._types import CheckoutRequest
from emporium.config import Settings
from emporium.errors import GatewayError, GatewayErrorKind, OrderNotFound, StockConflict
from emporium.payment import PaymentMethod
from emporium.tracking._lifecycle import can_transition
from emporium.tracking._types import Order, OrderItem, OrderStatus, PaymentStatus


log = structlog.get_logger(__name__)


def _not_found(message: str) -> GatewayError:
    return GatewayError(GatewayErrorKind.NOT_FOUND, message, 404)


def _invalid(message: str) -> GatewayError:
    return GatewayError(GatewayErrorKind.VALIDATION, message, 400)


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    id: ProductId
    name: str
    price: Decimal
    discount_price: Decimal | None = None
    inventory: int = 0
    active: bool = True

    def quote(self) -> PriceQuote:
        return PriceQuote(
            product_id=self.id,
            name=self.name,
            unit_price=money(self.price),
            discounted_unit_price=(
                money(self.discount_price) if self.discount_price is not None else None
            ),
            is_available=self.active and self.inventory > 0,
            max_quantity=self.inventory,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# MemoryGateway
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryGateway:
    """
    CommerceGateway backed by dicts.

    Example:
        gateway = MemoryGateway(latency=0.01).seed(
            Product(7, "Resistance Band", Decimal("12.00"), inventory=3),
        )
        gateway.fail_next("add_item", GatewayError(GatewayErrorKind.SERVER, "boom"))
        gateway.advance("ORD-1001", OrderStatus.SHIPPED)

    `calls` records every protocol call in order.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        latency: float = 0.0,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._settings = settings or Settings()
        self._latency = latency
        self._today = today
        self._products: dict[ProductId, Product] = {}
        self._lines: dict[ProductId, int] = {}
        self._orders: dict[str, Order] = {}
        self._sequence = 1000
        self._failures: dict[str, GatewayError] = {}
        self._lock = asyncio.Lock()
        self.calls: list[str] = []

    # ═══════════════════════════════════════════════════════════════════════
    # Setup (not part of the protocol)
    # ═══════════════════════════════════════════════════════════════════════

    def seed(self, *products: Product) -> MemoryGateway:
        for product in products:
            self._products[product.id] = product
        return self

    def set_stock(self, product_id: ProductId, inventory: int) -> None:
        self._products[product_id] = replace(self._products[product_id], inventory=inventory)

    def set_active(self, product_id: ProductId, active: bool) -> None:
        self._products[product_id] = replace(self._products[product_id], active=active)

    def put_line(self, product_id: ProductId, quantity: int) -> None:
        """Place a line directly, bypassing stock rules."""
        self._lines[product_id] = quantity

    def fail_next(self, call: str, error: GatewayError) -> None:
        """Make the next `call` (e.g. "remove_item") return `error`."""
        self._failures[call] = error

    def stock(self, product_id: ProductId) -> int:
        return self._products[product_id].inventory

    def advance(self, order_number: str, status: OrderStatus) -> Result[Order, GatewayError]:
        """Server-side lifecycle event. Illegal transitions are refused."""
        order = self._orders.get(order_number)
        if order is None:
            return Error(_not_found(f"Order {order_number} not found"))
        if not can_transition(order.status, status):
            return Error(
                _invalid(f"Cannot move order from {order.status.name} to {status.name}")
            )
        tracking = order.tracking_number
        if status is OrderStatus.SHIPPED and tracking is None:
            tracking = f"TRK-{order_number.removeprefix('ORD-')}"
        payment_status = order.payment_status
        if status is OrderStatus.RETURNED and payment_status is PaymentStatus.PAID:
            payment_status = PaymentStatus.REFUNDED
        updated = replace(
            order, status=status, tracking_number=tracking, payment_status=payment_status
        )
        self._orders[order_number] = updated
        log.info("order_advanced", order_number=order_number, status=status.name)
        return Ok(updated)

    # ═══════════════════════════════════════════════════════════════════════
    # Plumbing
    # ═══════════════════════════════════════════════════════════════════════

    async def _enter(self, call: str) -> GatewayError | None:
        self.calls.append(call)
        if self._latency:
            await asyncio.sleep(self._latency)
        return self._failures.pop(call, None)

    def _snapshot(self) -> Cart:
        items = []
        for product_id, quantity in self._lines.items():
            product = self._products[product_id]
            items.append(
                CartLineItem(
                    product_id=product_id,
                    quantity=quantity,
                    unit_price=money(product.price),
                    discounted_unit_price=(
                        money(product.discount_price)
                        if product.discount_price is not None
                        else None
                    ),
                    name=product.name,
                    is_available=product.active,
                    max_quantity=product.inventory,
                )
            )
        return Cart(items=tuple(items), updated_at=datetime.now())

    def _check_quantity(self, product: Product, quantity: int) -> GatewayError | None:
        if not product.active:
            return _invalid("Product is not available")
        if quantity > product.inventory:
            return StockConflict(message="Not enough inventory available")
        return None

    # ═══════════════════════════════════════════════════════════════════════
    # Cart
    # ═══════════════════════════════════════════════════════════════════════

    async def get_cart(self) -> Result[Cart, GatewayError]:
        if failure := await self._enter("get_cart"):
            return Error(failure)
        async with self._lock:
            return Ok(self._snapshot())

    async def add_item(self, product_id: ProductId, quantity: int) -> Result[Cart, GatewayError]:
        if failure := await self._enter("add_item"):
            return Error(failure)
        async with self._lock:
            product = self._products.get(product_id)
            if product is None:
                return Error(_not_found("Product not found"))
            if quantity < 1:
                return Error(_invalid("Quantity must be at least 1"))
            target = self._lines.get(product_id, 0) + quantity
            if problem := self._check_quantity(product, target):
                return Error(problem)
            self._lines[product_id] = target
            return Ok(self._snapshot())

    async def update_item(
        self, product_id: ProductId, quantity: int
    ) -> Result[Cart, GatewayError]:
        if failure := await self._enter("update_item"):
            return Error(failure)
        async with self._lock:
            if product_id not in self._lines:
                return Error(_not_found("Item not found in cart"))
            if quantity < 0:
                return Error(_invalid("Quantity cannot be negative"))
            if quantity == 0:
                del self._lines[product_id]
                return Ok(self._snapshot())
            if problem := self._check_quantity(self._products[product_id], quantity):
                return Error(problem)
            self._lines[product_id] = quantity
            return Ok(self._snapshot())

    async def remove_item(self, product_id: ProductId) -> Result[Cart, GatewayError]:
        if failure := await self._enter("remove_item"):
            return Error(failure)
        async with self._lock:
            if self._lines.pop(product_id, None) is None:
                return Error(_not_found("Item not found in cart"))
            return Ok(self._snapshot())

    async def clear_cart(self) -> Result[None, GatewayError]:
        if failure := await self._enter("clear_cart"):
            return Error(failure)
        async with self._lock:
            self._lines.clear()
            return Ok(None)

    async def validate_cart(self) -> Result[bool, GatewayError]:
        if failure := await self._enter("validate_cart"):
            return Error(failure)
        async with self._lock:
            return Ok(
                all(
                    self._check_quantity(self._products[pid], quantity) is None
                    for pid, quantity in self._lines.items()
                )
            )

    async def quote(self, product_id: ProductId) -> Result[PriceQuote, GatewayError]:
        if failure := await self._enter("quote"):
            return Error(failure)
        product = self._products.get(product_id)
        if product is None:
            return Error(_not_found("Product not found"))
        return Ok(product.quote())

    # ═══════════════════════════════════════════════════════════════════════
    # Orders
    # ═══════════════════════════════════════════════════════════════════════

    async def checkout(self, request: CheckoutRequest) -> Result[Order, GatewayError]:
        """
        Create the order from the current cart.

        Amounts: subtotal at list price, discount from discount prices,
        shipping and tax on the discounted amount; frozen on the order.
        Stock is decremented and the cart emptied.
        """
        if failure := await self._enter("checkout"):
            return Error(failure)
        async with self._lock:
            if not self._lines:
                return Error(_invalid("Cart is empty"))
            for pid, quantity in self._lines.items():
                if problem := self._check_quantity(self._products[pid], quantity):
                    return Error(problem)

            quotes = {pid: self._products[pid].quote() for pid in self._lines}
            items = tuple(
                OrderItem(
                    product_id=pid,
                    name=quotes[pid].name,
                    quantity=quantity,
                    price=quotes[pid].unit_price,
                    discount_price=quotes[pid].discounted_unit_price,
                )
                for pid, quantity in self._lines.items()
            )
            subtotal = money(sum((item.price * item.quantity for item in items), ZERO))
            net = money(sum((item.total_price for item in items), ZERO))
            shipping = self._settings.shipping_for(net, request.shipping.address.country)
            tax = self._settings.tax_for(net)

            self._sequence += 1
            number = f"ORD-{self._sequence}"
            paid_now = request.payment.method is not PaymentMethod.CASH_ON_DELIVERY
            order = Order(
                order_number=number,
                status=OrderStatus.CONFIRMED if paid_now else OrderStatus.PENDING,
                payment_method=request.payment.method,
                payment_status=PaymentStatus.PAID if paid_now else PaymentStatus.PENDING,
                items=items,
                shipping_address=request.shipping.address.formatted(),
                subtotal=subtotal,
                tax_amount=tax,
                shipping_amount=shipping,
                discount_amount=money(subtotal - net),
                total_amount=money(net + shipping + tax),
                estimated_delivery_date=self._today()
                + timedelta(days=self._settings.delivery_days),
                customer_notes=request.shipping.notes,
                created_at=datetime.now(),
            )
            self._orders[number] = order
            for item in items:
                self.set_stock(item.product_id, self.stock(item.product_id) - item.quantity)
            self._lines.clear()
            log.info("order_created", order_number=number, total=str(order.total_amount))
            return Ok(order)

    async def track_order(self, order_number: str) -> Result[Order, OrderNotFound | GatewayError]:
        if failure := await self._enter("track_order"):
            return Error(failure)
        order = self._orders.get(order_number)
        if order is None:
            return Error(OrderNotFound(order_number))
        return Ok(order)


__all__ = ("Product", "MemoryGateway")
