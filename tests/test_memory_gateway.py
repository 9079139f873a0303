from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

import pytest
from kungfu import Ok, Error

from emporium.checkout import CheckoutRequest
from emporium.config import Settings
from emporium.errors import GatewayError, GatewayErrorKind, StockConflict
from emporium.gateway import MemoryGateway
from emporium.payment import CashOnDelivery, PayPalPayment
from emporium.tracking import OrderStatus, PaymentStatus

from tests.conftest import BAND, MAT, RETIRED, TODAY


async def test_cart_rules(gateway):
    assert isinstance(await gateway.add_item(7, 3), Ok)

    over = await gateway.add_item(7, 1)
    assert isinstance(over, Error) and isinstance(over.error, StockConflict)
    assert over.error.message == "Not enough inventory available"

    retired = await gateway.add_item(10, 1)
    assert isinstance(retired, Error) and retired.error.kind is GatewayErrorKind.VALIDATION

    missing = await gateway.add_item(99, 1)
    assert isinstance(missing, Error) and missing.error.is_not_found


async def test_update_to_zero_removes_line(gateway):
    await gateway.add_item(8, 2)

    cart = (await gateway.update_item(8, 0)).unwrap()

    assert cart.is_empty


async def test_remove_absent_line_is_not_found(gateway):
    result = await gateway.remove_item(8)

    assert isinstance(result, Error) and result.error.is_not_found


async def test_snapshot_reports_live_stock(gateway):
    await gateway.add_item(8, 4)
    gateway.set_stock(8, 2)

    line = (await gateway.get_cart()).unwrap().get(8)

    assert line.quantity == 4
    assert line.over_limit
    assert await gateway.validate_cart() == Ok(False)


async def test_injected_failure_fires_once(gateway):
    gateway.fail_next("get_cart", GatewayError(GatewayErrorKind.NETWORK, "offline"))

    assert isinstance(await gateway.get_cart(), Error)
    assert isinstance(await gateway.get_cart(), Ok)
    assert gateway.calls == ["get_cart", "get_cart"]


async def test_quote_reflects_catalog(gateway):
    assert (await gateway.quote(9)).unwrap().is_available is False
    assert (await gateway.quote(10)).unwrap().is_available is False
    assert (await gateway.quote(8)).unwrap() == MAT.quote()


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout
# ═══════════════════════════════════════════════════════════════════════════════


async def test_order_amounts(gateway, details):
    await gateway.add_item(7, 2)
    await gateway.add_item(8, 1)

    order = (await gateway.checkout(CheckoutRequest(details, CashOnDelivery()))).unwrap()

    assert order.order_number == "ORD-1001"
    assert order.subtotal == Decimal("64.00")
    assert order.discount_amount == Decimal("10.00")
    assert order.shipping_amount == Decimal("5.00")
    assert order.tax_amount == Decimal("5.40")
    assert order.total_amount == Decimal("64.40")
    assert order.totals_consistent
    assert order.estimated_delivery_date == TODAY + timedelta(days=7)
    assert order.shipping_address == "Ada Uwase, KG 11 Ave 24, Kigali, Kigali City 00000, RW"


@pytest.mark.parametrize(
    ("payment", "status", "payment_status"),
    [
        (CashOnDelivery(), OrderStatus.PENDING, PaymentStatus.PENDING),
        (PayPalPayment("ada@example.com"), OrderStatus.CONFIRMED, PaymentStatus.PAID),
    ],
)
async def test_initial_status_depends_on_payment(gateway, details, payment, status, payment_status):
    await gateway.add_item(7, 1)

    order = (await gateway.checkout(CheckoutRequest(details, payment))).unwrap()

    assert order.status is status
    assert order.payment_status is payment_status
    assert order.payment_method is payment.method


async def test_checkout_consumes_stock_and_cart(gateway, details):
    await gateway.add_item(7, 2)

    await gateway.checkout(CheckoutRequest(details, CashOnDelivery()))

    assert gateway.stock(7) == BAND.inventory - 2
    assert (await gateway.get_cart()).unwrap().is_empty
    second = await gateway.checkout(CheckoutRequest(details, CashOnDelivery()))
    assert isinstance(second, Error) and second.error.kind is GatewayErrorKind.VALIDATION


async def test_checkout_refuses_drifted_cart(gateway, details):
    gateway.put_line(10, 1)

    result = await gateway.checkout(CheckoutRequest(details, CashOnDelivery()))

    assert isinstance(result, Error)
    assert gateway.stock(10) == RETIRED.inventory


async def test_free_shipping_abroad(details):
    gateway = MemoryGateway(Settings().with_free_shipping("50.00")).seed(MAT)
    details = replace(details, address=replace(details.address, country="US"))
    await gateway.add_item(8, 1)
    small = (await gateway.checkout(CheckoutRequest(details, CashOnDelivery()))).unwrap()
    await gateway.add_item(8, 2)
    large = (await gateway.checkout(CheckoutRequest(details, CashOnDelivery()))).unwrap()

    assert small.shipping_amount == Decimal("15.00")
    assert large.shipping_amount == Decimal("0.00")
    assert large.order_number == "ORD-1002"


# ═══════════════════════════════════════════════════════════════════════════════
# Lifecycle
# ═══════════════════════════════════════════════════════════════════════════════


async def test_advance_enforces_lifecycle(gateway, details):
    await gateway.add_item(7, 1)
    order = (await gateway.checkout(CheckoutRequest(details, CashOnDelivery()))).unwrap()

    skipped = gateway.advance(order.order_number, OrderStatus.SHIPPED)
    assert isinstance(skipped, Error) and skipped.error.kind is GatewayErrorKind.VALIDATION

    cancelled = gateway.advance(order.order_number, OrderStatus.CANCELLED).unwrap()
    assert cancelled.payment_status is PaymentStatus.PENDING
    assert isinstance(gateway.advance(order.order_number, OrderStatus.CONFIRMED), Error)

    assert gateway.advance("ORD-0", OrderStatus.CONFIRMED).error.is_not_found
