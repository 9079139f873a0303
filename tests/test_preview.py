from dataclasses import replace
from decimal import Decimal

import pytest

from emporium.cart import Cart, CartLineItem
from emporium.checkout import CheckoutRequest, preview
from emporium.config import Settings
from emporium.payment import CashOnDelivery


def cart_of(*lines: tuple[int, int, str, str | None]) -> Cart:
    return Cart(
        items=tuple(
            CartLineItem(
                product_id=pid,
                quantity=quantity,
                unit_price=Decimal(price),
                discounted_unit_price=Decimal(discounted) if discounted else None,
            )
            for pid, quantity, price, discounted in lines
        )
    )


async def test_discounted_cart_below_free_shipping(details, settings):
    result = await preview(cart_of((8, 2, "40.00", "30.00")), details, settings)

    assert result.total_items == 2
    assert result.subtotal == Decimal("80.00")
    assert result.discount == Decimal("20.00")
    assert result.shipping == Decimal("5.00")
    assert result.tax == Decimal("6.00")
    assert result.total == Decimal("71.00")
    assert not result.free_shipping


async def test_free_shipping_from_discounted_amount(details, settings):
    # 160 at list price, 120 after discounts
    result = await preview(cart_of((8, 4, "40.00", "30.00")), details, settings)

    assert result.free_shipping
    assert result.tax == Decimal("12.00")
    assert result.total == Decimal("132.00")


@pytest.mark.parametrize(
    ("quantity", "shipping"),
    [(9, "5.00"), (10, "0.00"), (11, "0.00")],
)
async def test_free_shipping_threshold_is_inclusive(details, settings, quantity, shipping):
    result = await preview(cart_of((7, quantity, "10.00", None)), details, settings)

    assert result.shipping == Decimal(shipping)


@pytest.mark.parametrize(
    ("country", "shipping"),
    [("US", "15.00"), ("de", "20.00"), ("Rwanda", "5.00"), ("BR", "25.00"), ("", "5.00")],
)
async def test_shipping_follows_destination(details, settings, country, shipping):
    details = replace(details, address=replace(details.address, country=country))

    result = await preview(cart_of((7, 1, "12.00", None)), details, settings)

    assert result.shipping == Decimal(shipping)


async def test_zero_discount_price_is_ignored(details, settings):
    result = await preview(cart_of((7, 2, "12.00", "0.00")), details, settings)

    assert result.discount == Decimal("0.00")
    assert result.subtotal == Decimal("24.00")


async def test_custom_rates(details):
    settings = Settings().with_tax_rate("0.18").with_shipping_rate("RW", "3.50")

    result = await preview(cart_of((7, 2, "12.00", None)), details, settings)

    assert result.shipping == Decimal("3.50")
    assert result.tax == Decimal("4.32")
    assert result.total == Decimal("31.82")


async def test_preview_matches_created_order(coordinator, gateway, details, settings):
    await coordinator.add(7, 2)
    await coordinator.add(8, 3)
    estimate = await preview(coordinator.cart, details, settings)

    order = (await gateway.checkout(CheckoutRequest(details, CashOnDelivery()))).unwrap()

    assert order.subtotal == estimate.subtotal
    assert order.discount_amount == estimate.discount
    assert order.shipping_amount == estimate.shipping
    assert order.tax_amount == estimate.tax
    assert order.total_amount == estimate.total
    assert order.totals_consistent
