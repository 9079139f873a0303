"""Shared fixtures: a seeded in-memory backend and valid checkout data."""

from datetime import date
from decimal import Decimal

import pytest
import structlog

from emporium.cart import CartMutationCoordinator
from emporium.checkout import ShippingAddress, ShippingDetails
from emporium.config import Settings
from emporium.gateway import MemoryGateway, Product
from emporium.payment import PaymentForm, PaymentMethod


TODAY = date(2026, 3, 15)

BAND = Product(7, "Resistance Band", Decimal("12.00"), inventory=3)
MAT = Product(8, "Yoga Mat", Decimal("40.00"), discount_price=Decimal("30.00"), inventory=10)
SHAKER = Product(9, "Protein Shaker", Decimal("8.50"), inventory=0)
RETIRED = Product(10, "Old Tee", Decimal("15.00"), inventory=5, active=False)


@pytest.fixture(autouse=True)
def logs():
    capture = structlog.testing.LogCapture()
    structlog.configure(processors=[capture])
    yield capture
    structlog.reset_defaults()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def gateway(settings: Settings) -> MemoryGateway:
    return MemoryGateway(settings, today=lambda: TODAY).seed(BAND, MAT, SHAKER, RETIRED)


@pytest.fixture
def slow_gateway(settings: Settings) -> MemoryGateway:
    return MemoryGateway(settings, latency=0.02, today=lambda: TODAY).seed(
        BAND, MAT, SHAKER, RETIRED
    )


@pytest.fixture
def coordinator(gateway: MemoryGateway) -> CartMutationCoordinator:
    return CartMutationCoordinator(gateway)


@pytest.fixture
def address() -> ShippingAddress:
    return ShippingAddress(
        first_name="Ada",
        last_name="Uwase",
        phone="+250 788 123 456",
        street="KG 11 Ave 24",
        city="Kigali",
        state="Kigali City",
        zip_code="00000",
        country="RW",
    )


@pytest.fixture
def details(address: ShippingAddress) -> ShippingDetails:
    return ShippingDetails(address=address, notes="Leave at the gate")


@pytest.fixture
def card_form() -> PaymentForm:
    form = PaymentForm().select(PaymentMethod.CREDIT_CARD)
    form.fill(
        card_number="4242 4242 4242 4242",
        card_holder_name="Ada Uwase",
        expiry_month=12,
        expiry_year=2028,
        cvv="123",
    )
    return form
