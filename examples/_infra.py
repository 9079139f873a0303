"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from decimal import Decimal

from emporium import configure_logging
from emporium.checkout import ShippingAddress, ShippingDetails
from emporium.gateway import MemoryGateway, Product


# Catalog
CATALOG = (
    Product(7, "Resistance Band", Decimal("12.00"), inventory=3),
    Product(8, "Yoga Mat", Decimal("40.00"), discount_price=Decimal("30.00"), inventory=10),
    Product(9, "Protein Shaker", Decimal("8.50"), inventory=0),
    Product(11, "Foam Roller", Decimal("24.00"), inventory=5),
)


def shop(latency: float = 0.05) -> MemoryGateway:
    return MemoryGateway(latency=latency).seed(*CATALOG)


DETAILS = ShippingDetails(
    address=ShippingAddress(
        first_name="Ada",
        last_name="Uwase",
        phone="+250 788 123 456",
        street="KG 11 Ave 24",
        city="Kigali",
        state="Kigali City",
        zip_code="00000",
        country="RW",
    ),
    notes="Leave at the gate",
)


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    configure_logging("WARNING")
    asyncio.run(main())
