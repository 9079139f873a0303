"""
Gateway — the backend behind the engine.

    from emporium import gateway as GW

    async with GW.HttpGateway(settings) as backend:
        coordinator = CartMutationCoordinator(backend)

    backend = GW.MemoryGateway().seed(GW.Product(7, "Band", Decimal("12.00"), inventory=3))

Both satisfy GW.CommerceGateway; every call returns Result.
"""

from emporium.gateway._protocol import CommerceGateway
from emporium.gateway._http import HttpGateway, error_from_response, transport_error
from emporium.gateway._memory import Product, MemoryGateway
from emporium.gateway import _schemas as schemas

__all__ = (
    "CommerceGateway",
    "HttpGateway",
    "error_from_response",
    "transport_error",
    "Product",
    "MemoryGateway",
    "schemas",
)
