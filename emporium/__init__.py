"""
emporium — commerce transaction engine.

    from emporium import cart as K        # Cart aggregate + mutation coordinator
    from emporium import checkout as CO   # Checkout step machine
    from emporium import payment as P     # Payment variants + validation
    from emporium import tracking as T    # Order lifecycle + progress view
    from emporium import gateway as GW    # REST / in-memory backends
"""

from emporium import errors
from emporium import cart
from emporium import payment
from emporium import checkout
from emporium import tracking
from emporium import gateway
from emporium._types import Lazy, ProductId, money
from emporium.config import Settings
from emporium.log import configure_logging

__version__ = "0.1.0"

__all__ = (
    "errors",
    "cart",
    "payment",
    "checkout",
    "tracking",
    "gateway",
    "Lazy",
    "ProductId",
    "money",
    "Settings",
    "configure_logging",
)
