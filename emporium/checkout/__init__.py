"""
Checkout — the step machine from shipping to a placed order.

    from emporium import checkout as CO

    session = CO.CheckoutOrchestrator.begin(coordinator, gateway).unwrap()

    session.submit_shipping(CO.ShippingDetails(address))
    session.submit_payment(form)            # PaymentForm or built selection
    estimate = (await session.review()).unwrap()

    match await session.submit():
        case Ok(order): order.order_number
        case Error(err): session.view.step  # Step.PAYMENT

While the order call is in flight, session.view.display_step is "processing".
"""

from emporium.checkout._types import (
    Step,
    STEPS,
    PROCESSING,
    ShippingAddress,
    ShippingDetails,
    CheckoutRequest,
    CheckoutView,
)
from emporium.checkout._shipping import (
    AddressForm,
    validate_address,
    validate_shipping,
)
from emporium.checkout._preview import OrderPreview, preview
from emporium.checkout._orchestrator import CheckoutOrchestrator

__all__ = (
    "Step",
    "STEPS",
    "PROCESSING",
    "ShippingAddress",
    "ShippingDetails",
    "CheckoutRequest",
    "CheckoutView",
    "AddressForm",
    "validate_address",
    "validate_shipping",
    "OrderPreview",
    "preview",
    "CheckoutOrchestrator",
)
