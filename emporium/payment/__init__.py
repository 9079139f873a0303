"""
Payment — method selection and per-variant validation.

    from emporium import payment as P

    match P.validate_payment(P.PaymentMethod.PAYPAL, {"paypal_email": "ada@mail.com"}):
        case Ok(selection): ...          # PayPalPayment
        case Error(err): err.field       # "paypal_email"
"""

from emporium.payment._types import (
    PaymentMethod,
    WalletType,
    CardPayment,
    PayPalPayment,
    WalletPayment,
    CashOnDelivery,
    PaymentSelection,
    CARD_FIELDS,
    METHOD_FIELDS,
)
from emporium.payment._validate import (
    normalize_card_number,
    validate_card,
    validate_paypal,
    validate_wallet,
    validate_payment,
    PaymentForm,
)

__all__ = (
    "PaymentMethod",
    "WalletType",
    "CardPayment",
    "PayPalPayment",
    "WalletPayment",
    "CashOnDelivery",
    "PaymentSelection",
    "CARD_FIELDS",
    "METHOD_FIELDS",
    "normalize_card_number",
    "validate_card",
    "validate_paypal",
    "validate_wallet",
    "validate_payment",
    "PaymentForm",
)
