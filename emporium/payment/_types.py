"""
Payment types — the five-way payment selection as a tagged union.

Each variant carries only its own fields, so a stale card number cannot
ride along with a cash-on-delivery order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PaymentMethod(Enum):
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    PAYPAL = "PAYPAL"
    DIGITAL_WALLET = "DIGITAL_WALLET"
    CASH_ON_DELIVERY = "CASH_ON_DELIVERY"

    @property
    def is_card(self) -> bool:
        return self in (PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD)


class WalletType(Enum):
    APPLE_PAY = "apple_pay"
    GOOGLE_PAY = "google_pay"
    SAMSUNG_PAY = "samsung_pay"


# ═══════════════════════════════════════════════════════════════════════════════
# Variants
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CardPayment:
    """Credit or debit card. card_number holds digits only."""

    method: PaymentMethod
    card_number: str
    card_holder_name: str
    expiry_month: int
    expiry_year: int
    cvv: str

    @property
    def masked_number(self) -> str:
        return f"•••• {self.card_number[-4:]}"

    def __repr__(self) -> str:
        return (
            f"CardPayment(method={self.method.name}, card_number={self.masked_number!r}, "
            f"expiry={self.expiry_month:02d}/{self.expiry_year})"
        )


@dataclass(frozen=True, slots=True)
class PayPalPayment:
    email: str

    @property
    def method(self) -> PaymentMethod:
        return PaymentMethod.PAYPAL


@dataclass(frozen=True, slots=True)
class WalletPayment:
    wallet_type: WalletType

    @property
    def method(self) -> PaymentMethod:
        return PaymentMethod.DIGITAL_WALLET


@dataclass(frozen=True, slots=True)
class CashOnDelivery:
    @property
    def method(self) -> PaymentMethod:
        return PaymentMethod.CASH_ON_DELIVERY


type PaymentSelection = CardPayment | PayPalPayment | WalletPayment | CashOnDelivery


# Draft fields owned by each method; everything else is cleared on select()
CARD_FIELDS = ("card_number", "card_holder_name", "expiry_month", "expiry_year", "cvv")

METHOD_FIELDS: dict[PaymentMethod, tuple[str, ...]] = {
    PaymentMethod.CREDIT_CARD: CARD_FIELDS,
    PaymentMethod.DEBIT_CARD: CARD_FIELDS,
    PaymentMethod.PAYPAL: ("paypal_email",),
    PaymentMethod.DIGITAL_WALLET: ("wallet_type",),
    PaymentMethod.CASH_ON_DELIVERY: (),
}


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
)
