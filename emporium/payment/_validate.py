"""
PaymentMethodValidator — per-variant validation and normalization.

Only the selected method's fields are looked at. Each validator reports the
first offending field, in form order.

    form = PaymentForm()
    form.select(PaymentMethod.CREDIT_CARD)
    form.fill(card_number="4242 4242 4242 4242", card_holder_name="Ada",
              expiry_month=12, expiry_year=2030, cvv="123")
    match form.build():
        case Ok(selection): ...
        case Error(err): err.field  # "card_number", "cvv", ...
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from datetime import date
from typing import Any

from kungfu import Result, Ok, Error
from pydantic import EmailStr, TypeAdapter, ValidationError
import structlog

from emporium.errors import PaymentValidationError
from emporium.payment._types import (
    PaymentMethod,
    WalletType,
    CardPayment,
    PayPalPayment,
    WalletPayment,
    CashOnDelivery,
    PaymentSelection,
    METHOD_FIELDS,
)


log = structlog.get_logger(__name__)

_SEPARATORS = re.compile(r"[\s-]+")
_DIGITS = re.compile(r"[0-9]+")
_EMAIL = TypeAdapter(EmailStr)

type Validated[T] = Result[T, PaymentValidationError]


def _fail(field: str, message: str) -> Error[PaymentValidationError]:
    return Error(PaymentValidationError(field, message))


def _text(value: object) -> str:
    # Form widgets may hand over numbers
    return "" if value is None else str(value).strip()


# ═══════════════════════════════════════════════════════════════════════════════
# Card
# ═══════════════════════════════════════════════════════════════════════════════


def normalize_card_number(raw: object) -> str:
    """Strip spaces and dashes."""
    return _SEPARATORS.sub("", _text(raw))


def validate_card(
    method: PaymentMethod,
    *,
    card_number: str | int,
    card_holder_name: str,
    expiry_month: int | str,
    expiry_year: int | str,
    cvv: str | int,
    today: date | None = None,
    window_years: int = 10,
) -> Validated[CardPayment]:
    """
    Card rules:
        card_number       13–19 digits after separators are stripped
        card_holder_name  non-empty after trimming
        expiry_month      1–12
        expiry_year       this year .. this year + window_years; not in the past
        cvv               3–4 digits
    """
    if not method.is_card:
        raise ValueError(f"{method.name} is not a card method")
    today = today or date.today()

    number = normalize_card_number(card_number)
    if not _DIGITS.fullmatch(number):
        return _fail("card_number", "Card number must contain only digits")
    if not 13 <= len(number) <= 19:
        return _fail("card_number", "Card number must be 13 to 19 digits")

    holder = _text(card_holder_name)
    if not holder:
        return _fail("card_holder_name", "Cardholder name is required")

    month = _as_int(expiry_month)
    if month is None or not 1 <= month <= 12:
        return _fail("expiry_month", "Expiry month must be between 1 and 12")

    year = _as_int(expiry_year)
    if year is None or not today.year <= year <= today.year + window_years:
        return _fail(
            "expiry_year",
            f"Expiry year must be between {today.year} and {today.year + window_years}",
        )
    if (year, month) < (today.year, today.month):
        return _fail("expiry_month", "Card has expired")

    code = _text(cvv)
    if not _DIGITS.fullmatch(code) or not 3 <= len(code) <= 4:
        return _fail("cvv", "CVV must be 3 or 4 digits")

    return Ok(CardPayment(method, number, holder, month, year, code))


def _as_int(value: object) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = _text(value)
    return int(text) if _DIGITS.fullmatch(text) else None


# ═══════════════════════════════════════════════════════════════════════════════
# PayPal / Wallet
# ═══════════════════════════════════════════════════════════════════════════════


def validate_paypal(email: str) -> Validated[PayPalPayment]:
    email = _text(email)
    if "@" not in email:
        return _fail("paypal_email", "PayPal email must contain @")
    try:
        normalized = _EMAIL.validate_python(email)
    except ValidationError:
        return _fail("paypal_email", "Enter a valid PayPal email")
    return Ok(PayPalPayment(normalized))


def validate_wallet(wallet_type: WalletType | str) -> Validated[WalletPayment]:
    if isinstance(wallet_type, WalletType):
        return Ok(WalletPayment(wallet_type))
    try:
        return Ok(WalletPayment(WalletType(_text(wallet_type).lower())))
    except ValueError:
        return _fail("wallet_type", "Select a supported wallet")


# ═══════════════════════════════════════════════════════════════════════════════
# Dispatch
# ═══════════════════════════════════════════════════════════════════════════════


def validate_payment(
    method: PaymentMethod | None,
    values: dict[str, Any],
    *,
    today: date | None = None,
    window_years: int = 10,
) -> Validated[PaymentSelection]:
    """Validate the fields of `method` only; other keys in `values` are ignored."""
    match method:
        case None:
            return _fail("payment_method", "Select a payment method")
        case PaymentMethod.CREDIT_CARD | PaymentMethod.DEBIT_CARD:
            return validate_card(
                method,
                card_number=values.get("card_number") or "",
                card_holder_name=values.get("card_holder_name") or "",
                expiry_month=values.get("expiry_month") or "",
                expiry_year=values.get("expiry_year") or "",
                cvv=values.get("cvv") or "",
                today=today,
                window_years=window_years,
            )
        case PaymentMethod.PAYPAL:
            return validate_paypal(values.get("paypal_email") or "")
        case PaymentMethod.DIGITAL_WALLET:
            return validate_wallet(values.get("wallet_type") or "")
        case PaymentMethod.CASH_ON_DELIVERY:
            return Ok(CashOnDelivery())


# ═══════════════════════════════════════════════════════════════════════════════
# Form Draft
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class PaymentForm:
    """
    Mutable draft behind the payment step.

    Note: select() clears every field the new method does not own, so
    switching card → cash → card requires re-entry.
    """

    method: PaymentMethod | None = None
    card_number: str = ""
    card_holder_name: str = ""
    expiry_month: int | str = ""
    expiry_year: int | str = ""
    cvv: str = ""
    paypal_email: str = ""
    wallet_type: WalletType | str = ""

    def select(self, method: PaymentMethod) -> PaymentForm:
        if method is not self.method:
            self._clear()
        self.method = method
        return self

    def fill(self, **values: Any) -> Validated[PaymentForm]:
        """Set fields of the selected method. Foreign fields are refused."""
        allowed = METHOD_FIELDS[self.method] if self.method else ()
        for name in values:
            if name not in allowed:
                return _fail(name, "Field does not belong to the selected payment method")
        for name, value in values.items():
            setattr(self, name, value)
        return Ok(self)

    def populated(self) -> dict[str, Any]:
        """Non-empty draft fields, method excluded."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "method" and getattr(self, f.name) not in ("", None)
        }

    def build(
        self,
        *,
        today: date | None = None,
        window_years: int = 10,
    ) -> Validated[PaymentSelection]:
        result = validate_payment(
            self.method, self.populated(), today=today, window_years=window_years
        )
        if isinstance(result, Error):
            log.debug(
                "payment_invalid",
                method=self.method.name if self.method else None,
                field=result.error.field,
            )
        return result

    def _clear(self) -> None:
        for f in fields(self):
            if f.name != "method":
                setattr(self, f.name, f.default)


__all__ = (
    "normalize_card_number",
    "validate_card",
    "validate_paypal",
    "validate_wallet",
    "validate_payment",
    "PaymentForm",
)
