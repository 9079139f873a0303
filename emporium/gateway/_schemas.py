"""
Wire schemas — camelCase JSON in and out of the REST backend.

Inbound payloads convert with to_domain(), outbound ones with from_domain();
nothing outside the gateway sees these classes.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from emporium._types import ZERO, money
from emporium.cart._types import Cart, CartAdjustments, CartLineItem, PriceQuote
from emporium.checkout._types import CheckoutRequest, ShippingAddress
from emporium.payment import (
    CardPayment,
    CashOnDelivery,
    PaymentMethod,
    PaymentSelection,
    PayPalPayment,
    WalletPayment,
)
from emporium.tracking._types import Order, OrderItem, OrderStatus, PaymentStatus


class Wire(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def unwrap_envelope(body: Any) -> Any:
    """Accept both bare DTOs and {success, data, message} envelopes."""
    if isinstance(body, dict) and "data" in body and "success" in body:
        return body["data"]
    return body


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


class CartItemPayload(Wire):
    id: int | None = None
    product_id: int
    product_name: str = ""
    quantity: int
    unit_price: Decimal
    discounted_unit_price: Decimal | None = None
    total_price: Decimal | None = None
    product_image: str | None = None
    product_sku: str | None = None
    max_quantity: int | None = None
    is_available: bool = True

    def to_domain(self) -> CartLineItem:
        # totalPrice is ignored: recomputed from quantity and price
        return CartLineItem(
            product_id=self.product_id,
            quantity=self.quantity,
            unit_price=money(self.unit_price),
            discounted_unit_price=(
                money(self.discounted_unit_price)
                if self.discounted_unit_price is not None
                else None
            ),
            name=self.product_name,
            is_available=self.is_available,
            max_quantity=self.max_quantity,
            sku=self.product_sku,
            image=self.product_image,
        )


class CartPayload(Wire):
    id: int | None = None
    items: list[CartItemPayload] = Field(default_factory=list)
    total_items: int | None = None
    total_price: Decimal | None = None
    subtotal: Decimal | None = None
    tax_amount: Decimal | None = None
    shipping_amount: Decimal | None = None
    discount_amount: Decimal | None = None
    updated_at: datetime | None = None

    def to_domain(self) -> Cart:
        return Cart(
            # A line reported at zero has been removed
            items=tuple(item.to_domain() for item in self.items if item.quantity > 0),
            adjustments=CartAdjustments(
                tax=money(self.tax_amount or ZERO),
                shipping=money(self.shipping_amount or ZERO),
                discount=money(self.discount_amount or ZERO),
            ),
            updated_at=self.updated_at,
        )


class AddItemPayload(Wire):
    product_id: int
    quantity: int


class UpdateItemPayload(Wire):
    quantity: int


class ValidationPayload(Wire):
    valid: bool


class ProductPayload(Wire):
    id: int
    name: str
    price: Decimal
    discount_price: Decimal | None = None
    inventory_count: int | None = None
    is_active: bool = True

    def to_domain(self) -> PriceQuote:
        in_stock = self.inventory_count is None or self.inventory_count > 0
        return PriceQuote(
            product_id=self.id,
            name=self.name,
            unit_price=money(self.price),
            discounted_unit_price=(
                money(self.discount_price) if self.discount_price is not None else None
            ),
            is_available=self.is_active and in_stock,
            max_quantity=self.inventory_count,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout
# ═══════════════════════════════════════════════════════════════════════════════


class AddressPayload(Wire):
    first_name: str
    last_name: str
    phone: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str

    @classmethod
    def from_domain(cls, address: ShippingAddress) -> AddressPayload:
        return cls(
            first_name=address.first_name,
            last_name=address.last_name,
            phone=address.phone,
            street=address.street,
            city=address.city,
            state=address.state,
            zip_code=address.zip_code,
            country=address.country,
        )


class PaymentDetailsPayload(Wire):
    card_number: str | None = None
    card_holder_name: str | None = None
    expiry_month: int | None = None
    expiry_year: int | None = None
    cvv: str | None = None
    paypal_email: str | None = None
    wallet_type: str | None = None

    @classmethod
    def from_domain(cls, payment: PaymentSelection) -> PaymentDetailsPayload | None:
        """Only the selected variant's fields; None for cash on delivery."""
        match payment:
            case CardPayment():
                return cls(
                    card_number=payment.card_number,
                    card_holder_name=payment.card_holder_name,
                    expiry_month=payment.expiry_month,
                    expiry_year=payment.expiry_year,
                    cvv=payment.cvv,
                )
            case PayPalPayment(email):
                return cls(paypal_email=email)
            case WalletPayment(wallet_type):
                return cls(wallet_type=wallet_type.value)
            case CashOnDelivery():
                return None


class CheckoutPayload(Wire):
    payment_method: PaymentMethod
    payment_details: PaymentDetailsPayload | None = None
    shipping_address: AddressPayload
    billing_address: AddressPayload | None = None
    customer_notes: str | None = None

    @classmethod
    def from_domain(cls, request: CheckoutRequest) -> CheckoutPayload:
        shipping = request.shipping
        return cls(
            payment_method=request.payment.method,
            payment_details=PaymentDetailsPayload.from_domain(request.payment),
            shipping_address=AddressPayload.from_domain(shipping.address),
            billing_address=(
                AddressPayload.from_domain(shipping.billing)
                if shipping.billing is not None
                else None
            ),
            customer_notes=shipping.notes,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class OrderItemPayload(Wire):
    product_id: int
    product_name: str = ""
    quantity: int
    price: Decimal
    discount_price: Decimal | None = None
    total_price: Decimal | None = None

    def to_domain(self) -> OrderItem:
        return OrderItem(
            product_id=self.product_id,
            name=self.product_name,
            quantity=self.quantity,
            price=money(self.price),
            discount_price=(
                money(self.discount_price) if self.discount_price is not None else None
            ),
        )


class OrderPayload(Wire):
    order_number: str
    status: OrderStatus
    payment_method: PaymentMethod
    payment_status: PaymentStatus = PaymentStatus.PENDING
    items: list[OrderItemPayload] = Field(default_factory=list)
    shipping_address: str = ""
    subtotal: Decimal
    tax_amount: Decimal = ZERO
    shipping_amount: Decimal = ZERO
    discount_amount: Decimal = ZERO
    total_amount: Decimal
    tracking_number: str | None = None
    estimated_delivery_date: datetime | date | None = None
    customer_notes: str | None = None
    created_at: datetime | None = None

    def to_domain(self) -> Order:
        eta = self.estimated_delivery_date
        return Order(
            order_number=self.order_number,
            status=self.status,
            payment_method=self.payment_method,
            payment_status=self.payment_status,
            items=tuple(item.to_domain() for item in self.items),
            shipping_address=self.shipping_address,
            subtotal=money(self.subtotal),
            tax_amount=money(self.tax_amount),
            shipping_amount=money(self.shipping_amount),
            discount_amount=money(self.discount_amount),
            total_amount=money(self.total_amount),
            tracking_number=self.tracking_number,
            estimated_delivery_date=eta.date() if isinstance(eta, datetime) else eta,
            customer_notes=self.customer_notes,
            created_at=self.created_at,
        )


__all__ = (
    "Wire",
    "unwrap_envelope",
    "CartItemPayload",
    "CartPayload",
    "AddItemPayload",
    "UpdateItemPayload",
    "ValidationPayload",
    "ProductPayload",
    "AddressPayload",
    "PaymentDetailsPayload",
    "CheckoutPayload",
    "OrderItemPayload",
    "OrderPayload",
)
