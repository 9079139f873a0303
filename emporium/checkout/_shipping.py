"""
Shipping step validation.

Field rules live on a pydantic model; the first failing field (in form
order) becomes a ShippingValidationError.
"""

from __future__ import annotations

from dataclasses import asdict, replace

from kungfu import Result, Ok, Error
from pydantic import BaseModel, ConfigDict, Field, ValidationError
import structlog

from emporium.checkout._types import ShippingAddress, ShippingDetails
from emporium.errors import ShippingValidationError


log = structlog.get_logger(__name__)

PHONE_PATTERN = r"^[+]?[(]?[\d\s()-]{10,}$"
NOTES_MAX = 500


class AddressForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    first_name: str = Field(min_length=2)
    last_name: str = Field(min_length=2)
    phone: str = Field(min_length=10, pattern=PHONE_PATTERN)
    street: str = Field(min_length=5)
    city: str = Field(min_length=2, max_length=100)
    state: str = Field(min_length=2)
    zip_code: str = Field(min_length=3)
    country: str = Field(min_length=2)

    def to_domain(self) -> ShippingAddress:
        return ShippingAddress(**self.model_dump())


def validate_address(
    address: ShippingAddress,
    *,
    prefix: str = "",
) -> Result[ShippingAddress, ShippingValidationError]:
    """Validate and trim. Field names get `prefix` (e.g. "billing.")."""
    try:
        form = AddressForm.model_validate(asdict(address))
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        return Error(ShippingValidationError(prefix + field, first["msg"]))
    return Ok(form.to_domain())


def validate_shipping(
    details: ShippingDetails,
) -> Result[ShippingDetails, ShippingValidationError]:
    """Shipping address, then billing (if given), then notes."""
    match validate_address(details.address):
        case Error(e):
            log.debug("shipping_invalid", field=e.field)
            return Error(e)
        case Ok(address):
            pass

    billing = None
    if details.billing is not None:
        match validate_address(details.billing, prefix="billing."):
            case Error(e):
                log.debug("shipping_invalid", field=e.field)
                return Error(e)
            case Ok(billing):
                pass

    notes = (details.notes or "").strip() or None
    if notes is not None and len(notes) > NOTES_MAX:
        return Error(
            ShippingValidationError("notes", f"Notes must be at most {NOTES_MAX} characters")
        )

    return Ok(replace(details, address=address, billing=billing, notes=notes))


__all__ = (
    "PHONE_PATTERN",
    "NOTES_MAX",
    "AddressForm",
    "validate_address",
    "validate_shipping",
)
