"""
Settings — pricing rules and backend connection.

Fluent and immutable, like every policy object in emporium:

    settings = (
        Settings()
        .with_base_url("https://shop.example.com/api")
        .with_timeout(seconds=5)
        .with_shipping_rate("KE", "12.00")
    )

Or from the environment (a .env file is loaded first):

    settings = Settings.from_env()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from decimal import Decimal

from dotenv import load_dotenv

from emporium._types import money


# ═══════════════════════════════════════════════════════════════════════════════
# Shipping Zones
# ═══════════════════════════════════════════════════════════════════════════════

type ShippingZone = tuple[tuple[str, ...], Decimal]
"""Country codes (or names) sharing one flat rate."""

DEFAULT_ZONES: tuple[ShippingZone, ...] = (
    (("RW", "RWANDA"), Decimal("5.00")),
    (("US", "CA", "GB"), Decimal("15.00")),
    (("AU", "DE", "FR", "IT", "ES"), Decimal("20.00")),
)


# ═══════════════════════════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Engine configuration.

    Note: Immutable — each with_* returns a new Settings.
    The pricing fields mirror the backend so the review-step preview
    matches the order it creates.
    """

    base_url: str = "http://localhost:8080/api"
    request_timeout: float = 10.0
    tax_rate: Decimal = Decimal("0.10")
    free_shipping_threshold: Decimal = Decimal("100.00")
    shipping_zones: tuple[ShippingZone, ...] = DEFAULT_ZONES
    default_shipping_rate: Decimal = Decimal("25.00")
    default_country: str = "RW"
    delivery_days: int = 7
    card_expiry_window_years: int = 10
    log_level: str = "INFO"

    def shipping_rate(self, country: str | None) -> Decimal:
        """Flat rate for a country. Blank country falls back to default_country."""
        key = (country or "").strip().upper() or self.default_country
        for codes, rate in self.shipping_zones:
            if key in codes:
                return rate
        return self.default_shipping_rate

    def shipping_for(self, subtotal: Decimal, country: str | None) -> Decimal:
        """Shipping charge: free at or above the threshold."""
        if subtotal >= self.free_shipping_threshold:
            return money(0)
        return self.shipping_rate(country)

    def tax_for(self, subtotal: Decimal) -> Decimal:
        return money(subtotal * self.tax_rate)

    def with_base_url(self, url: str) -> Settings:
        return replace(self, base_url=url.rstrip("/"))

    def with_timeout(self, *, seconds: float) -> Settings:
        return replace(self, request_timeout=seconds)

    def with_tax_rate(self, rate: Decimal | str) -> Settings:
        """
        Set tax as a fraction of subtotal.

        Example:
            .with_tax_rate("0.18")
        """
        return replace(self, tax_rate=Decimal(rate))

    def with_free_shipping(self, threshold: Decimal | str) -> Settings:
        return replace(self, free_shipping_threshold=money(threshold))

    def with_shipping_rate(self, country: str, rate: Decimal | str) -> Settings:
        """Override (or add) one country's rate. Takes precedence over zones."""
        zone: ShippingZone = ((country.strip().upper(),), money(rate))
        return replace(self, shipping_zones=(zone, *self.shipping_zones))

    def with_default_shipping(self, rate: Decimal | str, *, country: str | None = None) -> Settings:
        return replace(
            self,
            default_shipping_rate=money(rate),
            default_country=(country or self.default_country).upper(),
        )

    def with_delivery_days(self, days: int) -> Settings:
        return replace(self, delivery_days=days)

    def with_log_level(self, level: str) -> Settings:
        return replace(self, log_level=level.upper())

    @classmethod
    def from_env(
        cls,
        prefix: str = "EMPORIUM_",
        *,
        dotenv_path: str | os.PathLike[str] | None = None,
    ) -> Settings:
        """
        Build from environment variables. Unset keys keep their defaults.

        Reads {prefix}BASE_URL, REQUEST_TIMEOUT, TAX_RATE,
        FREE_SHIPPING_THRESHOLD, DELIVERY_DAYS, LOG_LEVEL.
        """
        load_dotenv(dotenv_path)
        settings = cls()

        def env(name: str) -> str | None:
            value = os.environ.get(prefix + name)
            return value if value else None

        if (url := env("BASE_URL")) is not None:
            settings = settings.with_base_url(url)
        if (timeout := env("REQUEST_TIMEOUT")) is not None:
            settings = settings.with_timeout(seconds=float(timeout))
        if (rate := env("TAX_RATE")) is not None:
            settings = settings.with_tax_rate(rate)
        if (threshold := env("FREE_SHIPPING_THRESHOLD")) is not None:
            settings = settings.with_free_shipping(threshold)
        if (days := env("DELIVERY_DAYS")) is not None:
            settings = settings.with_delivery_days(int(days))
        if (level := env("LOG_LEVEL")) is not None:
            settings = settings.with_log_level(level)
        return settings


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ShippingZone",
    "DEFAULT_ZONES",
    "Settings",
)
