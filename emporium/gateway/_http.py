"""
HTTP gateway — CommerceGateway over httpx.

    async with HttpGateway(settings) as gateway:
        cart = await gateway.get_cart()

Status mapping:
    400 / 422  → VALIDATION
    401 / 403  → UNAUTHORIZED
    404        → NOT_FOUND (empty cart for GET /cart, OrderNotFound for tracking)
    409        → StockConflict
    5xx        → SERVER
    transport  → NETWORK / TIMEOUT
"""

from __future__ import annotations

from typing import Any, Self
from collections.abc import Callable
from urllib.parse import quote as quote_path

import httpx
from kungfu import Result, Ok, Error
from combinators import lift as L
from pydantic import BaseModel, ValidationError
import structlog

from emporium._types import Lazy, ProductId
from emporium.cart._types import Cart, PriceQuote, EMPTY_CART
from emporium.checkout._types import CheckoutRequest
from emporium.config import Settings
from emporium.errors import GatewayError, GatewayErrorKind, OrderNotFound, StockConflict
from emporium.gateway._schemas import (
    AddItemPayload,
    CartPayload,
    CheckoutPayload,
    OrderPayload,
    ProductPayload,
    UpdateItemPayload,
    ValidationPayload,
    unwrap_envelope,
)
from emporium.tracking._types import Order


log = structlog.get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Error Mapping
# ═══════════════════════════════════════════════════════════════════════════════


def _kind_for(status: int) -> GatewayErrorKind:
    match status:
        case 400 | 422:
            return GatewayErrorKind.VALIDATION
        case 401 | 403:
            return GatewayErrorKind.UNAUTHORIZED
        case 404:
            return GatewayErrorKind.NOT_FOUND
        case 409:
            return GatewayErrorKind.CONFLICT
        case _ if status >= 500:
            return GatewayErrorKind.SERVER
        case _:
            return GatewayErrorKind.VALIDATION


def error_from_response(response: httpx.Response) -> GatewayError:
    """Build the error from status and the body's message / detail."""
    message = response.reason_phrase or f"HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        detail = body.get("message") or body.get("detail") or body.get("error")
        if isinstance(detail, str) and detail:
            message = detail

    kind = _kind_for(response.status_code)
    if kind is GatewayErrorKind.CONFLICT:
        return StockConflict(message=message, status=response.status_code)
    return GatewayError(kind, message, response.status_code)


def transport_error(exc: Exception) -> GatewayError:
    """httpx failures only; anything else is a bug and propagates."""
    if isinstance(exc, httpx.TimeoutException):
        return GatewayError(GatewayErrorKind.TIMEOUT, "The server took too long to respond")
    if isinstance(exc, httpx.HTTPError):
        return GatewayError(GatewayErrorKind.NETWORK, str(exc) or type(exc).__name__)
    raise exc


# ═══════════════════════════════════════════════════════════════════════════════
# HttpGateway
# ═══════════════════════════════════════════════════════════════════════════════


class HttpGateway:
    """
    REST backend client.

    Note: Owns its AsyncClient unless one is passed in (tests pass one
    built on httpx.MockTransport).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self._settings.base_url,
            timeout=self._settings.request_timeout,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ═══════════════════════════════════════════════════════════════════════
    # Plumbing
    # ═══════════════════════════════════════════════════════════════════════

    def _send(
        self, method: str, path: str, *, body: dict[str, Any] | None = None
    ) -> Lazy[httpx.Response, GatewayError]:
        async def do_send() -> httpx.Response:
            return await self._client.request(method, path, json=body)

        async def check(response: httpx.Response) -> Result[httpx.Response, GatewayError]:
            if response.is_success:
                return Ok(response)
            error = error_from_response(response)
            log.warning(
                "gateway_error",
                method=method,
                path=path,
                status=response.status_code,
                error=error.message,
            )
            return Error(error)

        return L.catching_async(do_send, on_error=transport_error).then(check)

    @staticmethod
    def _parse[M: BaseModel, T](
        response: httpx.Response, model: type[M], convert: Callable[[M], T]
    ) -> Result[T, GatewayError]:
        """Body → payload → domain value. Any failure along the way is SERVER."""
        try:
            return Ok(convert(model.model_validate(unwrap_envelope(response.json()))))
        except (ValueError, ValidationError) as exc:
            log.error("gateway_malformed_response", path=str(response.url), error=str(exc))
            return Error(
                GatewayError(
                    GatewayErrorKind.SERVER,
                    "Malformed response from server",
                    response.status_code,
                )
            )

    async def _cart(
        self, method: str, path: str, *, body: dict[str, Any] | None = None
    ) -> Result[Cart, GatewayError]:
        match await self._send(method, path, body=body):
            case Ok(response):
                return self._parse(response, CartPayload, CartPayload.to_domain)
            case Error(e):
                return Error(e)

    # ═══════════════════════════════════════════════════════════════════════
    # Cart
    # ═══════════════════════════════════════════════════════════════════════

    async def get_cart(self) -> Result[Cart, GatewayError]:
        match await self._send("GET", "/cart"):
            case Ok(response) if not response.content:
                return Ok(EMPTY_CART)
            case Ok(response):
                return self._parse(response, CartPayload, CartPayload.to_domain)
            case Error(e) if e.is_not_found:
                return Ok(EMPTY_CART)
            case Error(e):
                return Error(e)

    async def add_item(self, product_id: ProductId, quantity: int) -> Result[Cart, GatewayError]:
        body = AddItemPayload(product_id=product_id, quantity=quantity).to_json()
        return await self._cart("POST", "/cart/add", body=body)

    async def update_item(
        self, product_id: ProductId, quantity: int
    ) -> Result[Cart, GatewayError]:
        body = UpdateItemPayload(quantity=quantity).to_json()
        return await self._cart("PUT", f"/cart/items/{product_id}", body=body)

    async def remove_item(self, product_id: ProductId) -> Result[Cart, GatewayError]:
        return await self._cart("DELETE", f"/cart/items/{product_id}")

    async def clear_cart(self) -> Result[None, GatewayError]:
        return (await self._send("DELETE", "/cart/clear")).map(lambda _: None)

    async def validate_cart(self) -> Result[bool, GatewayError]:
        match await self._send("GET", "/cart/validate"):
            case Ok(response):
                return self._parse(response, ValidationPayload, lambda v: v.valid)
            case Error(e):
                return Error(e)

    async def quote(self, product_id: ProductId) -> Result[PriceQuote, GatewayError]:
        match await self._send("GET", f"/products/{product_id}"):
            case Ok(response):
                return self._parse(response, ProductPayload, ProductPayload.to_domain)
            case Error(e):
                return Error(e)

    # ═══════════════════════════════════════════════════════════════════════
    # Orders
    # ═══════════════════════════════════════════════════════════════════════

    async def checkout(self, request: CheckoutRequest) -> Result[Order, GatewayError]:
        body = CheckoutPayload.from_domain(request).to_json()
        match await self._send("POST", "/orders/checkout", body=body):
            case Ok(response):
                return self._parse(response, OrderPayload, OrderPayload.to_domain)
            case Error(e):
                return Error(e)

    async def track_order(self, order_number: str) -> Result[Order, OrderNotFound | GatewayError]:
        path = f"/orders/track/{quote_path(order_number, safe='')}"
        match await self._send("GET", path):
            case Ok(response):
                return self._parse(response, OrderPayload, OrderPayload.to_domain)
            case Error(e) if e.is_not_found:
                return Error(OrderNotFound(order_number))
            case Error(e):
                return Error(e)


__all__ = ("HttpGateway", "error_from_response", "transport_error")
