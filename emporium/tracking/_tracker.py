"""
OrderLifecycleTracker — fetch an order and project its progress.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from kungfu import Result, Ok, Error
import structlog

from emporium.errors import GatewayError, OrderNotFound
from emporium.tracking._projection import project, badge_for, tone_for
from emporium.tracking._types import Order, OrderStatus, TrackingView

if TYPE_CHECKING:
    from emporium.gateway import CommerceGateway


log = structlog.get_logger(__name__)


class OrderLifecycleTracker:
    """
    Read-only view over server order status.

    Note: Remembers the last happy-path status per order so a later
    CANCELLED / RETURNED keeps the progress the order had reached.
    Never retries; OrderNotFound is final.
    """

    def __init__(self, gateway: CommerceGateway) -> None:
        self._gateway = gateway
        self._last_known: dict[str, OrderStatus] = {}

    async def track(self, order_number: str) -> Result[TrackingView, OrderNotFound | GatewayError]:
        number = order_number.strip()
        if not number:
            return Error(OrderNotFound(order_number))

        match await self._gateway.track_order(number):
            case Ok(order):
                view = self.view_of(order)
                log.info("order_tracked", order_number=number, status=order.status.name)
                return Ok(view)
            case Error(OrderNotFound() as e):
                log.info("order_not_found", order_number=number)
                return Error(e)
            case Error(e):
                log.warning("order_track_failed", order_number=number, error=str(e))
                return Error(e)

    def view_of(self, order: Order) -> TrackingView:
        status = order.status
        if not status.is_branch:
            self._last_known[order.order_number] = status
        return TrackingView(
            order=order,
            steps=project(status, self._last_known.get(order.order_number)),
            badge=badge_for(status),
            tone=tone_for(status),
        )

    def last_known(self, order_number: str) -> OrderStatus | None:
        return self._last_known.get(order_number)


__all__ = ("OrderLifecycleTracker",)
