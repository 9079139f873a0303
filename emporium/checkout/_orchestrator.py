"""
CheckoutOrchestrator — shipping → payment → review → success.

Rules:
    - A step joins `completed` only after its data validated
    - go_to() lands on the current step or a completed one whose
      predecessors are all completed; never skips forward
    - Landing back keeps the step completed; a failed re-submit drops it
    - submit() is one external call guarded by a processing flag; failure
      sends the shopper back to payment, not review
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from collections.abc import Callable

from kungfu import Result, Ok, Error
import structlog

from emporium.cart import CartMutationCoordinator
from emporium.checkout._preview import OrderPreview, preview
from emporium.checkout._shipping import validate_shipping
from emporium.checkout._types import (
    Step,
    STEPS,
    CheckoutRequest,
    CheckoutView,
    ShippingDetails,
)
from emporium.config import Settings
from emporium.errors import (
    CheckoutError,
    CheckoutErrorCode,
    GatewayError,
    PaymentValidationError,
    ShippingValidationError,
    StockConflict,
)
from emporium.payment import PaymentForm, PaymentSelection

if TYPE_CHECKING:
    from emporium.gateway import CommerceGateway
    from emporium.tracking import Order


log = structlog.get_logger(__name__)

type StepResult[E] = Result[CheckoutView, E | CheckoutError]


def _denied(code: CheckoutErrorCode, message: str) -> Error[CheckoutError]:
    return Error(CheckoutError(code, message))


class CheckoutOrchestrator:
    """
    One checkout session over the shopper's cart.

    Example:
        match CheckoutOrchestrator.begin(coordinator, gateway, settings):
            case Ok(session):
                session.submit_shipping(details)
                session.submit_payment(form)
                match await session.submit():
                    case Ok(order): ...
                    case Error(err): ...  # session.view.step is PAYMENT again
    """

    def __init__(
        self,
        coordinator: CartMutationCoordinator,
        gateway: CommerceGateway,
        settings: Settings | None = None,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._coordinator = coordinator
        self._gateway = gateway
        self._settings = settings or Settings()
        self._today = today
        self._step = Step.SHIPPING
        self._completed: set[Step] = set()
        self._processing = False
        self._closed = False
        self._shipping: ShippingDetails | None = None
        self._payment: PaymentSelection | None = None
        self._order: Order | None = None

    @classmethod
    def begin(
        cls,
        coordinator: CartMutationCoordinator,
        gateway: CommerceGateway,
        settings: Settings | None = None,
        *,
        today: Callable[[], date] = date.today,
    ) -> Result[CheckoutOrchestrator, CheckoutError]:
        """Open a session. The cart must be non-empty and fully purchasable."""
        cart = coordinator.cart
        if cart.is_empty:
            return _denied(CheckoutErrorCode.CART_INELIGIBLE, "Your cart is empty")
        if blocked := cart.ineligible:
            log.info("checkout_blocked", products=[item.product_id for item in blocked])
            return _denied(
                CheckoutErrorCode.CART_INELIGIBLE,
                "Some items are unavailable or exceed stock, update your cart first",
            )
        log.info("checkout_started", lines=len(cart), total_items=cart.total_items)
        return Ok(cls(coordinator, gateway, settings, today=today))

    # ═══════════════════════════════════════════════════════════════════════
    # State
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def view(self) -> CheckoutView:
        return CheckoutView(
            step=self._step,
            completed=frozenset(self._completed),
            processing=self._processing,
            closed=self._closed,
        )

    @property
    def shipping(self) -> ShippingDetails | None:
        return self._shipping

    @property
    def payment(self) -> PaymentSelection | None:
        return self._payment

    @property
    def order(self) -> Order | None:
        return self._order

    def _guard(self) -> CheckoutError | None:
        if self._closed:
            return CheckoutError(CheckoutErrorCode.SESSION_CLOSED, "This checkout has ended")
        if self._processing:
            return CheckoutError(
                CheckoutErrorCode.SUBMISSION_IN_PROGRESS, "Your order is being placed"
            )
        return None

    def _require_step(self, step: Step) -> CheckoutError | None:
        if self._step is not step:
            return CheckoutError(
                CheckoutErrorCode.STEP_INCOMPLETE,
                f"Not on the {step.value} step (currently {self._step.value})",
            )
        return None

    def _reachable(self, target: Step) -> bool:
        if target is self._step:
            return True
        if target is Step.SUCCESS or target not in self._completed:
            return False
        return all(step in self._completed for step in STEPS[: target.index])

    # ═══════════════════════════════════════════════════════════════════════
    # Navigation
    # ═══════════════════════════════════════════════════════════════════════

    def go_to(self, target: Step) -> StepResult[CheckoutError]:
        if (denied := self._guard()) is not None:
            return Error(denied)
        if not self._reachable(target):
            log.debug("navigation_denied", current=self._step.value, target=target.value)
            return _denied(
                CheckoutErrorCode.NAVIGATION_DENIED,
                f"Cannot go to {target.value} from {self._step.value}",
            )
        self._step = target
        return Ok(self.view)

    def _advance(self, step: Step) -> CheckoutView:
        self._completed.add(step)
        next_step = step.next
        assert next_step is not None
        self._step = next_step
        log.info("checkout_step_completed", step=step.value, next=next_step.value)
        return self.view

    def _invalidate(self, step: Step) -> None:
        if step in self._completed:
            self._completed.discard(step)
            log.info("checkout_step_reopened", step=step.value)

    # ═══════════════════════════════════════════════════════════════════════
    # Steps
    # ═══════════════════════════════════════════════════════════════════════

    def submit_shipping(self, details: ShippingDetails) -> StepResult[ShippingValidationError]:
        if (denied := self._guard() or self._require_step(Step.SHIPPING)) is not None:
            return Error(denied)
        match validate_shipping(details):
            case Ok(valid):
                self._shipping = valid
                return Ok(self._advance(Step.SHIPPING))
            case Error(e):
                self._invalidate(Step.SHIPPING)
                return Error(e)

    def submit_payment(
        self, payment: PaymentForm | PaymentSelection
    ) -> StepResult[PaymentValidationError]:
        """Accept a draft form (validated here) or an already built selection."""
        if (denied := self._guard() or self._require_step(Step.PAYMENT)) is not None:
            return Error(denied)
        if isinstance(payment, PaymentForm):
            built = payment.build(
                today=self._today(),
                window_years=self._settings.card_expiry_window_years,
            )
        else:
            built = Ok(payment)
        match built:
            case Ok(selection):
                self._payment = selection
                return Ok(self._advance(Step.PAYMENT))
            case Error(e):
                self._invalidate(Step.PAYMENT)
                return Error(e)

    async def review(self) -> Result[OrderPreview, CheckoutError]:
        """Estimated totals for the review step."""
        if (denied := self._guard() or self._require_step(Step.REVIEW)) is not None:
            return Error(denied)
        assert self._shipping is not None
        return Ok(await preview(self._coordinator.cart, self._shipping, self._settings))

    # ═══════════════════════════════════════════════════════════════════════
    # Submission
    # ═══════════════════════════════════════════════════════════════════════

    async def submit(self) -> Result[Order, CheckoutError | GatewayError]:
        """
        Place the order.

        Note: Runs validate_cart first; a drifted cart fails as StockConflict
        and the cart is re-fetched. Any failure lands on the payment step.
        While the cart still needs that re-fetch, submission is refused
        without a network call and the step is kept.
        """
        if (denied := self._guard() or self._require_step(Step.REVIEW)) is not None:
            return Error(denied)
        if self._coordinator.needs_refresh:
            log.info("order_refused_stale_cart")
            return Error(StockConflict(message="Cart changed on the server, refresh it first"))
        assert self._shipping is not None and self._payment is not None

        request = CheckoutRequest(shipping=self._shipping, payment=self._payment)
        self._processing = True
        log.info("order_submitting", method=self._payment.method.name)
        try:
            result = await self._place(request)
        finally:
            self._processing = False

        match result:
            case Ok(order):
                self._order = order
                self._advance(Step.REVIEW)
                self._closed = True
                self._coordinator.reset()
                log.info("order_placed", order_number=order.order_number)
                return Ok(order)
            case Error(e):
                self._step = Step.PAYMENT
                log.warning("order_failed", kind=e.kind.name, error=str(e))
                if isinstance(e, StockConflict):
                    await self._coordinator.recover_from_conflict()
                return Error(e)

    async def _place(self, request: CheckoutRequest) -> Result[Order, GatewayError]:
        match await self._coordinator.validate():
            case Error(e):
                return Error(e)
            case Ok(False):
                return Error(StockConflict(message="Some items changed, please review your cart"))
            case Ok(_):
                return await self._gateway.checkout(request)

    def cancel(self) -> None:
        """Discard the session. Ignored while an order call is in flight."""
        if self._processing or self._closed:
            return
        self._closed = True
        log.info("checkout_cancelled", step=self._step.value)


__all__ = ("CheckoutOrchestrator",)
