import asyncio
from dataclasses import replace
from decimal import Decimal

from kungfu import Ok, Error

from emporium.cart import CartMutationCoordinator
from emporium.checkout import PROCESSING, CheckoutOrchestrator, Step
from emporium.errors import (
    CheckoutError,
    CheckoutErrorCode,
    GatewayError,
    GatewayErrorKind,
    StockConflict,
)
from emporium.payment import CashOnDelivery, PaymentForm, PaymentMethod
from emporium.tracking import OrderStatus, PaymentStatus

from tests.conftest import TODAY


async def open_session(coordinator, gateway) -> CheckoutOrchestrator:
    await coordinator.add(8, 2)
    match CheckoutOrchestrator.begin(coordinator, gateway, today=lambda: TODAY):
        case Ok(session):
            return session
        case Error(e):
            raise AssertionError(e)


def reason(result) -> CheckoutErrorCode:
    assert isinstance(result, Error) and isinstance(result.error, CheckoutError), result
    return result.error.reason


async def test_begin_refuses_empty_cart(coordinator, gateway):
    result = CheckoutOrchestrator.begin(coordinator, gateway)

    assert reason(result) is CheckoutErrorCode.CART_INELIGIBLE


async def test_begin_refuses_cart_with_unavailable_lines(coordinator, gateway):
    await coordinator.add(8, 2)
    gateway.set_active(8, False)
    await coordinator.refresh()

    assert reason(CheckoutOrchestrator.begin(coordinator, gateway)) is CheckoutErrorCode.CART_INELIGIBLE


async def test_happy_path(coordinator, gateway, details, card_form):
    session = await open_session(coordinator, gateway)
    assert session.view.step is Step.SHIPPING

    assert isinstance(session.submit_shipping(details), Ok)
    assert session.view.step is Step.PAYMENT

    assert isinstance(session.submit_payment(card_form), Ok)
    assert session.view.step is Step.REVIEW
    assert session.view.completed == {Step.SHIPPING, Step.PAYMENT}

    match await session.submit():
        case Ok(order):
            assert order.status is OrderStatus.CONFIRMED
            assert order.payment_status is PaymentStatus.PAID
        case Error(e):
            raise AssertionError(e)

    assert session.view.step is Step.SUCCESS
    assert session.view.completed == {Step.SHIPPING, Step.PAYMENT, Step.REVIEW}
    assert session.view.closed
    assert coordinator.cart.is_empty
    assert gateway.calls[-2:] == ["validate_cart", "checkout"]


async def test_cannot_skip_forward(coordinator, gateway, details):
    session = await open_session(coordinator, gateway)

    assert reason(session.go_to(Step.PAYMENT)) is CheckoutErrorCode.NAVIGATION_DENIED
    assert reason(session.go_to(Step.REVIEW)) is CheckoutErrorCode.NAVIGATION_DENIED

    session.submit_shipping(details)
    assert reason(session.go_to(Step.REVIEW)) is CheckoutErrorCode.NAVIGATION_DENIED
    assert reason(session.go_to(Step.SUCCESS)) is CheckoutErrorCode.NAVIGATION_DENIED


async def test_back_navigation_keeps_completed_steps(coordinator, gateway, details, card_form):
    session = await open_session(coordinator, gateway)
    session.submit_shipping(details)
    session.submit_payment(card_form)

    assert isinstance(session.go_to(Step.SHIPPING), Ok)

    assert session.view.step is Step.SHIPPING
    assert session.view.completed == {Step.SHIPPING, Step.PAYMENT}
    assert isinstance(session.go_to(Step.PAYMENT), Ok)


async def test_failed_resubmission_reopens_step(coordinator, gateway, details, card_form):
    session = await open_session(coordinator, gateway)
    session.submit_shipping(details)
    session.submit_payment(card_form)
    session.go_to(Step.SHIPPING)

    bad = replace(details, address=replace(details.address, street="x"))
    result = session.submit_shipping(bad)

    assert isinstance(result, Error) and result.error.field == "street"
    assert session.view.completed == {Step.PAYMENT}
    # Payment is completed but unreachable while shipping is open
    assert reason(session.go_to(Step.PAYMENT)) is CheckoutErrorCode.NAVIGATION_DENIED


async def test_steps_must_be_submitted_in_place(coordinator, gateway, card_form):
    session = await open_session(coordinator, gateway)

    assert reason(session.submit_payment(card_form)) is CheckoutErrorCode.STEP_INCOMPLETE
    assert reason(await session.submit()) is CheckoutErrorCode.STEP_INCOMPLETE


async def test_invalid_payment_blocks_review(coordinator, gateway, details):
    session = await open_session(coordinator, gateway)
    session.submit_shipping(details)

    form = PaymentForm().select(PaymentMethod.PAYPAL)
    form.fill(paypal_email="nobody")
    result = session.submit_payment(form)

    assert isinstance(result, Error) and result.error.field == "paypal_email"
    assert session.view.step is Step.PAYMENT
    assert Step.PAYMENT not in session.view.completed


async def test_duplicate_submission_is_blocked(slow_gateway, details):
    coordinator = CartMutationCoordinator(slow_gateway)
    session = await open_session(coordinator, slow_gateway)
    session.submit_shipping(details)
    session.submit_payment(CashOnDelivery())

    first = asyncio.ensure_future(session.submit())
    await asyncio.sleep(0)
    assert session.view.display_step == PROCESSING
    second = await session.submit()

    assert reason(second) is CheckoutErrorCode.SUBMISSION_IN_PROGRESS
    assert reason(session.go_to(Step.SHIPPING)) is CheckoutErrorCode.SUBMISSION_IN_PROGRESS
    assert isinstance(await first, Ok)
    assert slow_gateway.calls.count("checkout") == 1


async def test_failure_reverts_to_payment(coordinator, gateway, details, card_form):
    session = await open_session(coordinator, gateway)
    session.submit_shipping(details)
    session.submit_payment(card_form)
    gateway.fail_next("checkout", GatewayError(GatewayErrorKind.SERVER, "Payment failed", 500))

    result = await session.submit()

    assert isinstance(result, Error) and result.error.kind is GatewayErrorKind.SERVER
    assert session.view.step is Step.PAYMENT
    assert not session.view.processing
    assert reason(session.go_to(Step.REVIEW)) is CheckoutErrorCode.NAVIGATION_DENIED

    # Re-confirming payment makes review reachable again
    session.submit_payment(card_form)
    assert isinstance(await session.submit(), Ok)


async def test_stock_drift_fails_submission_and_refetches_cart(
    coordinator, gateway, details, card_form
):
    session = await open_session(coordinator, gateway)
    session.submit_shipping(details)
    session.submit_payment(card_form)
    gateway.set_stock(8, 1)

    result = await session.submit()

    assert isinstance(result, Error) and isinstance(result.error, StockConflict)
    assert "checkout" not in gateway.calls
    assert gateway.calls[-1] == "get_cart"
    assert coordinator.cart.get(8).over_limit
    assert session.view.step is Step.PAYMENT


async def test_unfetched_cart_after_drift_blocks_mutations_and_resubmission(
    coordinator, gateway, details, card_form
):
    session = await open_session(coordinator, gateway)
    session.submit_shipping(details)
    session.submit_payment(card_form)
    gateway.set_stock(8, 1)
    gateway.fail_next("get_cart", GatewayError(GatewayErrorKind.NETWORK, "offline"))

    result = await session.submit()

    assert isinstance(result, Error) and isinstance(result.error, StockConflict)
    assert coordinator.needs_refresh
    blocked = await coordinator.set_quantity(8, 1)
    assert isinstance(blocked, Error) and isinstance(blocked.error, StockConflict)

    session.submit_payment(card_form)
    gateway.calls.clear()
    refused = await session.submit()

    assert isinstance(refused, Error) and isinstance(refused.error, StockConflict)
    assert gateway.calls == []
    assert session.view.step is Step.REVIEW

    gateway.set_stock(8, 10)
    assert isinstance(await coordinator.refresh(), Ok)
    assert isinstance(await session.submit(), Ok)


async def test_review_preview(coordinator, gateway, details, card_form):
    session = await open_session(coordinator, gateway)
    session.submit_shipping(details)
    session.submit_payment(card_form)

    match await session.review():
        case Ok(preview):
            assert preview.subtotal == Decimal("80.00")
            assert preview.discount == Decimal("20.00")
            assert preview.shipping == Decimal("5.00")
            assert preview.tax == Decimal("6.00")
            assert preview.total == Decimal("71.00")
        case Error(e):
            raise AssertionError(e)

    order = (await session.submit()).unwrap()
    assert order.total_amount == Decimal("71.00")


async def test_closed_session_refuses_everything(coordinator, gateway, details):
    session = await open_session(coordinator, gateway)

    session.cancel()

    assert session.view.closed
    assert reason(session.submit_shipping(details)) is CheckoutErrorCode.SESSION_CLOSED
    assert reason(session.go_to(Step.SHIPPING)) is CheckoutErrorCode.SESSION_CLOSED


async def test_cash_on_delivery_order_stays_pending(coordinator, gateway, details):
    session = await open_session(coordinator, gateway)
    session.submit_shipping(details)
    session.submit_payment(PaymentForm().select(PaymentMethod.CASH_ON_DELIVERY))

    order = (await session.submit()).unwrap()

    assert order.status is OrderStatus.PENDING
    assert order.payment_status is PaymentStatus.PENDING
    assert order.customer_notes == "Leave at the gate"
