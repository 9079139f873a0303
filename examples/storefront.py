"""
Storefront — cart, checkout and tracking against the in-memory backend.

Run: uv run python -m examples.storefront
"""

import asyncio

from kungfu import Ok, Error

from emporium.cart import CartMutationCoordinator
from emporium.checkout import CheckoutOrchestrator, Step
from emporium.payment import PaymentForm, PaymentMethod
from emporium.tracking import OrderLifecycleTracker, OrderStatus
from examples._infra import DETAILS, banner, run, shop


async def main() -> None:
    gateway = shop()
    cart = CartMutationCoordinator(gateway)

    # ─────────────────────────────────────────────────────────────────────────
    banner("1. Cart: one mutation per line")
    # ─────────────────────────────────────────────────────────────────────────

    first, double_click, other = await asyncio.gather(
        cart.add(8, 2),
        cart.add(8, 1),
        cart.add(7, 1),
    )
    print(f"  add mat ×2     → {type(first).__name__}")
    print(f"  add mat again  → {double_click}")
    print(f"  add band ×1    → {type(other).__name__}")

    match await cart.add(7, 5):
        case Error(e):
            print(f"  add band ×5    → ✗ {e}")
        case Ok(_):
            pass

    match await cart.add(9):
        case Error(e):
            print(f"  add shaker     → ✗ {e}")
        case Ok(_):
            pass

    totals = cart.totals()
    print(f"\n  {totals.total_items} items, subtotal {totals.subtotal}")

    # ─────────────────────────────────────────────────────────────────────────
    banner("2. Checkout")
    # ─────────────────────────────────────────────────────────────────────────

    match CheckoutOrchestrator.begin(cart, gateway):
        case Ok(session):
            pass
        case Error(e):
            print(f"  ✗ {e}")
            return

    print(f"  skip to review → {session.go_to(Step.REVIEW)}")
    session.submit_shipping(DETAILS)

    form = PaymentForm().select(PaymentMethod.CREDIT_CARD)
    form.fill(card_number="4242 4242 4242 4242", card_holder_name="Ada Uwase", expiry_month=1, expiry_year=2020, cvv="123")
    print(f"  expired card   → {session.submit_payment(form)}")
    form.fill(expiry_month=12, expiry_year=2030)
    session.submit_payment(form)

    match await session.review():
        case Ok(preview):
            print(f"  preview: {preview.subtotal} − {preview.discount} + {preview.shipping} + {preview.tax} = {preview.total}")
        case Error(e):
            print(f"  ✗ {e}")

    match await session.submit():
        case Ok(order):
            print(f"  ✓ {order.order_number} {order.status.name}, paid {order.total_amount}")
        case Error(e):
            print(f"  ✗ {e} (back on {session.view.step.value})")
            return

    # ─────────────────────────────────────────────────────────────────────────
    banner("3. Tracking")
    # ─────────────────────────────────────────────────────────────────────────

    tracker = OrderLifecycleTracker(gateway)
    for status in (OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED):
        gateway.advance(order.order_number, status)
        match await tracker.track(order.order_number):
            case Ok(view):
                marks = "".join(
                    "●" if step.current else "✓" if step.completed else "·" for step in view.steps
                )
                badge = f" [{view.badge.value}]" if view.badge else ""
                print(f"  {status.name:<12} {marks}{badge}")
            case Error(e):
                print(f"  ✗ {e}")

    print(f"\n  unknown order  → {await tracker.track('ORD-404')}")


if __name__ == "__main__":
    run(main)
