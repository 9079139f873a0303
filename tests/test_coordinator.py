import asyncio

from kungfu import Ok, Error

from emporium.cart import (
    CartMutationCoordinator,
    InvalidQuantity,
    LineItemMissing,
    MutationInProgress,
    ProductUnavailable,
)
from emporium.errors import GatewayError, GatewayErrorKind, StockConflict


async def test_add_reconciles_with_server_snapshot(coordinator, gateway):
    result = await coordinator.add(7, 2)

    assert isinstance(result, Ok)
    assert coordinator.cart.get(7).quantity == 2
    assert coordinator.cart.get(7).max_quantity == 3
    assert gateway.calls == ["quote", "add_item"]


async def test_invalid_quantity_never_mutates(coordinator, gateway):
    await coordinator.add(7, 2)
    gateway.calls.clear()

    result = await coordinator.add(7, 5)

    assert result == Error(InvalidQuantity(7, 7, 3))
    assert gateway.calls == ["quote"]
    assert coordinator.cart.get(7).quantity == 2


async def test_add_sees_restock(coordinator, gateway):
    await coordinator.add(7, 1)
    gateway.set_stock(7, 10)

    result = await coordinator.add(7, 5)

    assert isinstance(result, Ok)
    assert coordinator.cart.get(7).quantity == 6
    assert coordinator.cart.get(7).max_quantity == 10


async def test_set_quantity_sees_restock(coordinator, gateway):
    await coordinator.add(7, 1)
    gateway.set_stock(7, 10)

    assert isinstance(await coordinator.set_quantity(7, 8), Ok)
    assert coordinator.cart.get(7).quantity == 8


async def test_add_sees_sell_out_without_mutating(coordinator, gateway):
    await coordinator.add(8, 1)
    gateway.set_stock(8, 0)
    gateway.calls.clear()

    assert await coordinator.add(8, 1) == Error(ProductUnavailable(8))
    assert gateway.calls == ["quote"]


async def test_quote_failure_is_surfaced(coordinator, gateway):
    await coordinator.add(8, 1)
    gateway.fail_next("quote", GatewayError(GatewayErrorKind.NETWORK, "offline"))
    gateway.calls.clear()

    result = await coordinator.set_quantity(8, 3)

    assert isinstance(result, Error) and result.error.kind is GatewayErrorKind.NETWORK
    assert gateway.calls == ["quote"]
    assert coordinator.cart.get(8).quantity == 1


async def test_unavailable_products_are_refused_locally(coordinator, gateway):
    assert await coordinator.add(9, 1) == Error(ProductUnavailable(9))
    assert await coordinator.add(10, 1) == Error(ProductUnavailable(10))
    assert "add_item" not in gateway.calls


async def test_set_quantity_on_missing_line_is_local(coordinator, gateway):
    assert await coordinator.set_quantity(8, 2) == Error(LineItemMissing(8))
    assert gateway.calls == []


async def test_same_line_concurrent_mutation_is_rejected(slow_gateway):
    coordinator = CartMutationCoordinator(slow_gateway)

    first, second = await asyncio.gather(coordinator.add(8, 1), coordinator.add(8, 1))

    assert isinstance(first, Ok)
    assert second == Error(MutationInProgress(8))
    assert slow_gateway.calls.count("add_item") == 1
    assert coordinator.cart.get(8).quantity == 1


async def test_different_lines_run_concurrently(slow_gateway):
    coordinator = CartMutationCoordinator(slow_gateway)

    results = await asyncio.gather(coordinator.add(7, 1), coordinator.add(8, 2))

    assert all(isinstance(r, Ok) for r in results)
    await coordinator.refresh()
    assert coordinator.cart.total_items == 3


async def test_busy_flag_is_released_after_failure(coordinator, gateway):
    gateway.fail_next("add_item", GatewayError(GatewayErrorKind.SERVER, "down", 503))

    result = await coordinator.add(8, 1)

    assert isinstance(result, Error) and result.error.kind is GatewayErrorKind.SERVER
    assert not coordinator.is_busy(8)
    assert coordinator.cart.is_empty
    assert isinstance(await coordinator.add(8, 1), Ok)


async def test_gateway_errors_are_not_retried(coordinator, gateway):
    await coordinator.add(8, 1)
    gateway.fail_next("update_item", GatewayError(GatewayErrorKind.NETWORK, "offline"))
    gateway.calls.clear()

    result = await coordinator.set_quantity(8, 4)

    assert isinstance(result, Error)
    assert gateway.calls == ["quote", "update_item"]
    assert coordinator.cart.get(8).quantity == 1


async def test_set_quantity_zero_routes_to_removal(coordinator, gateway):
    await coordinator.add(8, 2)

    result = await coordinator.set_quantity(8, 0)

    assert isinstance(result, Ok)
    assert coordinator.cart.is_empty
    assert gateway.calls[-1] == "remove_item"


async def test_removing_absent_item_is_success_after_one_refetch(coordinator, gateway):
    await coordinator.add(8, 2)
    # Removed elsewhere (other tab)
    await gateway.remove_item(8)
    gateway.calls.clear()

    result = await coordinator.remove(8)

    assert isinstance(result, Ok)
    assert coordinator.cart.is_empty
    assert gateway.calls == ["remove_item", "get_cart"]


async def test_remove_failure_other_than_not_found_is_surfaced(coordinator, gateway):
    await coordinator.add(8, 2)
    gateway.fail_next("remove_item", GatewayError(GatewayErrorKind.SERVER, "down", 500))
    gateway.calls.clear()

    result = await coordinator.remove(8)

    assert isinstance(result, Error)
    assert gateway.calls == ["remove_item"]
    assert coordinator.cart.get(8).quantity == 2


async def test_stock_conflict_forces_refresh(coordinator, gateway):
    await coordinator.add(7, 1)
    # Sold out between the quote and the add
    gateway.fail_next("add_item", StockConflict())
    gateway.calls.clear()

    result = await coordinator.add(7, 1)

    assert isinstance(result, Error) and isinstance(result.error, StockConflict)
    assert gateway.calls == ["quote", "add_item", "get_cart"]
    assert coordinator.cart.get(7).quantity == 1
    assert not coordinator.needs_refresh


async def test_failed_refresh_after_conflict_blocks_mutations(coordinator, gateway):
    await coordinator.add(7, 1)
    gateway.fail_next("add_item", StockConflict())
    gateway.fail_next("get_cart", GatewayError(GatewayErrorKind.NETWORK, "offline"))

    await coordinator.add(7, 1)

    assert coordinator.needs_refresh
    blocked = await coordinator.add(8, 1)
    assert isinstance(blocked, Error) and isinstance(blocked.error, StockConflict)

    assert isinstance(await coordinator.refresh(), Ok)
    assert isinstance(await coordinator.add(8, 1), Ok)


async def test_clear_waits_for_idle_cart(slow_gateway):
    coordinator = CartMutationCoordinator(slow_gateway)

    add, clear = await asyncio.gather(coordinator.add(7, 1), coordinator.clear())

    assert isinstance(add, Ok)
    assert clear == Error(MutationInProgress(None))


async def test_mutation_during_clear_is_rejected(slow_gateway):
    coordinator = CartMutationCoordinator(slow_gateway)
    await coordinator.add(7, 1)

    clear, add = await asyncio.gather(coordinator.clear(), coordinator.add(8, 1))

    assert isinstance(clear, Ok)
    assert add == Error(MutationInProgress(8))
    assert coordinator.cart.is_empty


async def test_refresh_and_validate(coordinator, gateway):
    gateway.put_line(7, 2)

    assert isinstance(await coordinator.refresh(), Ok)
    assert coordinator.cart.get(7).quantity == 2
    assert await coordinator.validate() == Ok(True)

    gateway.set_stock(7, 1)
    assert await coordinator.validate() == Ok(False)


async def test_rejections_are_logged_at_debug(slow_gateway, logs):
    coordinator = CartMutationCoordinator(slow_gateway)

    await asyncio.gather(coordinator.add(8, 1), coordinator.add(8, 1))

    rejected = [e for e in logs.entries if e["event"] == "mutation_rejected"]
    assert rejected and rejected[0]["log_level"] == "debug"
