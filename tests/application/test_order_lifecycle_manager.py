"""Tests for order finish/cancel transitions and their inventory effects."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from protean import current_domain
from storefront.checkout.coordinator import checkout
from storefront.domain import storefront
from storefront.errors import (
    InvalidTransition,
    OrderNotFound,
    PartialCancellationFailure,
    PersistenceFailure,
)
from storefront.order.lifecycle import OrderLifecycleManager, cancel_order, finish_order
from storefront.order.order import Order, OrderStatus


@pytest.fixture()
def placed_order(stock_product, customer, add_to_cart):
    stock_product("P1", 10, "10.00")
    stock_product("P2", 10, "5.00")
    add_to_cart(customer, "P1", 2)
    add_to_cart(customer, "P2", 1)
    return checkout(customer)


def _status(order_id):
    return current_domain.repository_for(Order).get(order_id).status


def _released_products(order_id):
    order = current_domain.repository_for(Order).get(order_id)
    return [str(line.product_id) for line in order.lines() if line.released]


class TestFinish:
    def test_finish(self, ledger, placed_order):
        order = finish_order(placed_order.id)

        assert order.status == OrderStatus.FINISHED.value
        assert _status(placed_order.id) == OrderStatus.FINISHED.value
        assert ledger.available("P1") == 8

    def test_finish_twice(self, placed_order):
        finish_order(placed_order.id)
        with pytest.raises(InvalidTransition):
            finish_order(placed_order.id)

    def test_unknown_order(self):
        with pytest.raises(OrderNotFound):
            finish_order("no-such-order")


class TestCancel:
    def test_cancel_restores_stock(self, ledger, placed_order, customer):
        order = cancel_order(placed_order.id, requesting_customer_id=customer)

        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancelled_by == customer
        assert _status(placed_order.id) == OrderStatus.CANCELLED.value
        assert ledger.available("P1") == 10
        assert ledger.available("P2") == 10

    def test_cancel_twice_restores_once(self, ledger, placed_order):
        cancel_order(placed_order.id)
        with pytest.raises(InvalidTransition):
            cancel_order(placed_order.id)
        assert ledger.available("P1") == 10

    def test_cancel_finished_order(self, ledger, placed_order):
        finish_order(placed_order.id)
        with pytest.raises(InvalidTransition):
            cancel_order(placed_order.id)
        assert ledger.available("P1") == 8

    def test_discontinued_product_aborts_cancellation(self, ledger, placed_order):
        ledger.discontinue("P2")

        with pytest.raises(PartialCancellationFailure):
            cancel_order(placed_order.id)

        assert _status(placed_order.id) == OrderStatus.NEW.value
        assert ledger.available("P1") == 8

    def test_release_failure_takes_back_released_stock(self, ledger, placed_order, monkeypatch):
        original_release = ledger.release

        def release(product_id, quantity):
            if product_id == "P2":
                raise PersistenceFailure("stock release for P2", ConnectionError("store down"))
            return original_release(product_id, quantity)

        monkeypatch.setattr(ledger, "release", release)

        with pytest.raises(PartialCancellationFailure) as exc:
            cancel_order(placed_order.id)

        assert isinstance(exc.value.cause, PersistenceFailure)
        assert _status(placed_order.id) == OrderStatus.NEW.value
        assert ledger.available("P1") == 8
        assert ledger.available("P2") == 9

    def test_unexpected_release_error_aborts_cancellation(self, ledger, placed_order, monkeypatch):
        original_release = ledger.release

        def release(product_id, quantity):
            if product_id == "P2":
                raise RuntimeError("driver bug")
            return original_release(product_id, quantity)

        monkeypatch.setattr(ledger, "release", release)

        with pytest.raises(PartialCancellationFailure) as exc:
            cancel_order(placed_order.id)

        assert isinstance(exc.value.cause, RuntimeError)
        assert _status(placed_order.id) == OrderStatus.NEW.value
        assert ledger.available("P1") == 8

    def test_stock_sold_during_cancellation_is_not_restored_twice(self, ledger, placed_order, monkeypatch):
        original_release = ledger.release

        def release(product_id, quantity):
            if product_id == "P2":
                # Another shopper buys the P1 units this cancellation just put back
                ledger.reserve("P1", ledger.available("P1"))
                raise PersistenceFailure("stock release for P2", ConnectionError("store down"))
            return original_release(product_id, quantity)

        monkeypatch.setattr(ledger, "release", release)

        with pytest.raises(PartialCancellationFailure):
            cancel_order(placed_order.id)

        monkeypatch.undo()
        assert _status(placed_order.id) == OrderStatus.NEW.value
        assert ledger.available("P1") == 0
        assert ledger.available("P2") == 9
        assert _released_products(placed_order.id) == ["P1"]

        order = cancel_order(placed_order.id)

        assert order.status == OrderStatus.CANCELLED.value
        assert ledger.available("P1") == 0
        assert ledger.available("P2") == 10
        assert _released_products(placed_order.id) == ["P1", "P2"]

    def test_order_save_failure_takes_back_released_stock(self, ledger, placed_order, monkeypatch):
        def failing_save(self, order):
            raise PersistenceFailure(f"order {order.id}", ConnectionError("store down"))

        monkeypatch.setattr(OrderLifecycleManager, "_save", failing_save)

        with pytest.raises(PersistenceFailure):
            cancel_order(placed_order.id)

        monkeypatch.undo()
        assert _status(placed_order.id) == OrderStatus.NEW.value
        assert ledger.available("P1") == 8
        assert ledger.available("P2") == 9

    def test_concurrent_cancels_restore_stock_once(self, ledger, placed_order):
        def _cancel():
            with storefront.domain_context():
                return cancel_order(placed_order.id)

        with ThreadPoolExecutor(max_workers=2) as pool:
            futures = [pool.submit(_cancel) for _ in range(2)]

        outcomes = [f.exception() for f in futures]
        assert sum(1 for exc in outcomes if exc is None) == 1
        assert sum(1 for exc in outcomes if isinstance(exc, InvalidTransition)) == 1
        assert ledger.available("P1") == 10
        assert ledger.available("P2") == 10
