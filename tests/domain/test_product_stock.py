"""Tests for the ProductStock aggregate."""

from decimal import Decimal

import pytest
from protean.exceptions import ValidationError
from storefront.errors import InsufficientStock
from storefront.inventory.events import (
    ProductDiscontinued,
    ProductRepriced,
    ProductStockRegistered,
    StockReleased,
    StockReplenished,
    StockReserved,
)
from storefront.inventory.stock import ProductStock


def _make_stock(available=10, unit_price="10.00"):
    return ProductStock.register("prod-001", "Widget", unit_price, available)


class TestRegister:
    def test_register_sets_fields(self):
        stock = _make_stock()
        assert stock.id == "prod-001"
        assert stock.name == "Widget"
        assert stock.unit_price_cents == 1000
        assert stock.unit_price == Decimal("10.00")
        assert stock.available == 10
        assert stock.discontinued is False
        assert stock.revision == 0

    def test_register_raises_event(self):
        stock = _make_stock()
        registered = [e for e in stock._events if isinstance(e, ProductStockRegistered)]
        assert len(registered) == 1
        assert registered[0].available == 10
        assert registered[0].unit_price_cents == 1000

    def test_price_is_rounded_to_cents(self):
        stock = _make_stock(unit_price="19.995")
        assert stock.unit_price_cents == 2000

    def test_negative_opening_stock_rejected(self):
        with pytest.raises(ValidationError):
            _make_stock(available=-1)


class TestReserve:
    def test_reserve_decrements_available(self):
        stock = _make_stock()
        stock.reserve(3, "mov-1")
        assert stock.available == 7

    def test_reserve_records_movement(self):
        stock = _make_stock()
        stock.reserve(3, "mov-1")
        assert stock.revision == 1
        assert stock.has_applied("mov-1")
        assert not stock.has_applied("mov-2")

    def test_reserve_raises_event(self):
        stock = _make_stock()
        stock.reserve(3, "mov-1")
        event = stock._events[-1]
        assert isinstance(event, StockReserved)
        assert event.quantity == 3
        assert event.previous_available == 10
        assert event.new_available == 7

    def test_selling_the_last_unit_leaves_zero(self):
        stock = _make_stock(available=2)
        stock.reserve(2, "mov-1")
        assert stock.available == 0

    def test_reserve_more_than_available_fails_without_change(self):
        stock = _make_stock(available=2)
        with pytest.raises(InsufficientStock) as exc:
            stock.reserve(3, "mov-1")
        assert exc.value.requested == 3
        assert exc.value.available == 2
        assert stock.available == 2
        assert stock.revision == 0

    @pytest.mark.parametrize("quantity", [0, -1, True, 1.5])
    def test_reserve_rejects_non_positive_quantities(self, quantity):
        stock = _make_stock()
        with pytest.raises(ValidationError):
            stock.reserve(quantity, "mov-1")
        assert stock.available == 10


class TestRelease:
    def test_release_increments_available(self):
        stock = _make_stock(available=0)
        stock.release(4, "mov-1")
        assert stock.available == 4
        assert isinstance(stock._events[-1], StockReleased)

    def test_release_is_not_capped(self):
        stock = _make_stock(available=10)
        stock.release(50, "mov-1")
        assert stock.available == 60

    def test_reserve_then_release_restores_stock(self):
        stock = _make_stock()
        stock.reserve(4, "mov-1")
        stock.release(4, "mov-2")
        assert stock.available == 10
        assert stock.revision == 2


class TestCatalogueMaintenance:
    def test_reprice(self):
        stock = _make_stock()
        stock.reprice("12.50")
        assert stock.unit_price == Decimal("12.50")
        event = stock._events[-1]
        assert isinstance(event, ProductRepriced)
        assert event.previous_price_cents == 1000
        assert event.new_price_cents == 1250

    def test_replenish(self):
        stock = _make_stock(available=1)
        stock.replenish(9, "mov-1")
        assert stock.available == 10
        assert isinstance(stock._events[-1], StockReplenished)

    def test_discontinue(self):
        stock = _make_stock()
        stock.discontinue()
        assert stock.discontinued is True
        assert isinstance(stock._events[-1], ProductDiscontinued)

    def test_discontinue_twice_rejected(self):
        stock = _make_stock()
        stock.discontinue()
        with pytest.raises(ValidationError):
            stock.discontinue()
