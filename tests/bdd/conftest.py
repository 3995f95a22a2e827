"""Shared BDD fixtures and step definitions for the Storefront domain."""

from decimal import Decimal

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then, when
from storefront.cart.items import cart_for
from storefront.checkout.coordinator import checkout
from storefront.customer.registration import RegisterCustomer
from storefront.errors import StorefrontError
from storefront.order.lifecycle import cancel_order, finish_order
from storefront.order.order import Order


@pytest.fixture()
def context():
    """Mutable state shared between the steps of one scenario."""
    return {"customer_id": None, "order": None, "error": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('product "{product_id}" with {available:d} units at {price}'))
def product_in_stock(stock_product, product_id, available, price):
    stock_product(product_id, available, price)


@given(parsers.cfparse('a registered customer "{customer_id}"'))
def registered_customer(context, customer_id):
    current_domain.process(
        RegisterCustomer(customer_id=customer_id, name="Ada Lovelace", email="ada@example.com"),
        asynchronous=False,
    )
    context["customer_id"] = customer_id


@given(parsers.cfparse('the customer has {quantity:d} of "{product_id}" in the cart'))
def item_in_cart(context, add_to_cart, quantity, product_id):
    add_to_cart(context["customer_id"], product_id, quantity)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@given("the customer checks out")
@when("the customer checks out")
def customer_checks_out(context):
    try:
        context["order"] = checkout(context["customer_id"])
    except StorefrontError as exc:
        context["error"] = exc


@when(parsers.cfparse('the price of "{product_id}" changes to {price}'))
def price_changes(ledger, product_id, price):
    ledger.reprice(product_id, price)


@when("the order is cancelled")
def order_cancelled(context):
    try:
        cancel_order(context["order"].id, requesting_customer_id=context["customer_id"])
    except StorefrontError as exc:
        context["error"] = exc


@when("the order is finished")
@when("the order is finished again")
def order_finished(context):
    try:
        finish_order(context["order"].id)
    except StorefrontError as exc:
        context["error"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("an order is placed with total {total}"))
def order_placed_with_total(context, total):
    assert context["error"] is None
    assert context["order"].total == Decimal(total)


@then(parsers.cfparse('product "{product_id}" has {available:d} units available'))
def product_has_available(ledger, product_id, available):
    assert ledger.available(product_id) == available


@then("the cart is empty")
def cart_is_empty(context):
    assert cart_for(context["customer_id"]).line_items() == []


@then(parsers.cfparse("the cart still holds {count:d} lines"))
def cart_still_holds(context, count):
    assert len(cart_for(context["customer_id"]).line_items()) == count


@then(parsers.cfparse('the checkout fails with "{kind}"'))
@then(parsers.cfparse('the transition fails with "{kind}"'))
def operation_fails_with(context, kind):
    assert context["error"] is not None
    assert context["error"].kind == kind


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(context, status):
    stored = current_domain.repository_for(Order).get(context["order"].id)
    assert stored.status == status
