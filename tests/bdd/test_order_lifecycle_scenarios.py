"""BDD scenarios for order finish and cancel."""

from pytest_bdd import scenarios

scenarios("features/order_lifecycle.feature")
