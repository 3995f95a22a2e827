"""Checkout coordinator — turns a customer's cart into an order.

Flow:
    1. Read the cart's line items (insertion order). Empty → EmptyCart.
    2. Reserve stock for each line through the inventory ledger.
    3. Any failure → release what was reserved, in reverse, and re-raise.
    4. Hand the cart's lines over to a new NEW order with a frozen total.
    5. Persist order and emptied cart in one unit of work; failure →
       release the reservations and raise PersistenceFailure.

Stock is reserved product by product, each under that product's own lock,
and undone through an explicit compensation log. No lock is held across
products for the length of a checkout.
"""

import structlog
from protean.core.unit_of_work import UnitOfWork
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.items import cart_for
from storefront.checkout.compensation import CompensationLog
from storefront.customer.customer import Customer
from storefront.errors import CustomerNotFound, EmptyCart, PersistenceFailure, StorefrontError
from storefront.inventory.ledger import get_ledger
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


class CheckoutCoordinator:
    def __init__(self, ledger=None):
        self.ledger = ledger or get_ledger()

    def checkout(self, customer_id) -> Order:
        """Place an order for everything in the customer's cart.

        Either the order exists, stock is decremented and the cart is empty,
        or nothing changed and the original error is raised.
        """
        cart = cart_for(customer_id)
        lines = cart.line_items() if cart is not None else []
        if not lines:
            raise EmptyCart(customer_id)

        contact = self._contact_for(customer_id)

        reservations = CompensationLog(self.ledger, undo="release")
        try:
            for line in lines:
                self.ledger.reserve(line.product_id, line.quantity)
                reservations.record(line.product_id, line.quantity)

            order = Order.place(customer_id, contact, cart.hand_over_items())
            self._persist(order, cart)
        except Exception as exc:
            undone = len(reservations)
            failed = reservations.unwind()
            logger.warning(
                "Checkout failed, reservations released",
                customer_id=str(customer_id),
                error_type=getattr(exc, "kind", type(exc).__name__),
                released=undone - len(failed),
                unreleased=len(failed),
            )
            raise

        logger.info(
            "Checkout completed",
            customer_id=str(customer_id),
            order_id=str(order.id),
            total_cents=order.total_cents,
            lines=len(lines),
        )
        return order

    def _contact_for(self, customer_id):
        try:
            customer = current_domain.repository_for(Customer).get(str(customer_id))
        except ObjectNotFoundError:
            raise CustomerNotFound(customer_id) from None
        return customer.contact_details()

    def _persist(self, order, cart):
        """Write the new order and the emptied cart as one unit."""
        try:
            with UnitOfWork():
                current_domain.repository_for(Order).add(order)
                current_domain.repository_for(Cart).add(cart)
        except StorefrontError:
            raise
        except Exception as exc:
            raise PersistenceFailure(f"order for customer {cart.customer_id}", exc) from exc


def checkout(customer_id) -> Order:
    return CheckoutCoordinator().checkout(customer_id)
