"""Order lifecycle manager — finish and cancel transitions.

Cancelling an order releases the stock of every line. The release is all or
none: products that no longer exist abort the cancellation before anything
is released, and a release failing midway re-reserves what was already put
back. The order only becomes CANCELLED once every line's stock is restored.
Lines whose stock could not be re-reserved are flagged as released on the
order, and a retried cancel skips them.

Transitions of one order are serialized so that two concurrent cancels
cannot both restore its stock.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.checkout.compensation import CompensationLog
from storefront.errors import (
    OrderNotFound,
    PartialCancellationFailure,
    PersistenceFailure,
    ProductNotFound,
    StorefrontError,
)
from storefront.inventory.ledger import get_ledger
from storefront.order.order import Order, OrderStatus
from storefront.utils.locks import KeyedLocks

logger = structlog.get_logger(__name__)

_order_locks = KeyedLocks()


class OrderLifecycleManager:
    def __init__(self, ledger=None):
        self.ledger = ledger or get_ledger()

    def get(self, order_id) -> Order:
        try:
            return current_domain.repository_for(Order).get(str(order_id))
        except ObjectNotFoundError:
            raise OrderNotFound(order_id) from None

    def finish(self, order_id) -> Order:
        """NEW → FINISHED. No inventory effect."""
        with _order_locks.hold(order_id):
            order = self.get(order_id)
            order.finish()
            self._save(order)

        logger.info("Order finished", order_id=str(order_id))
        return order

    def cancel(self, order_id, requesting_customer_id=None) -> Order:
        """NEW → CANCELLED, releasing the stock of every line."""
        with _order_locks.hold(order_id):
            order = self.get(order_id)
            order.assert_can_transition(OrderStatus.CANCELLED)
            pending = order.unreleased_lines()

            for line in pending:
                try:
                    self.ledger.product(line.product_id)
                except ProductNotFound as exc:
                    logger.warning(
                        "Cancellation aborted, product no longer stocked",
                        order_id=str(order_id),
                        product_id=str(line.product_id),
                    )
                    raise PartialCancellationFailure(order_id, exc) from exc

            releases = CompensationLog(self.ledger, undo="reserve")
            released = []
            try:
                for line in pending:
                    self.ledger.release(line.product_id, line.quantity)
                    releases.record(line.product_id, line.quantity)
                    released.append(line)
            except Exception as exc:
                self._take_back(order_id, releases, released)
                raise PartialCancellationFailure(order_id, exc) from exc

            order.mark_released(line.id for line in released)
            order.cancel(cancelled_by=requesting_customer_id)
            try:
                self._save(order)
            except PersistenceFailure:
                self._take_back(order_id, releases, released)
                raise

        logger.info(
            "Order cancelled, stock restored",
            order_id=str(order_id),
            cancelled_by=str(requesting_customer_id),
            lines=len(pending),
        )
        return order

    def _take_back(self, order_id, releases, released):
        """Re-reserve released stock.

        Lines whose stock could not be taken back are stored as released, so a
        retried cancel does not put their stock back a second time.
        """
        failed = releases.unwind()
        if not failed:
            return

        logger.error(
            "Could not take back released stock",
            order_id=str(order_id),
            products=[product_id for product_id, _ in failed],
        )
        stranded = []
        for line in released:
            entry = (str(line.product_id), line.quantity)
            if entry in failed:
                failed.remove(entry)
                stranded.append(line.id)

        try:
            order = self.get(order_id)
            order.mark_released(stranded)
            self._save(order)
        except StorefrontError as exc:
            logger.error(
                "Could not record released order lines",
                order_id=str(order_id),
                lines=[str(line_id) for line_id in stranded],
                error=str(exc),
            )

    def _save(self, order):
        try:
            current_domain.repository_for(Order).add(order)
        except StorefrontError:
            raise
        except Exception as exc:
            raise PersistenceFailure(f"order {order.id}", exc) from exc


def finish_order(order_id) -> Order:
    return OrderLifecycleManager().finish(order_id)


def cancel_order(order_id, requesting_customer_id=None) -> Order:
    return OrderLifecycleManager().cancel(order_id, requesting_customer_id)
