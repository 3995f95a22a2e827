"""Order aggregate — the immutable record of a completed checkout.

An order is created once, by the checkout coordinator, from the line items
handed over by the customer's cart. Its lines, buyer contact and total are
fixed at creation; only the status moves afterwards.

State Machine:
    NEW → FINISHED   (terminal, no inventory effect)
    NEW → CANCELLED  (terminal, stock of every line is released)
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.errors import EmptyCart, InvalidTransition
from storefront.order.events import OrderCancelled, OrderFinished, OrderPlaced
from storefront.utils.money import from_cents


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    NEW = "New"
    FINISHED = "Finished"
    CANCELLED = "Cancelled"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.NEW: {OrderStatus.FINISHED, OrderStatus.CANCELLED},
    OrderStatus.FINISHED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class BuyerContact:
    """Buyer contact details captured at checkout time.

    Once recorded on an Order the contact is immutable, regardless of later
    changes to the customer's profile.
    """

    name = String(required=True, max_length=200)
    email = String(required=True, max_length=254)
    phone = String(max_length=30)
    address = String(max_length=500)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    """A line item transferred from the cart, with the price snapshot it carried there."""

    line_item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price_cents = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    position = Integer(required=True, min_value=0)
    # Stock for this line is back on the shelf
    released = Boolean(default=False)

    @property
    def unit_price(self) -> Decimal:
        return from_cents(self.unit_price_cents)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_id = Identifier(required=True)
    contact = ValueObject(BuyerContact)
    items = HasMany(OrderLine)
    total_cents = Integer(required=True, min_value=0)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.NEW.value,
    )
    cancelled_by = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, contact, lines):
        """Create a NEW order that takes ownership of ``lines``.

        Args:
            customer_id: The buyer.
            contact: Dict with name, email, phone, address (snapshot).
            lines: ``LineItem`` values handed over by the cart, in cart order.
        """
        if not lines:
            raise EmptyCart(customer_id)

        now = datetime.now(UTC)
        total_cents = sum(line.unit_price_cents * line.quantity for line in lines)

        order = cls(
            customer_id=str(customer_id),
            contact=BuyerContact(**contact),
            total_cents=total_cents,
            status=OrderStatus.NEW.value,
            created_at=now,
            updated_at=now,
        )
        for position, line in enumerate(lines):
            order.add_items(
                OrderLine(
                    line_item_id=line.line_item_id,
                    product_id=line.product_id,
                    name=line.name,
                    unit_price_cents=line.unit_price_cents,
                    quantity=line.quantity,
                    position=position,
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                items=json.dumps(order._lines_payload(include_price=True)),
                total_cents=total_cents,
                placed_at=now,
            )
        )
        return order

    @property
    def total(self) -> Decimal:
        return from_cents(self.total_cents)

    def lines(self):
        """Order lines in the order they were placed."""
        return sorted(self.items, key=lambda line: line.position)

    def unreleased_lines(self):
        return [line for line in self.lines() if not line.released]

    def mark_released(self, line_ids):
        """Record that the stock of these lines has been put back."""
        line_ids = {str(line_id) for line_id in line_ids}
        for line in self.items:
            if str(line.id) in line_ids:
                line.released = True

    def _lines_payload(self, include_price=False):
        payload = []
        for line in self.lines():
            entry = {"product_id": str(line.product_id), "quantity": line.quantity}
            if include_price:
                entry["line_item_id"] = str(line.line_item_id)
                entry["unit_price_cents"] = line.unit_price_cents
            payload.append(entry)
        return payload

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def assert_can_transition(self, target_status):
        """Raise ``InvalidTransition`` unless the current status allows ``target_status``."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition(self.id, current.value, target_status.value)

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def finish(self):
        self.assert_can_transition(OrderStatus.FINISHED)
        now = datetime.now(UTC)
        self.status = OrderStatus.FINISHED.value
        self.updated_at = now

        self.raise_(OrderFinished(order_id=str(self.id), finished_at=now))

    def cancel(self, cancelled_by=None):
        """Mark the order cancelled. Stock release is the lifecycle manager's job."""
        self.assert_can_transition(OrderStatus.CANCELLED)
        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancelled_by = str(cancelled_by) if cancelled_by is not None else None
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                cancelled_by=self.cancelled_by,
                items=json.dumps(self._lines_payload()),
                cancelled_at=now,
            )
        )
