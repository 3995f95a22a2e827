"""Cart aggregate — the mutable set of line items a customer is assembling.

There is exactly one cart per customer, keyed by the customer id. Each line
item records a snapshot of the product's name and price taken when it was
first added; later catalogue price changes do not reach the cart.

At checkout the cart hands its line items over to the new order and is left
empty. The cart itself is never deleted.
"""

import json
from datetime import UTC, datetime

from protean.fields import DateTime, HasMany, Identifier, Integer, String

from storefront.cart.events import CartCheckedOut, CartItemAdded, CartItemRemoved
from storefront.domain import storefront
from storefront.errors import EmptyCart, ItemNotFound
from storefront.inventory.stock import require_positive_quantity


@storefront.value_object(part_of="Cart")
class LineItem:
    """Read-only copy of a cart line, used to hand lines over to an order."""

    line_item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price_cents = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)

    @property
    def subtotal_cents(self):
        return self.unit_price_cents * self.quantity


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price_cents = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    position = Integer(required=True, min_value=0)
    added_at = DateTime()

    def to_line_item(self):
        return LineItem(
            line_item_id=str(self.id),
            product_id=str(self.product_id),
            name=self.name,
            unit_price_cents=self.unit_price_cents,
            quantity=self.quantity,
        )


@storefront.aggregate
class Cart:
    customer_id = Identifier(required=True)
    items = HasMany(CartItem)
    next_position = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(
            id=str(customer_id),
            customer_id=str(customer_id),
            next_position=0,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, name, unit_price_cents, quantity):
        """Add a product to the cart, or increase the quantity of its existing line.

        ``name`` and ``unit_price_cents`` are only used for a new line; an
        existing line keeps the snapshot it was created with.
        """
        require_positive_quantity(quantity)

        existing = next((i for i in self.items if str(i.product_id) == str(product_id)), None)
        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
            item = existing
        else:
            item = CartItem(
                product_id=str(product_id),
                name=name,
                unit_price_cents=unit_price_cents,
                quantity=quantity,
                position=self.next_position,
                added_at=now,
            )
            self.add_items(item)
            self.next_position += 1

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=item.quantity,
                unit_price_cents=item.unit_price_cents,
            )
        )
        return str(item.id)

    def remove_item(self, item_id):
        """Remove a line item from the cart."""
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ItemNotFound(item_id)

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
            )
        )

    def line_items(self):
        """Snapshot of the cart's lines in insertion order."""
        return [item.to_line_item() for item in sorted(self.items, key=lambda i: i.position)]

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def hand_over_items(self):
        """Detach every line item for transfer to an order and leave the cart empty.

        Returns the detached lines in insertion order. The caller must persist
        the emptied cart together with the order that received the lines.
        """
        lines = self.line_items()
        if not lines:
            raise EmptyCart(self.customer_id)

        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartCheckedOut(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                items=json.dumps(
                    [
                        {"item_id": line.line_item_id, "product_id": line.product_id, "quantity": line.quantity}
                        for line in lines
                    ]
                ),
            )
        )
        return lines
