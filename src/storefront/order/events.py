"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A checkout completed and the order was created."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line dicts
    total_cents = Integer(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderFinished:
    """The order reached its successful terminal status."""

    __version__ = 1

    order_id = Identifier(required=True)
    finished_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled and its stock returned to inventory."""

    __version__ = 1

    order_id = Identifier(required=True)
    cancelled_by = String(max_length=255)
    items = Text(required=True)  # JSON: list of {product_id, quantity} restored
    cancelled_at = DateTime(required=True)
