"""Domain events for the ProductStock aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ProductStock")
class ProductStockRegistered:
    """A product was registered with its opening stock."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    unit_price_cents = Integer(required=True)
    available = Integer(required=True)
    registered_at = DateTime(required=True)


@storefront.event(part_of="ProductStock")
class ProductRepriced:
    """The catalogue price of a product changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_price_cents = Integer(required=True)
    new_price_cents = Integer(required=True)


@storefront.event(part_of="ProductStock")
class StockReplenished:
    """Units were added to a product's stock by catalogue management."""

    __version__ = 1

    product_id = Identifier(required=True)
    movement_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_available = Integer(required=True)


@storefront.event(part_of="ProductStock")
class StockReserved:
    """Units were taken out of available stock for a checkout."""

    __version__ = 1

    product_id = Identifier(required=True)
    movement_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_available = Integer(required=True)
    new_available = Integer(required=True)
    reserved_at = DateTime(required=True)


@storefront.event(part_of="ProductStock")
class StockReleased:
    """Units were put back into available stock (compensation or cancellation)."""

    __version__ = 1

    product_id = Identifier(required=True)
    movement_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_available = Integer(required=True)
    new_available = Integer(required=True)
    released_at = DateTime(required=True)


@storefront.event(part_of="ProductStock")
class ProductDiscontinued:
    """A product was removed from the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    discontinued_at = DateTime(required=True)
