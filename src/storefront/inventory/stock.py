"""ProductStock aggregate — the per-product stock counter behind the inventory ledger.

The aggregate is keyed by the catalogue's product id and holds the current
display name, unit price (in cents) and available quantity. Stock is only
moved through ``reserve``/``release``, which the ``InventoryLedger`` calls
while holding the product's lock.

Every stock movement carries a movement id. The aggregate remembers the last
applied movement id and bumps ``revision``, so the ledger can tell whether a
write that reported a failure actually landed before retrying it.
"""

from datetime import UTC, datetime
from decimal import Decimal

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String

from storefront.domain import storefront
from storefront.errors import InsufficientStock
from storefront.inventory.events import (
    ProductDiscontinued,
    ProductRepriced,
    ProductStockRegistered,
    StockReleased,
    StockReplenished,
    StockReserved,
)
from storefront.utils.money import from_cents, to_cents


def require_positive_quantity(quantity):
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise ValidationError({"quantity": ["Quantity must be a positive integer"]})


@storefront.aggregate
class ProductStock:
    name = String(required=True, max_length=255)
    unit_price_cents = Integer(required=True, min_value=0)
    available = Integer(default=0, min_value=0)
    discontinued = Boolean(default=False)
    revision = Integer(default=0)
    last_movement_id = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def register(cls, product_id, name, unit_price, available=0):
        """Register a product with its opening stock.

        ``unit_price`` is a decimal amount (``Decimal`` or ``str``).
        """
        if available < 0:
            raise ValidationError({"available": ["Opening stock cannot be negative"]})

        now = datetime.now(UTC)
        stock = cls(
            id=str(product_id),
            name=name,
            unit_price_cents=to_cents(unit_price),
            available=available,
            created_at=now,
            updated_at=now,
        )
        stock.raise_(
            ProductStockRegistered(
                product_id=str(stock.id),
                name=name,
                unit_price_cents=stock.unit_price_cents,
                available=available,
                registered_at=now,
            )
        )
        return stock

    @property
    def unit_price(self) -> Decimal:
        return from_cents(self.unit_price_cents)

    # -------------------------------------------------------------------
    # Catalogue maintenance
    # -------------------------------------------------------------------
    def reprice(self, unit_price):
        """Change the catalogue price. Carts and orders keep their snapshots."""
        new_price_cents = to_cents(unit_price)
        if new_price_cents < 0:
            raise ValidationError({"unit_price": ["Price cannot be negative"]})

        previous = self.unit_price_cents
        self.unit_price_cents = new_price_cents
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductRepriced(
                product_id=str(self.id),
                previous_price_cents=previous,
                new_price_cents=new_price_cents,
            )
        )

    def replenish(self, quantity, movement_id):
        """Add units delivered by the supplier."""
        require_positive_quantity(quantity)

        self.available += quantity
        self._record_movement(movement_id, datetime.now(UTC))

        self.raise_(
            StockReplenished(
                product_id=str(self.id),
                movement_id=str(movement_id),
                quantity=quantity,
                new_available=self.available,
            )
        )

    def discontinue(self):
        """Withdraw the product. The ledger treats discontinued products as unknown."""
        if self.discontinued:
            raise ValidationError({"product": ["Product is already discontinued"]})

        now = datetime.now(UTC)
        self.discontinued = True
        self.updated_at = now

        self.raise_(ProductDiscontinued(product_id=str(self.id), discontinued_at=now))

    # -------------------------------------------------------------------
    # Stock movements
    # -------------------------------------------------------------------
    def reserve(self, quantity, movement_id):
        """Take ``quantity`` units out of available stock.

        Selling the last unit is legal and leaves ``available`` at exactly 0.
        """
        require_positive_quantity(quantity)

        previous = self.available
        if previous < quantity:
            raise InsufficientStock(self.id, requested=quantity, available=previous)

        now = datetime.now(UTC)
        self.available = previous - quantity
        self._record_movement(movement_id, now)

        self.raise_(
            StockReserved(
                product_id=str(self.id),
                movement_id=str(movement_id),
                quantity=quantity,
                previous_available=previous,
                new_available=self.available,
                reserved_at=now,
            )
        )

    def release(self, quantity, movement_id):
        """Put ``quantity`` units back. Never capped: stock may have been replenished meanwhile."""
        require_positive_quantity(quantity)

        previous = self.available
        now = datetime.now(UTC)
        self.available = previous + quantity
        self._record_movement(movement_id, now)

        self.raise_(
            StockReleased(
                product_id=str(self.id),
                movement_id=str(movement_id),
                quantity=quantity,
                previous_available=previous,
                new_available=self.available,
                released_at=now,
            )
        )

    def has_applied(self, movement_id) -> bool:
        return self.last_movement_id is not None and str(self.last_movement_id) == str(movement_id)

    def _record_movement(self, movement_id, now):
        self.revision += 1
        self.last_movement_id = str(movement_id)
        self.updated_at = now
