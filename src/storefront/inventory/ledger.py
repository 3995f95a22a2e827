"""Inventory ledger — atomic reserve/release of per-product stock.

Each product id has its own lock. A stock movement reads the ``ProductStock``
record, checks and applies the change, and writes it back while holding that
lock, so movements on one product are linearized and movements on different
products never wait for each other.

Writes that fail with a transient store error are retried. A retry re-reads
the record first and skips the write when the movement id is already
recorded on it, so a write that landed but reported failure is never applied
twice. A version conflict, raised when a writer outside this process changed
the record between read and write, is retried the same way. Any other store
error surfaces as ``PersistenceFailure`` without a retry.
"""

from uuid import uuid4

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.errors import PersistenceFailure, ProductNotFound
from storefront.inventory.stock import ProductStock, require_positive_quantity
from storefront.utils.locks import KeyedLocks

logger = structlog.get_logger(__name__)

TRANSIENT_ERRORS = (ConnectionError, TimeoutError)
DEFAULT_WRITE_ATTEMPTS = 3


def _configured_write_attempts():
    custom = current_domain.config.get("custom", {}) or {}
    return int(custom.get("LEDGER_WRITE_ATTEMPTS", DEFAULT_WRITE_ATTEMPTS))


class InventoryLedger:
    """Owns stock movements for every product in the process."""

    def __init__(self, write_attempts=None):
        self._locks = KeyedLocks()
        self._write_attempts = write_attempts

    @property
    def write_attempts(self) -> int:
        if self._write_attempts is not None:
            return self._write_attempts
        return _configured_write_attempts()

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def available(self, product_id) -> int:
        """Return the units currently available for ``product_id``."""
        return self._load(product_id).available

    def product(self, product_id) -> ProductStock:
        """Return the current stock record. Raises ``ProductNotFound`` for unknown or discontinued ids."""
        return self._load(product_id)

    # -------------------------------------------------------------------
    # Movements
    # -------------------------------------------------------------------
    def reserve(self, product_id, quantity) -> str:
        """Take ``quantity`` units of ``product_id``. Returns the movement id.

        Raises ``InsufficientStock`` or ``ProductNotFound`` without changing
        anything.
        """
        require_positive_quantity(quantity)
        return self._move(product_id, quantity, "reserve")

    def release(self, product_id, quantity) -> str:
        """Put ``quantity`` units of ``product_id`` back. Returns the movement id."""
        require_positive_quantity(quantity)
        return self._move(product_id, quantity, "release")

    def replenish(self, product_id, quantity) -> str:
        """Add supplier stock. Takes the same lock as reserve/release."""
        require_positive_quantity(quantity)
        return self._move(product_id, quantity, "replenish")

    # -------------------------------------------------------------------
    # Catalogue maintenance
    # -------------------------------------------------------------------
    def register(self, product_id, name, unit_price, available=0) -> ProductStock:
        """Create the stock record for a new catalogue product."""
        repo = current_domain.repository_for(ProductStock)
        with self._locks.hold(product_id):
            try:
                repo.get(str(product_id))
            except ObjectNotFoundError:
                stock = ProductStock.register(product_id, name, unit_price, available)
                try:
                    self._save(stock)
                except Exception as exc:
                    raise PersistenceFailure(f"registration of {product_id}", exc) from exc
                logger.info("Product registered", product_id=str(product_id), available=available)
                return stock
        raise ValidationError({"product_id": [f"Product {product_id} is already registered"]})

    def reprice(self, product_id, unit_price) -> ProductStock:
        return self._amend(product_id, lambda stock: stock.reprice(unit_price))

    def discontinue(self, product_id) -> ProductStock:
        return self._amend(product_id, lambda stock: stock.discontinue())

    def _amend(self, product_id, change):
        attempts = max(1, self.write_attempts)
        with self._locks.hold(product_id):
            for attempt in range(1, attempts + 1):
                stock = self._load(product_id)
                change(stock)
                try:
                    self._save(stock)
                except ExpectedVersionError as exc:
                    logger.warning(
                        "Catalogue update lost a version race",
                        product_id=str(product_id),
                        attempt=attempt,
                    )
                    if attempt == attempts:
                        raise PersistenceFailure(f"catalogue update for {product_id}", exc) from exc
                    continue
                except Exception as exc:
                    raise PersistenceFailure(f"catalogue update for {product_id}", exc) from exc
                return stock

    def _move(self, product_id, quantity, action):
        movement_id = str(uuid4())
        attempts = max(1, self.write_attempts)

        with self._locks.hold(product_id):
            for attempt in range(1, attempts + 1):
                stock = self._load(product_id)
                if stock.has_applied(movement_id):
                    # An earlier attempt was written even though the store reported a failure
                    logger.info(
                        "Stock movement already applied",
                        product_id=str(product_id),
                        movement_id=movement_id,
                        attempt=attempt,
                    )
                    return movement_id

                getattr(stock, action)(quantity, movement_id)

                try:
                    self._save(stock)
                except ExpectedVersionError as exc:
                    # Another writer outside this process changed the record; re-read and re-check
                    logger.warning(
                        "Stock movement lost a version race",
                        product_id=str(product_id),
                        action=action,
                        movement_id=movement_id,
                        attempt=attempt,
                    )
                    if attempt == attempts:
                        raise PersistenceFailure(f"stock {action} for {product_id}", exc) from exc
                    continue
                except TRANSIENT_ERRORS as exc:
                    logger.warning(
                        "Transient failure writing stock movement",
                        product_id=str(product_id),
                        action=action,
                        movement_id=movement_id,
                        attempt=attempt,
                        error=str(exc),
                    )
                    if attempt == attempts:
                        raise PersistenceFailure(f"stock {action} for {product_id}", exc) from exc
                    continue
                except Exception as exc:
                    logger.error(
                        "Stock movement write failed",
                        product_id=str(product_id),
                        action=action,
                        movement_id=movement_id,
                        error=str(exc),
                    )
                    raise PersistenceFailure(f"stock {action} for {product_id}", exc) from exc

                logger.debug(
                    "Stock movement applied",
                    product_id=str(product_id),
                    action=action,
                    quantity=quantity,
                    available=stock.available,
                )
                return movement_id

    # -------------------------------------------------------------------
    # Store access
    # -------------------------------------------------------------------
    def _load(self, product_id) -> ProductStock:
        try:
            stock = current_domain.repository_for(ProductStock).get(str(product_id))
        except ObjectNotFoundError:
            raise ProductNotFound(product_id) from None
        if stock.discontinued:
            raise ProductNotFound(product_id)
        return stock

    def _save(self, stock):
        current_domain.repository_for(ProductStock).add(stock)


_ledger_instance = None


def get_ledger():
    """Return the process-wide ledger (singleton).

    Per-product locks only serialize callers that share the same ledger, so
    every request in the process must go through this instance.
    """
    global _ledger_instance
    if _ledger_instance is None:
        _ledger_instance = InventoryLedger()
    return _ledger_instance


def reset_ledger():
    """Reset the ledger singleton (useful for testing)."""
    global _ledger_instance
    _ledger_instance = None
