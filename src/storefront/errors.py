"""Error kinds raised by the checkout core.

Every error carries a stable ``kind`` string so the HTTP layer (or any other
dispatcher) can render a specific message instead of a generic failure.
"""


class StorefrontError(Exception):
    """Base exception for all checkout-core errors."""

    kind = "StorefrontError"


class ProductNotFound(StorefrontError):
    """Raised when a product id is unknown to the inventory ledger."""

    kind = "ProductNotFound"

    def __init__(self, product_id: str):
        self.product_id = str(product_id)
        super().__init__(f"Product not found: {product_id}")


class InsufficientStock(StorefrontError):
    """Raised when a reservation asks for more units than are available."""

    kind = "InsufficientStock"

    def __init__(self, product_id: str, requested: int, available: int):
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient stock for {product_id}: {available} available, {requested} requested")


class EmptyCart(StorefrontError):
    """Raised when checking out a cart that holds no line items."""

    kind = "EmptyCart"

    def __init__(self, customer_id: str):
        self.customer_id = str(customer_id)
        super().__init__(f"Cart of customer {customer_id} is empty")


class ItemNotFound(StorefrontError):
    """Raised when a line item id is not present in the customer's cart."""

    kind = "ItemNotFound"

    def __init__(self, item_id: str):
        self.item_id = str(item_id)
        super().__init__(f"Line item not found in cart: {item_id}")


class OrderNotFound(StorefrontError):
    kind = "OrderNotFound"

    def __init__(self, order_id: str):
        self.order_id = str(order_id)
        super().__init__(f"Order not found: {order_id}")


class CustomerNotFound(StorefrontError):
    """Raised when checkout finds no contact profile for the buyer."""

    kind = "CustomerNotFound"

    def __init__(self, customer_id: str):
        self.customer_id = str(customer_id)
        super().__init__(f"No contact profile for customer {customer_id}")


class InvalidTransition(StorefrontError):
    """Raised when an order status change is not allowed from its current status."""

    kind = "InvalidTransition"

    def __init__(self, order_id: str, current: str, target: str):
        self.order_id = str(order_id)
        self.current = current
        self.target = target
        super().__init__(f"Cannot transition order {order_id} from {current} to {target}")


class PartialCancellationFailure(StorefrontError):
    """Raised when stock for a cancelled order could not be restored.

    The order keeps its previous status; ``cause`` holds the ledger error
    that stopped the cancellation.
    """

    kind = "PartialCancellationFailure"

    def __init__(self, order_id: str, cause: Exception):
        self.order_id = str(order_id)
        self.cause = cause
        super().__init__(f"Cancellation of order {order_id} aborted, stock not restored: {cause}")


class PersistenceFailure(StorefrontError):
    """Raised when the store could not durably record a change."""

    kind = "PersistenceFailure"

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        msg = f"Could not persist {operation}"
        if cause is not None:
            msg = f"{msg}: {cause}"
        super().__init__(msg)
