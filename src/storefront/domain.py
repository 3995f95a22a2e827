"""Storefront bounded context — Inventory, Shopping Cart and Orders.

Handles per-product stock (with atomic reserve/release), customer carts,
the checkout flow that converts a cart into an order, and the order
lifecycle that restores stock on cancellation.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
