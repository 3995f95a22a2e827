"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state — no cross-user sharing.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks state for a single simulated shopper."""

    customer_id: str | None = None
    item_ids: list[str] = field(default_factory=list)
    order_ids: list[str] = field(default_factory=list)
    rejected_checkouts: int = 0
