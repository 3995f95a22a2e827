"""Fixed-point money helpers.

Amounts are stored as integer cents and exposed as ``Decimal`` with two
places, so totals never pick up float rounding.
"""

from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")


def to_cents(amount) -> int:
    """Convert a decimal amount (``Decimal``, ``str`` or ``int``) to cents."""
    if isinstance(amount, float):
        amount = str(amount)
    value = Decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP)
    return int(value * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents or 0) / 100).quantize(_CENT)
