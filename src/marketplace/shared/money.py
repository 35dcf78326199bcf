"""Exact money arithmetic.

Amounts are stored as floats on records but every sum is taken in
``Decimal`` and quantized to the currency's minor unit (0.01), so a total is
reproducible from its parts regardless of binary float error.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

MINOR_UNIT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Convert a stored amount to a quantized ``Decimal``."""
    return Decimal(str(value)).quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)


def line_total(price, quantity: int) -> Decimal:
    return to_money(price) * quantity


def sum_lines(lines: Iterable[tuple]) -> Decimal:
    """Sum ``(price, quantity)`` pairs at minor-unit precision."""
    total = sum((line_total(price, quantity) for price, quantity in lines), Decimal("0"))
    return total.quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)


def as_amount(value: Decimal) -> float:
    """Convert a quantized ``Decimal`` back to the stored representation."""
    return float(value)
