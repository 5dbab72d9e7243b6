"""Integer-cent money helpers.

All accumulation happens on ``int`` cents. ``Decimal`` only appears when a
value crosses the display boundary (API responses) or enters from a request.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
PERCENT_QUANT = Decimal("0.0001")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def quantize_percent(value: Decimal) -> Decimal:
    return value.quantize(PERCENT_QUANT, rounding=ROUND_HALF_UP)


def cents_to_amount(cents: int) -> Decimal:
    """12574 -> Decimal('125.74')"""
    return (Decimal(cents) / HUNDRED).quantize(CENT)


def amount_to_cents(amount: Decimal) -> int:
    """Decimal('125.74') -> 12574. Fractions below one cent round half-up."""
    return int((quantize_money(amount) * HUNDRED).to_integral_value(rounding=ROUND_HALF_UP))


def budget_limit_cents(salary_cents: int, percentage: int) -> int:
    # Salary is divided into whole units before applying the percentage.
    # Reordering this changes rounding for salaries with non-zero cents.
    return percentage * _truncating_div(salary_cents, 100)


def _truncating_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient
