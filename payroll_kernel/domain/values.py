"""
Values -- Currency amount helpers for statutory payroll arithmetic.

Responsibility:
    Converts caller-supplied amounts into ``Decimal`` and applies the three
    rounding rules the tax authority prescribes: pennies (half up) for tax
    amounts, pennies rounded up for free pay, and whole pounds rounded down
    for taxable pay.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic: floats are rejected at the boundary, never
      coerced, so binary rounding noise can never reach a tax figure.

Failure modes:
    - TypeError for floats, booleans and unsupported types.
    - ValueError for strings that are not numbers, and for NaN.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation

PENNY = Decimal("0.01")
POUND = Decimal("1")
ZERO = Decimal("0")
INFINITY = Decimal("Infinity")

Amount = Decimal | int | str


def to_amount(value: Amount) -> Decimal:
    """Coerce an int, str or Decimal into a Decimal amount."""
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(
            f"Amounts must be Decimal, int or str, not {type(value).__name__}"
        )
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    else:
        raise TypeError(f"Unsupported amount type: {type(value).__name__}")
    if result.is_nan():
        raise ValueError("Amount cannot be NaN")
    return result


def round_to_penny(value: Decimal) -> Decimal:
    """Round half up to two decimal places."""
    return value.quantize(PENNY, rounding=ROUND_HALF_UP)


def round_up_to_penny(value: Decimal) -> Decimal:
    """Round towards positive infinity to two decimal places."""
    return value.quantize(PENNY, rounding=ROUND_CEILING)


def floor_to_pound(value: Decimal) -> Decimal:
    """Round down to whole pounds."""
    return value.quantize(POUND, rounding=ROUND_FLOOR)


def to_pennies(value: Amount) -> int:
    """Convert an amount to integer minor units for storage."""
    amount = to_amount(value)
    if amount.is_infinite():
        raise ValueError("Cannot store an infinite amount")
    return int(round_to_penny(amount) * 100)
