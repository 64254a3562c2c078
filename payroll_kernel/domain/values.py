"""
Values -- Decimal coercion and monetary rounding.

Responsibility:
    The one place where raw inputs (int, str, float, Decimal) become
    ``Decimal`` and where statement amounts are rounded.  Engines and
    the assembler never call ``Decimal(float)`` or ``round()`` directly.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Floats are converted through ``str`` so 0.1 stays 0.1.
    - NaN and infinities are rejected at the boundary.
    - ``round_money`` quantizes to 0.01 with ROUND_HALF_UP; it is the only
      sanctioned rounding for pay statement lines.  ``floor_money`` only
      caps a rounded line that must not exceed an unrounded amount.

Failure modes:
    - InvalidInputError on None, booleans, unparsable strings, non-finite
      values, and (when requested) negative or non-positive values.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from payroll_kernel.exceptions import InvalidInputError

ZERO = Decimal("0")
MONEY_QUANTUM = Decimal("0.01")


def to_decimal(
    value: Any,
    field: str,
    *,
    allow_negative: bool = False,
    allow_zero: bool = True,
) -> Decimal:
    """
    Coerce ``value`` to a finite ``Decimal``.

    Preconditions:
        ``value`` is an int, float, str or Decimal.
    Postconditions:
        Returns a finite Decimal.  Negative values only when
        ``allow_negative``; zero only when ``allow_zero``.
    Raises:
        InvalidInputError: for anything else.
    """
    if value is None or isinstance(value, bool):
        raise InvalidInputError(field, "a numeric value is required", value)

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidInputError(field, "not a number", value) from None
    else:
        raise InvalidInputError(
            field, f"unsupported type {type(value).__name__}", value
        )

    if not result.is_finite():
        raise InvalidInputError(field, "must be finite", value)
    if not allow_negative and result < ZERO:
        raise InvalidInputError(field, "must not be negative", value)
    if not allow_zero and result == ZERO:
        raise InvalidInputError(field, "must be greater than zero", value)
    return result


def round_money(value: Decimal) -> Decimal:
    """Round a monetary amount to 0.01 (ROUND_HALF_UP)."""
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def floor_money(value: Decimal) -> Decimal:
    """Truncate a non-negative amount to 0.01, so the result never exceeds it."""
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_DOWN)
