"""Conversion between decimal money values and integer minor units (cents).

Everything past this boundary works on ``int`` cents only. Rounding is
half away from zero everywhere, via ``Decimal`` ``ROUND_HALF_UP``.
"""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext, localcontext

logger = logging.getLogger(__name__)

CENTS_PER_UNIT = 100
_TWO_PLACES = Decimal("0.01")


def as_decimal(value: object) -> Decimal | None:
    """
    Coerce a numeric value or its text form to a finite Decimal.

    Floats go through their shortest text form, so 10.555 becomes
    Decimal("10.555") rather than its binary expansion.

    Args:
        value: int, float, Decimal or str

    Returns:
        Finite Decimal, or None for anything non-numeric, non-finite or
        beyond the decimal context's exponent range
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        value = repr(value)

    if isinstance(value, str):
        value = value.strip()

    if not isinstance(value, (int, str, Decimal)):
        return None

    try:
        result = Decimal(value)
    except (InvalidOperation, ValueError):
        return None

    if not result.is_finite() or result.adjusted() > getcontext().Emax:
        return None
    return result


def exact_product(a: Decimal, b: Decimal) -> Decimal:
    """Multiply two Decimals without losing digits to the context precision."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(a.as_tuple().digits) + len(b.as_tuple().digits))
        return a * b


def round_half_away(value: Decimal) -> int:
    """Round a Decimal to the nearest integer, halves away from zero."""
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))


def to_minor_units(value: object) -> int:
    """
    Convert a decimal amount to integer minor units.

    Safe at untrusted boundaries: non-numeric, non-finite or out-of-range
    input returns 0.

    Args:
        value: Amount as int, float, Decimal or numeric string

    Returns:
        Amount in cents
    """
    amount = as_decimal(value)
    if amount is None:
        logger.debug(f"Non-numeric money value {value!r} converted to 0")
        return 0

    try:
        return round_half_away(exact_product(amount, Decimal(CENTS_PER_UNIT)))
    except ArithmeticError:
        logger.debug(f"Money value {value!r} out of range, converted to 0")
        return 0


def to_decimal(minor_units: object) -> Decimal:
    """
    Convert integer minor units back to a 2-place Decimal.

    Args:
        minor_units: Amount in cents; fractional cents are rounded first

    Returns:
        Decimal amount, Decimal("0.00") for invalid input
    """
    cents = as_decimal(minor_units)
    if cents is None:
        return Decimal("0.00")

    whole_cents = round_half_away(cents)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(str(abs(whole_cents))) + 2)
        return (Decimal(whole_cents) / CENTS_PER_UNIT).quantize(
            _TWO_PLACES, rounding=ROUND_HALF_UP
        )


def round_to_two(value: object) -> Decimal:
    """Round a decimal amount to two places the same way the ledger does."""
    return to_decimal(to_minor_units(value))
