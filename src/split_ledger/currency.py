"""Normalization of transaction-currency amounts into the base currency."""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from .money import as_decimal, exact_product, round_half_away

if TYPE_CHECKING:
    from .models import Expense

logger = logging.getLogger(__name__)

DEFAULT_FX_RATE = 1.0


def to_base(amount_cents: object, fx_rate: object = DEFAULT_FX_RATE) -> int:
    """
    Convert an amount in its transaction currency to base-currency cents.

    Args:
        amount_cents: Amount in transaction-currency cents
        fx_rate: Exchange rate to the base currency (None means 1.0)

    Returns:
        round(amount_cents * fx_rate) in base cents, 0 for non-finite or
        out-of-range input
    """
    if fx_rate is None:
        fx_rate = DEFAULT_FX_RATE

    amount = as_decimal(amount_cents)
    rate = as_decimal(fx_rate)
    if amount is None or rate is None:
        return 0

    try:
        return round_half_away(exact_product(amount, rate))
    except ArithmeticError:
        logger.debug(f"Conversion of {amount_cents!r} at rate {fx_rate!r} out of range")
        return 0


def sum_base(expenses: Iterable["Expense"]) -> int:
    """Total of expense amounts in base-currency cents."""
    return sum(expense.amount_base_cents for expense in expenses)
