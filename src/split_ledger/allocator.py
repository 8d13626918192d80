"""Allocation of an expense total into per-participant shares.

Every strategy returns integer cents that sum exactly to the total. Rounding
residue lands in one fixed place: the first participants for equal splits,
the last participant for weighted and percentage splits.
"""

import logging
from collections.abc import Sequence
from decimal import Decimal

from .exceptions import InvalidSplitError
from .models import Split, SplitStrategy
from .money import as_decimal, round_half_away

logger = logging.getLogger(__name__)


def equal_split(total_cents: int, participant_count: int) -> list[int]:
    """
    Split a total evenly, handing leftover cents to the first participants.

    Args:
        total_cents: Amount to split
        participant_count: Number of participants

    Returns:
        Shares in cents, empty if participant_count <= 0
    """
    if participant_count <= 0:
        return []

    base, remainder = divmod(total_cents, participant_count)
    return [base + 1 if i < remainder else base for i in range(participant_count)]


def _apply_residual(total_cents: int, shares: list[int], strategy: str) -> list[int]:
    """Push the rounding residual onto the last share and validate the result."""
    residual = total_cents - sum(shares)

    if residual != 0:
        shares[-1] += residual
        logger.debug(
            f"Applied {strategy} rounding adjustment: {residual} cents "
            f"to share {len(shares) - 1}"
        )

    if any(share < 0 for share in shares):
        raise InvalidSplitError(
            f"Invalid {strategy} split after rounding: shares {shares} "
            f"include a negative amount (total {total_cents} cents)",
            shares=shares,
        )

    return shares


def _finite_or_zero(values: Sequence[object]) -> list[Decimal]:
    return [as_decimal(value) or Decimal(0) for value in values]


def weighted_split(total_cents: int, weights: Sequence[object]) -> list[int]:
    """
    Split a total proportionally to weights.

    Args:
        total_cents: Amount to split
        weights: One weight per participant; all-zero falls back to equal

    Returns:
        Shares in cents

    Raises:
        InvalidSplitError: If the last-share adjustment goes negative
    """
    if not weights:
        return []

    parsed = _finite_or_zero(weights)
    total_weight = sum(parsed)
    if total_weight == 0:
        return equal_split(total_cents, len(parsed))

    shares = [round_half_away(w / total_weight * total_cents) for w in parsed]
    return _apply_residual(total_cents, shares, "weighted")


def percentage_split(total_cents: int, percentages: Sequence[object]) -> list[int]:
    """
    Split a total by percentages (0-100).

    Args:
        total_cents: Amount to split
        percentages: One percentage per participant

    Returns:
        Shares in cents

    Raises:
        InvalidSplitError: If the last-share adjustment goes negative
    """
    if not percentages:
        return []

    parsed = _finite_or_zero(percentages)
    shares = [round_half_away(p / 100 * total_cents) for p in parsed]
    return _apply_residual(total_cents, shares, "percentage")


def exact_split(total_cents: int, amounts: Sequence[int]) -> list[int]:
    """
    Validate explicit per-participant shares.

    Raises:
        InvalidSplitError: If shares are negative or don't add up to the total
    """
    shares = [int(amount) for amount in amounts]
    if any(share < 0 for share in shares):
        raise InvalidSplitError(
            f"Exact split has a negative share: {shares}", shares=shares
        )
    if sum(shares) != total_cents:
        raise InvalidSplitError(
            f"Exact split sums to {sum(shares)} cents, expected {total_cents}",
            shares=shares,
        )
    return shares


def allocate(
    total_cents: int,
    strategy: SplitStrategy,
    params: int | Sequence[object],
) -> list[int]:
    """
    Allocate a total using the given strategy.

    Args:
        total_cents: Amount to split, in cents
        strategy: "equal", "weighted", "percentage" or "exact"
        params: Participant count (or any sequence, for equal), weights,
                percentages, or exact cents shares

    Returns:
        Shares in cents, summing to total_cents

    Raises:
        InvalidSplitError: If the shares can't reconcile to the total
        ValueError: If the strategy is unknown
    """
    if strategy == "equal":
        count = params if isinstance(params, int) else len(params)
        return equal_split(total_cents, count)

    if isinstance(params, int):
        raise InvalidSplitError(f"{strategy} split needs one value per participant")

    if strategy == "weighted":
        return weighted_split(total_cents, params)
    if strategy == "percentage":
        return percentage_split(total_cents, params)
    if strategy == "exact":
        return exact_split(total_cents, params)  # type: ignore[arg-type]

    raise ValueError(f"Unknown split strategy: {strategy}")


def build_splits(
    total_cents: int,
    participant_ids: Sequence[str],
    strategy: SplitStrategy = "equal",
    params: Sequence[object] | None = None,
) -> list[Split]:
    """
    Allocate a total and pair each share with its participant.

    Args:
        total_cents: Expense amount in cents
        participant_ids: Participants in allocation order
        strategy: Split strategy
        params: Weights, percentages or exact shares (ignored for equal)

    Returns:
        Split records ready to attach to an Expense

    Raises:
        InvalidSplitError: If params don't match participants or can't reconcile
    """
    if strategy == "equal":
        shares = allocate(total_cents, "equal", len(participant_ids))
    else:
        if params is None or len(params) != len(participant_ids):
            raise InvalidSplitError(
                f"{strategy} split needs {len(participant_ids)} values, "
                f"got {0 if params is None else len(params)}"
            )
        shares = allocate(total_cents, strategy, params)

    splits = []
    for index, (participant_id, share) in enumerate(zip(participant_ids, shares)):
        percentage = None
        if strategy == "percentage" and params is not None:
            parsed = as_decimal(params[index])
            percentage = float(parsed) if parsed is not None else None
        splits.append(
            Split(
                participant_id=participant_id,
                amount_cents=share,
                percentage=percentage,
            )
        )

    return splits
