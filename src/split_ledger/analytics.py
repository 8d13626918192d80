"""Read-only analytics folds over an expense collection.

Each function is independent and pure. Datetimes without a timezone are
treated as UTC.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from .balances import member_balance
from .models import (
    AgingBucket,
    AgingLabel,
    CategoryTotal,
    Expense,
    FairnessMetrics,
    GroupHealth,
    ParticipationMetrics,
    SpendPoint,
    VelocityStats,
)
from .money import round_half_away

logger = logging.getLogger(__name__)

AGING_LABELS: tuple[AgingLabel, ...] = ("0-7", "8-30", "31-60", "60+")
DEFAULT_FAIRNESS_THRESHOLD = 5.0
DEFAULT_FAST_SETTLEMENT_DAYS = 14
_HEALTH_STATUSES = ("active", "settled")
_TWO_PLACES = Decimal("0.01")


def as_utc(moment: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are read as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def _days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, floored."""
    return (as_utc(end) - as_utc(start)) // timedelta(days=1)


def _percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round_half_away(Decimal(part) / Decimal(whole) * 100)


def _aging_label(days: int) -> AgingLabel:
    if days <= 7:
        return "0-7"
    if days <= 30:
        return "8-30"
    if days <= 60:
        return "31-60"
    return "60+"


def aging_buckets(
    expenses: Iterable[Expense], now: datetime | None = None
) -> list[AgingBucket]:
    """
    Bucket non-settled expenses by age.

    Args:
        expenses: Expenses to classify; settled ones are skipped
        now: Reference instant (defaults to the current UTC time)

    Returns:
        The four buckets in label order, amounts in transaction-currency cents
    """
    reference = now or datetime.now(UTC)
    buckets = {label: AgingBucket(label=label) for label in AGING_LABELS}

    for expense in expenses:
        if expense.status == "settled":
            continue
        bucket = buckets[_aging_label(_days_between(expense.occurred_at, reference))]
        bucket.count += 1
        bucket.amount_cents += expense.amount_cents

    return list(buckets.values())


def settlement_velocity(expenses: Iterable[Expense]) -> VelocityStats:
    """
    Summarize how long settled expenses took to settle.

    Median takes the lower-middle element for an even number of samples.
    Settled expenses without a settled_at are skipped.
    """
    days_to_settle = sorted(
        _days_between(expense.occurred_at, expense.settled_at)
        for expense in expenses
        if expense.status == "settled" and expense.settled_at is not None
    )

    if not days_to_settle:
        return VelocityStats()

    count = len(days_to_settle)
    average = Decimal(sum(days_to_settle)) / count

    return VelocityStats(
        average_days=float(average.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)),
        median_days=days_to_settle[(count - 1) // 2],
        fastest_days=days_to_settle[0],
        slowest_days=days_to_settle[-1],
        sample_size=count,
    )


def fairness_metrics(
    expenses: Iterable[Expense],
    participant_id: str,
    threshold_percent: float = DEFAULT_FAIRNESS_THRESHOLD,
) -> FairnessMetrics:
    """
    Score how lopsided a participant's paid/owed totals are.

    score = |net| / (paid + owed) * 100; 0 when the participant has no
    balance activity. Fair means the unrounded score < threshold; the
    reported score is rounded to 2 places.
    """
    balance = member_balance(expenses, participant_id)
    activity = balance.total_paid_cents + balance.total_owed_cents

    ratio = Decimal(0)
    if activity > 0:
        ratio = Decimal(abs(balance.net_cents)) / activity * 100

    return FairnessMetrics(
        participant_id=participant_id,
        total_paid_cents=balance.total_paid_cents,
        total_owed_cents=balance.total_owed_cents,
        net_cents=balance.net_cents,
        score=float(ratio.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)),
        is_fair=ratio < Decimal(repr(float(threshold_percent))),
    )


def participation_metrics(
    expenses: Iterable[Expense], participant_ids: Sequence[str]
) -> dict[str, ParticipationMetrics]:
    """
    Count how many expenses each participant paid for or shared in.

    Args:
        expenses: Expenses considered
        participant_ids: Participants to report on

    Returns:
        ParticipationMetrics per participant, rate as a whole percent
    """
    expense_list = list(expenses)
    total = len(expense_list)
    metrics = {}

    for participant_id in participant_ids:
        participated = sum(1 for e in expense_list if e.has_participant(participant_id))
        paid = sum(1 for e in expense_list if e.payer_id == participant_id)
        metrics[participant_id] = ParticipationMetrics(
            total_expenses=total,
            expenses_paid=paid,
            expenses_participated=participated,
            participation_rate=_percent(participated, total),
        )

    return metrics


def group_health(
    expenses: Iterable[Expense],
    member_ids: Sequence[str],
    now: datetime | None = None,
    fast_settlement_days: int = DEFAULT_FAST_SETTLEMENT_DAYS,
) -> GroupHealth:
    """
    Activity and settlement health over active and settled expenses.

    Active members are distinct payers with an expense in the window.
    Fast settlements are those settled within fast_settlement_days.
    """
    reference = as_utc(now or datetime.now(UTC))
    considered = [e for e in expenses if e.status in _HEALTH_STATUSES]

    def payers_since(days: int) -> set[str]:
        cutoff = reference - timedelta(days=days)
        return {e.payer_id for e in considered if as_utc(e.occurred_at) >= cutoff}

    week_ago = reference - timedelta(days=7)
    weekly = sum(1 for e in considered if as_utc(e.occurred_at) >= week_ago)

    settled = [e for e in considered if e.status == "settled"]
    fast = sum(
        1
        for e in settled
        if e.settled_at is not None
        and as_utc(e.settled_at) - as_utc(e.occurred_at)
        <= timedelta(days=fast_settlement_days)
    )

    return GroupHealth(
        active_members_30d=len(payers_since(30)),
        active_members_90d=len(payers_since(90)),
        total_members=len(member_ids),
        weekly_expenses=weekly,
        settlement_rate=_percent(len(settled), len(considered)),
        fast_settlement_rate=_percent(fast, len(settled)),
    )


def spend_over_time(expenses: Iterable[Expense]) -> list[SpendPoint]:
    """Daily spend (UTC days), personal and group kept apart, oldest first."""
    points: dict[date, SpendPoint] = {}

    for expense in expenses:
        day = as_utc(expense.occurred_at).date()
        point = points.setdefault(day, SpendPoint(day=day))
        totals = point.group if expense.is_group else point.personal
        totals.amount_cents += expense.amount_cents
        totals.base_cents += expense.amount_base_cents
        totals.count += 1

    return [points[day] for day in sorted(points)]


def category_breakdown(expenses: Iterable[Expense]) -> list[CategoryTotal]:
    """Spend per category, largest base total first."""
    totals: dict[str, CategoryTotal] = {}

    for expense in expenses:
        entry = totals.setdefault(expense.category, CategoryTotal(category=expense.category))
        entry.total_cents += expense.amount_cents
        entry.total_base_cents += expense.amount_base_cents
        entry.count += 1
        if expense.is_group:
            entry.group += 1
        else:
            entry.personal += 1

    return sorted(totals.values(), key=lambda t: (-t.total_base_cents, t.category))
