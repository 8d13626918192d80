"""Settlement suggestions: greedy debt netting over net balances.

Creditors and debtors sit in two max-heaps keyed by remaining magnitude.
Each step pays the largest remaining debtor's money to the largest remaining
creditor. Equal magnitudes are ordered by participant ID, ascending, so the
same balances always produce the same instructions.
"""

import heapq
import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime

from .balances import net_balances_from_matrix
from .models import (
    NetBalance,
    SettlementInstruction,
    SettlementRecord,
    SettlementTotals,
)

logger = logging.getLogger(__name__)


def _net_cents(value: int | NetBalance) -> int:
    return value.net_cents if isinstance(value, NetBalance) else int(value)


def minimize(net_balances: Mapping[str, int | NetBalance]) -> list[SettlementInstruction]:
    """
    Produce transfers that clear every net balance.

    Args:
        net_balances: Net cents (or NetBalance) per participant;
                      positive = owed money, negative = owes money

    Returns:
        At most participants - 1 instructions, debtor -> creditor
    """
    nets = {pid: _net_cents(value) for pid, value in net_balances.items()}

    imbalance = sum(nets.values())
    if imbalance != 0:
        logger.warning(
            f"Net balances do not sum to zero (off by {imbalance} cents); "
            f"some balances will remain after settlement"
        )

    # Min-heaps on negated magnitude; ties fall through to participant ID
    creditors = [(-net, pid) for pid, net in nets.items() if net > 0]
    debtors = [(net, pid) for pid, net in nets.items() if net < 0]
    heapq.heapify(creditors)
    heapq.heapify(debtors)

    instructions = []
    while creditors and debtors:
        credit, creditor_id = heapq.heappop(creditors)
        debt, debtor_id = heapq.heappop(debtors)
        credit, debt = -credit, -debt

        amount = min(credit, debt)
        instructions.append(
            SettlementInstruction(from_id=debtor_id, to_id=creditor_id, amount_cents=amount)
        )

        if credit > amount:
            heapq.heappush(creditors, (-(credit - amount), creditor_id))
        if debt > amount:
            heapq.heappush(debtors, (-(debt - amount), debtor_id))

    logger.info(
        f"Settled {len(nets)} balances with {len(instructions)} transfers "
        f"totaling {sum(i.amount_cents for i in instructions)} cents"
    )

    return instructions


def minimize_matrix(matrix: Mapping[str, Mapping[str, int]]) -> list[SettlementInstruction]:
    """Minimize straight from a balance matrix."""
    return minimize(net_balances_from_matrix(matrix))


def apply_instructions(
    net_balances: Mapping[str, int | NetBalance],
    instructions: Iterable[SettlementInstruction | SettlementRecord],
) -> dict[str, int]:
    """
    Replay transfers against net balances.

    Args:
        net_balances: Starting net cents per participant
        instructions: Transfers to apply

    Returns:
        Remaining net cents per participant
    """
    remaining = {pid: _net_cents(value) for pid, value in net_balances.items()}
    for instruction in instructions:
        remaining[instruction.from_id] = (
            remaining.get(instruction.from_id, 0) + instruction.amount_cents
        )
        remaining[instruction.to_id] = (
            remaining.get(instruction.to_id, 0) - instruction.amount_cents
        )
    return remaining


# ============================================================================
# Settlement records
# ============================================================================


def plan_settle_up(
    instructions: Iterable[SettlementInstruction],
    group_id: str | None = None,
    now: datetime | None = None,
) -> list[SettlementRecord]:
    """
    Turn instructions into PENDING settlement records.

    Persisting the records is up to the caller.
    """
    created_at = now or datetime.now(UTC)
    return [
        SettlementRecord(
            group_id=group_id,
            from_id=instruction.from_id,
            to_id=instruction.to_id,
            amount_cents=instruction.amount_cents,
            created_at=created_at,
        )
        for instruction in instructions
    ]


def confirm_settlement(
    record: SettlementRecord, now: datetime | None = None
) -> SettlementRecord:
    """
    Mark a settlement record as confirmed.

    Confirming an already-confirmed record returns it unchanged.
    """
    if record.status == "CONFIRMED":
        return record

    return record.model_copy(
        update={"status": "CONFIRMED", "confirmed_at": now or datetime.now(UTC)}
    )


def settlement_totals(records: Iterable[SettlementRecord]) -> SettlementTotals:
    """Sum pending and confirmed settlement cents."""
    totals = SettlementTotals()
    for record in records:
        if record.status == "CONFIRMED":
            totals.confirmed_cents += record.amount_cents
        else:
            totals.pending_cents += record.amount_cents
    return totals


def outstanding_balances(
    net_balances: Mapping[str, int | NetBalance],
    records: Iterable[SettlementRecord],
) -> dict[str, int]:
    """Net balances left after applying confirmed settlement records."""
    confirmed = [record for record in records if record.status == "CONFIRMED"]
    return apply_instructions(net_balances, confirmed)
