"""Balance computation: who owes whom across a set of expenses.

This is a pure fold over the expense collection. Nothing is cached between
calls, so it is safe to recompute on every query.
"""

import logging
from collections.abc import Iterable, Mapping

from .currency import to_base
from .models import BalanceMatrix, BalanceSheet, Expense, NetBalance

logger = logging.getLogger(__name__)


def participants_of(expenses: Iterable[Expense]) -> list[str]:
    """
    Collect every payer and splitter, in first-seen order.

    Args:
        expenses: Expenses to scan

    Returns:
        Unique participant IDs
    """
    seen: dict[str, None] = {}
    for expense in expenses:
        seen.setdefault(expense.payer_id, None)
        for split in expense.participants:
            seen.setdefault(split.participant_id, None)
    return list(seen)


def balance_matrix(
    expenses: Iterable[Expense], participant_ids: Iterable[str]
) -> BalanceMatrix:
    """
    Build the pairwise matrix of base-currency cents owed.

    matrix[a][b] is what a owes b. Each non-payer split adds its
    base-currency amount to matrix[splitter][payer]; the payer's own split
    adds nothing.

    Args:
        expenses: Expenses to fold, already filtered by the caller
        participant_ids: Fixed participant set the matrix covers

    Returns:
        Matrix over every ordered pair, zero diagonal
    """
    ids = list(dict.fromkeys(participant_ids))
    matrix: BalanceMatrix = {debtor: {creditor: 0 for creditor in ids} for debtor in ids}

    for expense in expenses:
        payer_id = expense.payer_id
        if payer_id not in matrix:
            logger.debug(f"Skipping expense {expense.id}: payer {payer_id} not tracked")
            continue

        for split in expense.participants:
            splitter_id = split.participant_id
            if splitter_id == payer_id:
                continue
            if splitter_id not in matrix:
                logger.debug(
                    f"Skipping split of {splitter_id} on expense {expense.id}: "
                    f"participant not tracked"
                )
                continue

            matrix[splitter_id][payer_id] += to_base(
                split.amount_cents, expense.fx_rate_to_base
            )

    return matrix


def net_balances_from_matrix(matrix: Mapping[str, Mapping[str, int]]) -> dict[str, int]:
    """
    Collapse a balance matrix into net cents per participant.

    Positive means the participant is owed money, negative means they owe.
    """
    nets = {participant_id: 0 for participant_id in matrix}
    for debtor_id, row in matrix.items():
        for creditor_id, cents in row.items():
            if debtor_id == creditor_id or not cents:
                continue
            nets[debtor_id] -= cents
            nets[creditor_id] = nets.get(creditor_id, 0) + cents
    return nets


def compute_balances(
    expenses: Iterable[Expense], participant_ids: Iterable[str]
) -> BalanceSheet:
    """
    Compute net balances and the pairwise matrix for a participant set.

    Args:
        expenses: Expenses to fold, already filtered by the caller
        participant_ids: Participants to report on

    Returns:
        BalanceSheet with one NetBalance per participant and the matrix
    """
    matrix = balance_matrix(expenses, participant_ids)

    net_balances = {}
    for participant_id in matrix:
        total_paid = sum(
            matrix[other][participant_id] for other in matrix if other != participant_id
        )
        total_owed = sum(
            cents for other, cents in matrix[participant_id].items() if other != participant_id
        )
        net_balances[participant_id] = NetBalance(
            participant_id=participant_id,
            total_paid_cents=total_paid,
            total_owed_cents=total_owed,
            net_cents=total_paid - total_owed,
        )

    logger.debug(f"Computed balances for {len(net_balances)} participants")

    return BalanceSheet(net_balances=net_balances, matrix=matrix)


def member_balance(expenses: Iterable[Expense], participant_id: str) -> NetBalance:
    """
    Get one participant's balance across everyone in the expenses.

    Args:
        expenses: Expenses to fold
        participant_id: Participant to report on

    Returns:
        The participant's NetBalance (all zero if they never appear)
    """
    expense_list = list(expenses)
    ids = participants_of(expense_list)
    if participant_id not in ids:
        return NetBalance(participant_id=participant_id)

    sheet = compute_balances(expense_list, ids)
    return sheet.net_balances[participant_id]
