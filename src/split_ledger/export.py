"""Ledger listings and CSV export."""

import csv
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from .analytics import as_utc
from .models import Expense, LedgerRow
from .money import to_decimal

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Date",
    "Description",
    "Amount",
    "Currency",
    "Base Amount",
    "Category",
    "Type",
    "Group",
    "Paid By",
    "Status",
    "Participants",
]


def ledger_rows(expenses: Iterable[Expense]) -> list[LedgerRow]:
    """
    Flatten expenses into ledger rows, newest first.

    Args:
        expenses: Expenses to list

    Returns:
        One LedgerRow per expense
    """
    ordered = sorted(expenses, key=lambda e: as_utc(e.occurred_at), reverse=True)
    return [
        LedgerRow(
            id=expense.id,
            day=as_utc(expense.occurred_at).date(),
            description=expense.description,
            amount_cents=expense.amount_cents,
            amount_base_cents=expense.amount_base_cents,
            currency=expense.currency,
            category=expense.category,
            type="group" if expense.is_group else "personal",
            group_id=expense.group_id,
            payer_id=expense.payer_id,
            status=expense.status,
            participant_count=len(expense.participants),
            is_settled=expense.status == "settled",
        )
        for expense in ordered
    ]


def write_csv(expenses: Iterable[Expense], stream: TextIO) -> int:
    """
    Write the ledger as CSV to an open text stream.

    Returns:
        Number of data rows written
    """
    writer = csv.writer(stream)
    writer.writerow(CSV_HEADER)

    rows = ledger_rows(expenses)
    for row in rows:
        writer.writerow(
            [
                row.day.isoformat(),
                row.description,
                str(to_decimal(row.amount_cents)),
                row.currency,
                str(to_decimal(row.amount_base_cents)),
                row.category,
                row.type,
                row.group_id or "N/A",
                row.payer_id,
                row.status,
                row.participant_count,
            ]
        )

    return len(rows)


def export_csv(expenses: Iterable[Expense], path: Path) -> int:
    """Export the ledger to a CSV file, returning the number of rows."""
    with open(path, "w", newline="", encoding="utf-8") as f:
        count = write_csv(expenses, f)

    logger.info(f"Exported {count} expenses to {path}")
    return count
