"""Service layer that composes balances, settlement and analytics.

The request layer hands this service an already-fetched expense collection;
the service applies the configured status filters and composes the pure
ledger functions into the views the request layer returns.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime

from .analytics import (
    aging_buckets,
    fairness_metrics,
    group_health,
    participation_metrics,
    settlement_velocity,
)
from .balances import compute_balances
from .config import Settings
from .currency import sum_base
from .models import AnalyticsReport, Expense, GroupSummary, SettlementRecord
from .settlement import minimize, plan_settle_up

logger = logging.getLogger(__name__)


class LedgerService:
    """Service for computing group balances, settle-up plans and analytics."""

    def __init__(self, settings: Settings):
        """Initialize the ledger service."""
        self.settings = settings

    def _filter(
        self, expenses: Iterable[Expense], statuses: Sequence[str]
    ) -> list[Expense]:
        kept = [expense for expense in expenses if expense.status in statuses]
        logger.debug(f"Kept {len(kept)} expenses with status in {list(statuses)}")
        return kept

    def summarize_group(
        self, expenses: Iterable[Expense], member_ids: Sequence[str]
    ) -> GroupSummary:
        """
        Compute balances and suggested settlements for a group.

        Args:
            expenses: The group's expenses
            member_ids: Current group members

        Returns:
            Group summary with balance sheet and settlement suggestions
        """
        considered = self._filter(expenses, self.settings.balance_statuses)

        sheet = compute_balances(considered, member_ids)
        settlements = minimize(sheet.net_balances)

        summary = GroupSummary(
            base_currency=self.settings.base_currency,
            total_expenses_cents=sum_base(considered),
            expense_count=len(considered),
            member_count=len(member_ids),
            balances=sheet,
            settlements=settlements,
        )

        logger.info(
            f"Summarized {summary.expense_count} expenses for "
            f"{summary.member_count} members: {len(settlements)} settlements suggested"
        )

        return summary

    def settle_up(
        self,
        expenses: Iterable[Expense],
        member_ids: Sequence[str],
        group_id: str | None = None,
        now: datetime | None = None,
    ) -> list[SettlementRecord]:
        """
        Build a PENDING settle-up plan for a group.

        Args:
            expenses: The group's expenses
            member_ids: Current group members
            group_id: Group the records belong to
            now: Creation time for the records

        Returns:
            Settlement records for the caller to persist
        """
        summary = self.summarize_group(expenses, member_ids)
        records = plan_settle_up(summary.settlements, group_id=group_id, now=now)

        logger.info(
            f"Planned {len(records)} settlements totaling "
            f"{sum(r.amount_cents for r in records)} cents"
        )

        return records

    def analytics_report(
        self,
        expenses: Iterable[Expense],
        member_ids: Sequence[str],
        now: datetime | None = None,
    ) -> AnalyticsReport:
        """
        Run every analytics fold over the configured statuses.

        Args:
            expenses: Expenses to analyze
            member_ids: Members to report fairness and participation for
            now: Reference instant for aging and health

        Returns:
            Combined analytics report
        """
        considered = self._filter(expenses, self.settings.analytics_statuses)
        threshold = self.settings.fairness_threshold_percent

        return AnalyticsReport(
            base_currency=self.settings.base_currency,
            aging=aging_buckets(considered, now=now),
            velocity=settlement_velocity(considered),
            fairness={
                member_id: fairness_metrics(considered, member_id, threshold)
                for member_id in member_ids
            },
            participation=participation_metrics(considered, member_ids),
            health=group_health(
                considered,
                member_ids,
                now=now,
                fast_settlement_days=self.settings.fast_settlement_days,
            ),
        )
