"""Tests for settlement suggestions and settlement records."""

import logging
from datetime import UTC, datetime

from split_ledger.models import NetBalance, SettlementInstruction
from split_ledger.settlement import (
    apply_instructions,
    confirm_settlement,
    minimize,
    minimize_matrix,
    outstanding_balances,
    plan_settle_up,
    settlement_totals,
)

NOW = datetime(2024, 6, 1, 12, tzinfo=UTC)


def as_tuples(instructions: list[SettlementInstruction]) -> list[tuple[str, str, int]]:
    return [(i.from_id, i.to_id, i.amount_cents) for i in instructions]


class TestMinimize:
    """Test greedy debt netting."""

    def test_largest_debts_matched_first(self):
        """Each step pays the largest debtor to the largest creditor."""
        nets = {"a": 500, "b": 300, "c": -200, "d": -250, "e": -350}

        assert as_tuples(minimize(nets)) == [
            ("e", "a", 350),
            ("d", "b", 250),
            ("c", "a", 150),
            ("c", "b", 50),
        ]

    def test_ties_break_by_participant_id(self):
        """Equal magnitudes are matched in ascending ID order."""
        nets = {"y": 100, "x": 100, "q": -100, "p": -100}

        assert as_tuples(minimize(nets)) == [("p", "x", 100), ("q", "y", 100)]

    def test_one_creditor_many_debtors(self):
        """A single creditor collects from everyone."""
        nets = {"A": 150, "B": -100, "C": -50}

        assert as_tuples(minimize(nets)) == [("B", "A", 100), ("C", "A", 50)]

    def test_clears_every_balance(self):
        """Applying the instructions leaves everyone at zero."""
        nets = {"a": 1234, "b": -999, "c": 17, "d": -252, "e": 0}

        instructions = minimize(nets)

        assert all(cents == 0 for cents in apply_instructions(nets, instructions).values())
        assert len(instructions) <= len(nets) - 1
        assert all(i.amount_cents > 0 for i in instructions)

    def test_accepts_net_balance_models(self):
        """NetBalance values work the same as plain cents."""
        nets = {
            "alice": NetBalance(participant_id="alice", net_cents=300),
            "bob": NetBalance(participant_id="bob", net_cents=-300),
        }

        assert as_tuples(minimize(nets)) == [("bob", "alice", 300)]

    def test_settled_group(self):
        """No balances, no transfers."""
        assert minimize({}) == []
        assert minimize({"a": 0, "b": 0}) == []

    def test_unbalanced_input_is_logged(self, caplog):
        """Unbalanced nets still settle what they can and warn."""
        with caplog.at_level(logging.WARNING, logger="split_ledger.settlement"):
            instructions = minimize({"a": 100, "b": -50})

        assert as_tuples(instructions) == [("b", "a", 50)]
        assert "do not sum to zero" in caplog.text

    def test_is_deterministic(self):
        """The same balances always give the same instructions."""
        nets = {"d": 100, "c": 100, "b": -100, "a": -100}
        reordered = dict(reversed(list(nets.items())))

        assert as_tuples(minimize(nets)) == as_tuples(minimize(reordered))

    def test_from_matrix(self):
        """A balance matrix collapses to nets before netting."""
        matrix = {
            "a": {"a": 0, "b": 0},
            "b": {"a": 500, "b": 0},
        }

        assert as_tuples(minimize_matrix(matrix)) == [("b", "a", 500)]


class TestSettlementRecords:
    """Test the PENDING -> CONFIRMED lifecycle."""

    def test_plan_creates_pending_records(self):
        """Each instruction becomes a pending record."""
        instructions = minimize({"a": 150, "b": -100, "c": -50})

        records = plan_settle_up(instructions, group_id="trip", now=NOW)

        assert [(r.from_id, r.to_id, r.amount_cents) for r in records] == [
            ("b", "a", 100),
            ("c", "a", 50),
        ]
        assert all(r.status == "PENDING" for r in records)
        assert all(r.group_id == "trip" for r in records)
        assert all(r.created_at == NOW for r in records)

    def test_confirm(self):
        """Confirming stamps the record and leaves the input record alone."""
        record = plan_settle_up(minimize({"a": 100, "b": -100}), now=NOW)[0]

        confirmed = confirm_settlement(record, now=NOW)

        assert confirmed.status == "CONFIRMED"
        assert confirmed.confirmed_at == NOW
        assert record.status == "PENDING"

    def test_confirm_is_idempotent(self):
        """Confirming twice keeps the first confirmation time."""
        record = plan_settle_up(minimize({"a": 100, "b": -100}), now=NOW)[0]
        confirmed = confirm_settlement(record, now=NOW)

        again = confirm_settlement(confirmed, now=datetime(2024, 7, 1, tzinfo=UTC))

        assert again.confirmed_at == NOW

    def test_totals_and_outstanding(self):
        """Only confirmed records reduce outstanding balances."""
        nets = {"a": 150, "b": -100, "c": -50}
        records = plan_settle_up(minimize(nets), now=NOW)
        records[0] = confirm_settlement(records[0], now=NOW)

        totals = settlement_totals(records)
        assert totals.confirmed_cents == 100
        assert totals.pending_cents == 50

        assert outstanding_balances(nets, records) == {"a": 50, "b": 0, "c": -50}
