"""Pydantic domain models for split-ledger."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from .currency import to_base

ExpenseStatus = Literal["active", "settled", "deleted", "disputed", "archived"]
SplitStrategy = Literal["equal", "weighted", "percentage", "exact"]
SettlementStatus = Literal["PENDING", "CONFIRMED"]
AgingLabel = Literal["0-7", "8-30", "31-60", "60+"]

# debtor_id -> creditor_id -> cents owed
BalanceMatrix = dict[str, dict[str, int]]

# ============================================================================
# Expense Models
# ============================================================================


class Split(BaseModel):
    """One participant's share of an expense."""

    participant_id: str
    amount_cents: int = Field(ge=0)
    percentage: float | None = Field(default=None, ge=0, le=100)
    settled: bool = False
    settled_at: datetime | None = None


class Expense(BaseModel):
    """A recorded expense and its splits.

    amount_cents is in the transaction currency; fx_rate_to_base converts it
    to the base currency. Splits always add up to amount_cents exactly.
    """

    id: str
    amount_cents: int = Field(ge=0)
    currency: str = "USD"
    fx_rate_to_base: float = 1.0
    payer_id: str
    participants: list[Split]
    status: ExpenseStatus = "active"
    occurred_at: datetime
    settled_at: datetime | None = None
    description: str = ""
    category: str = "other"
    group_id: str | None = None  # None = personal expense
    split_type: SplitStrategy = "equal"

    @model_validator(mode="after")
    def _splits_reconcile(self) -> "Expense":
        split_total = sum(split.amount_cents for split in self.participants)
        if split_total != self.amount_cents:
            raise ValueError(
                f"Splits for expense {self.id} sum to {split_total} cents, "
                f"expected {self.amount_cents}"
            )
        return self

    @property
    def amount_base_cents(self) -> int:
        """Amount converted to the base currency."""
        return to_base(self.amount_cents, self.fx_rate_to_base)

    @property
    def is_group(self) -> bool:
        return self.group_id is not None

    @property
    def is_fully_settled(self) -> bool:
        return all(split.settled for split in self.participants)

    def split_for(self, participant_id: str) -> Split | None:
        """Get the split belonging to a participant, if any."""
        for split in self.participants:
            if split.participant_id == participant_id:
                return split
        return None

    def has_participant(self, participant_id: str) -> bool:
        """True if the participant paid or holds a split."""
        return (
            self.payer_id == participant_id
            or self.split_for(participant_id) is not None
        )


# ============================================================================
# Balance Models
# ============================================================================


class NetBalance(BaseModel):
    """A participant's position across a set of expenses (base cents)."""

    participant_id: str
    total_paid_cents: int = 0  # owed to this participant by others
    total_owed_cents: int = 0  # owed by this participant to others
    net_cents: int = 0

    @property
    def is_creditor(self) -> bool:
        return self.net_cents > 0

    @property
    def is_debtor(self) -> bool:
        return self.net_cents < 0


class BalanceSheet(BaseModel):
    """Net balances plus the full pairwise matrix they were derived from."""

    net_balances: dict[str, NetBalance]
    matrix: BalanceMatrix

    def owed(self, debtor_id: str, creditor_id: str) -> int:
        """Cents the debtor owes the creditor (0 for unknown pairs)."""
        return self.matrix.get(debtor_id, {}).get(creditor_id, 0)

    def nets(self) -> dict[str, int]:
        """Net cents per participant."""
        return {pid: bal.net_cents for pid, bal in self.net_balances.items()}


# ============================================================================
# Settlement Models
# ============================================================================


class SettlementInstruction(BaseModel):
    """One directed transfer that reduces outstanding balances."""

    from_id: str
    to_id: str
    amount_cents: int = Field(gt=0)


class SettlementRecord(BaseModel):
    """A settlement instruction persisted as a confirmable record."""

    id: str | None = None
    group_id: str | None = None
    from_id: str
    to_id: str
    amount_cents: int = Field(ge=1)
    status: SettlementStatus = "PENDING"
    created_at: datetime
    confirmed_at: datetime | None = None


class SettlementTotals(BaseModel):
    """Cents still pending versus already confirmed."""

    pending_cents: int = 0
    confirmed_cents: int = 0


# ============================================================================
# Analytics Models
# ============================================================================


class AgingBucket(BaseModel):
    """Unsettled expenses grouped by days since they occurred."""

    label: AgingLabel
    count: int = 0
    amount_cents: int = 0


class VelocityStats(BaseModel):
    """How many days settled expenses took to settle."""

    average_days: float = 0.0
    median_days: int = 0
    fastest_days: int = 0
    slowest_days: int = 0
    sample_size: int = 0


class FairnessMetrics(BaseModel):
    """How far a participant's paid/owed totals are from even."""

    participant_id: str
    total_paid_cents: int
    total_owed_cents: int
    net_cents: int
    score: float  # |net| as a percentage of paid + owed
    is_fair: bool


class ParticipationMetrics(BaseModel):
    """How often a participant shows up in the expenses considered."""

    total_expenses: int = 0
    expenses_paid: int = 0
    expenses_participated: int = 0
    participation_rate: int = 0  # whole percent


class GroupHealth(BaseModel):
    """Activity and settlement health of a group."""

    active_members_30d: int
    active_members_90d: int
    total_members: int
    weekly_expenses: int
    settlement_rate: int  # whole percent
    fast_settlement_rate: int  # whole percent


class SpendTotals(BaseModel):
    """Totals for one slice of spend."""

    amount_cents: int = 0
    base_cents: int = 0
    count: int = 0


class SpendPoint(BaseModel):
    """Spend for one calendar day, split into personal and group."""

    day: date
    personal: SpendTotals = Field(default_factory=SpendTotals)
    group: SpendTotals = Field(default_factory=SpendTotals)


class CategoryTotal(BaseModel):
    """Spend for one expense category."""

    category: str
    total_cents: int = 0
    total_base_cents: int = 0
    count: int = 0
    personal: int = 0
    group: int = 0


# ============================================================================
# Report Models
# ============================================================================


class GroupSummary(BaseModel):
    """Balances and suggested settlements for a group."""

    base_currency: str
    total_expenses_cents: int
    expense_count: int
    member_count: int
    balances: BalanceSheet
    settlements: list[SettlementInstruction]


class AnalyticsReport(BaseModel):
    """All analytics folds for one expense collection."""

    base_currency: str
    aging: list[AgingBucket]
    velocity: VelocityStats
    fairness: dict[str, FairnessMetrics]
    participation: dict[str, ParticipationMetrics]
    health: GroupHealth


class LedgerRow(BaseModel):
    """Flattened expense for ledger listings and CSV export."""

    id: str
    day: date
    description: str
    amount_cents: int
    amount_base_cents: int
    currency: str
    category: str
    type: Literal["personal", "group"]
    group_id: str | None
    payer_id: str
    status: ExpenseStatus
    participant_count: int
    is_settled: bool


class LedgerFile(BaseModel):
    """Input document for the CLI: a participant list and its expenses."""

    base_currency: str = "USD"
    participants: list[str] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)
