"""split-ledger - Shared-expense splitting, balances and settlement suggestions."""

__version__ = "0.1.0"

from .allocator import allocate, build_splits
from .analytics import (
    aging_buckets,
    fairness_metrics,
    participation_metrics,
    settlement_velocity,
)
from .balances import compute_balances
from .config import Settings, load_settings
from .currency import to_base
from .exceptions import InvalidSplitError, SplitLedgerError
from .models import (
    AgingBucket,
    BalanceSheet,
    Expense,
    NetBalance,
    SettlementInstruction,
    Split,
)
from .money import to_decimal, to_minor_units
from .service import LedgerService
from .settlement import minimize

__all__ = [
    "Settings",
    "load_settings",
    "InvalidSplitError",
    "SplitLedgerError",
    "AgingBucket",
    "BalanceSheet",
    "Expense",
    "NetBalance",
    "SettlementInstruction",
    "Split",
    "to_minor_units",
    "to_decimal",
    "to_base",
    "allocate",
    "build_splits",
    "compute_balances",
    "minimize",
    "aging_buckets",
    "settlement_velocity",
    "fairness_metrics",
    "participation_metrics",
    "LedgerService",
]
