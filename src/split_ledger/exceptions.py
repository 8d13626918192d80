"""Custom exceptions for split-ledger."""


class SplitLedgerError(Exception):
    """Base exception for all split-ledger errors."""

    pass


class ConfigurationError(SplitLedgerError):
    """Raised when configuration is invalid or missing."""

    pass


class InvalidSplitError(SplitLedgerError):
    """Raised when an allocation cannot reconcile to the expense total.

    Covers a rounding adjustment that would drive a share negative, exact
    shares that don't add up, and shares that don't line up with participants.
    """

    def __init__(self, message: str, shares: list[int] | None = None):
        self.shares = shares or []
        super().__init__(message)


class LedgerFileError(SplitLedgerError):
    """Raised when a ledger input file cannot be read or validated."""

    pass
