"""
Ledger error hierarchy.

Every per-entry failure derives from LedgerError so the engine can catch,
log and skip it without aborting the stream.
"""

from typing import Optional


class LedgerError(Exception):
    """Base exception for all ledger errors"""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class MalformedEntry(LedgerError):
    """Raised when an input row cannot be parsed into an entry"""
    pass


class MissingAmount(LedgerError):
    """Raised when a deposit or withdrawal row has no amount"""
    pass


class DuplicateTransactionId(LedgerError):
    """Raised when a fund-moving entry reuses a stored transaction id"""
    pass


class InsufficientFunds(LedgerError):
    """Raised when a withdrawal would make available funds negative"""
    pass


class AccountLocked(LedgerError):
    """Raised when a fund-moving entry targets a charged-back account"""
    pass


class TransactionNotFound(LedgerError):
    """Raised when an operation references an unknown transaction id"""
    pass


class CrossClientOperation(LedgerError):
    """Raised when an operation references another client's transaction"""
    pass


class InvalidStateForOperation(LedgerError):
    """Raised when the referenced transaction's status does not allow the operation"""
    pass


class InsufficientHeldFunds(LedgerError):
    """Raised when held funds are below the amount being released"""
    pass


class AccountMissing(LedgerError):
    """Raised when a stored transaction has no owning account"""
    pass
