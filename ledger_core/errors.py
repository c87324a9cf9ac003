"""
Error taxonomy for the commission ledger.

Every error raised by the ledger packages derives from LedgerError so that
callers can catch the whole family at once. Input errors also derive from
ValueError and lookup errors from LookupError, matching what plain Python
code would raise for the same mistakes.
"""

from typing import Optional


class LedgerError(Exception):
    """Base class for all ledger errors."""


class ValidationError(LedgerError, ValueError):
    """Malformed input to a ledger operation."""


class StatusTransitionError(ValidationError):
    """
    A transaction status change not allowed by the lifecycle.

    Attributes:
        current (str): Status the transaction is in
        requested (str): Status that was asked for
    """

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot move transaction from {current} to {requested}"
        )


class NotFoundError(LedgerError, LookupError):
    """Unknown transaction, block or commission id."""


class EmptyPendingPoolError(LedgerError):
    """Mining was requested with nothing waiting to be sealed."""


class IntegrityError(LedgerError):
    """
    Hash mismatch or broken link found by recomputation.

    Indicates corrupted storage or tampering. Never repaired automatically.

    Attributes:
        index (int): Index of the first offending block
        reason (str): Short machine-readable reason
    """

    def __init__(self, index: int, reason: str, detail: Optional[str] = None):
        self.index = index
        self.reason = reason
        self.detail = detail
        message = f"Chain integrity failure at block {index}: {reason}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class ConcurrencyError(LedgerError):
    """The chain tip moved between building and publishing a block."""


class MiningError(LedgerError):
    """No nonce satisfying the difficulty was found within the search bound."""
