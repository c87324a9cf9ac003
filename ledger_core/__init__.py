"""
Commission Ledger - Core Module

This module holds the pieces shared by every other ledger package: the
error taxonomy, runtime configuration and the canonical hasher used by both
transactions and blocks.
"""

from .errors import (
    LedgerError,
    ValidationError,
    StatusTransitionError,
    NotFoundError,
    EmptyPendingPoolError,
    IntegrityError,
    ConcurrencyError,
    MiningError,
)
from .config import LedgerConfig
from .hasher import transaction_digest, block_digest, HASH_FORMAT_VERSION

__all__ = [
    'LedgerError', 'ValidationError', 'StatusTransitionError', 'NotFoundError',
    'EmptyPendingPoolError', 'IntegrityError', 'ConcurrencyError', 'MiningError',
    'LedgerConfig', 'transaction_digest', 'block_digest', 'HASH_FORMAT_VERSION',
]
