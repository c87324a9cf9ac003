"""
Commission Ledger - Transaction Module

This module implements commission transactions, their lifecycle status and
the pending pool that stages them until they are sealed into a block.
"""

from .transaction import CommissionTransaction, TransactionState, TransactionStatus
from .pool import PendingPool

__all__ = ['CommissionTransaction', 'TransactionState', 'TransactionStatus', 'PendingPool']
