"""
Implementation of the PendingPool class for the commission ledger.

The pool stages transactions that have not yet been sealed into a block.
Every mutation happens under one lock, and draining is a single
swap-and-clear, so a transaction added while a block is being mined lands
either in that block or in the next one, never in both and never nowhere.
"""

from typing import Dict, List, Optional, Tuple
import threading

from ledger_core.errors import NotFoundError, StatusTransitionError, ValidationError
from .transaction import CommissionTransaction, TransactionStatus


class PendingPool:
    """
    Thread-safe staging buffer of unsealed transactions.

    Drained transactions stay visible as "in flight" until the miner either
    settles them (block published) or requeues them (mining failed), so
    lookups never miss a transaction that is halfway into a block.

    Attributes:
        _entries (List[CommissionTransaction]): Pending transactions in arrival order
        _index (Dict[str, CommissionTransaction]): Pending transactions by ID
        _in_flight (Dict[str, CommissionTransaction]): Drained, not yet published
    """

    def __init__(self):
        """Initialize empty pool."""
        self._lock = threading.Lock()
        self._entries: List[CommissionTransaction] = []
        self._index: Dict[str, CommissionTransaction] = {}
        self._in_flight: Dict[str, CommissionTransaction] = {}

    def add(self, transaction: CommissionTransaction) -> None:
        """
        Append a transaction to the pool.

        Args:
            transaction: Pending transaction to stage

        Raises:
            ValidationError: If the transaction is not Pending or already staged
        """
        if transaction.status is not TransactionStatus.PENDING:
            raise ValidationError(
                f"Only Pending transactions can be staged, got {transaction.status.value}"
            )
        with self._lock:
            if transaction.id in self._index or transaction.id in self._in_flight:
                raise ValidationError(f"Transaction {transaction.id} already in pool")
            self._entries.append(transaction)
            self._index[transaction.id] = transaction

    def drain(self) -> List[CommissionTransaction]:
        """
        Atomically take every pending transaction, leaving the pool empty.

        The drained batch is held as in flight until settle() or requeue().

        Returns:
            Transactions in arrival order (empty list if none)
        """
        with self._lock:
            batch, self._entries = self._entries, []
            self._index = {}
            for tx in batch:
                self._in_flight[tx.id] = tx
            return batch

    def settle(self, transactions: List[CommissionTransaction]) -> None:
        """Forget in-flight transactions once their block is published."""
        with self._lock:
            for tx in transactions:
                self._in_flight.pop(tx.id, None)

    def requeue(self, transactions: List[CommissionTransaction]) -> None:
        """
        Put an in-flight batch back at the front of the pool.

        Used when mining fails, so the batch keeps its place ahead of
        transactions that arrived while it was being mined.
        """
        with self._lock:
            for tx in transactions:
                self._in_flight.pop(tx.id, None)
                self._index[tx.id] = tx
            self._entries = list(transactions) + self._entries

    def cancel(self, tx_id: str) -> CommissionTransaction:
        """
        Remove a pending transaction and mark it Cancelled.

        Args:
            tx_id: Transaction ID to cancel

        Returns:
            The cancelled transaction

        Raises:
            StatusTransitionError: If the transaction is being sealed
            NotFoundError: If the transaction is not in the pool
        """
        with self._lock:
            if tx_id in self._in_flight:
                raise StatusTransitionError(
                    TransactionStatus.PENDING.value,
                    TransactionStatus.CANCELLED.value
                )
            transaction = self._index.pop(tx_id, None)
            if transaction is None:
                raise NotFoundError(f"Transaction {tx_id} not in pending pool")
            self._entries.remove(transaction)
            transaction.state.transition(TransactionStatus.CANCELLED)
            return transaction

    def get(self, tx_id: str) -> Optional[CommissionTransaction]:
        """
        Retrieve a pending or in-flight transaction by ID.

        Args:
            tx_id: Transaction ID to look up

        Returns:
            Transaction if found, None otherwise
        """
        with self._lock:
            transaction = self._index.get(tx_id)
            if transaction:
                return transaction
            return self._in_flight.get(tx_id)

    def snapshot(self) -> Tuple[CommissionTransaction, ...]:
        """Pending and in-flight transactions, in-flight batch first."""
        with self._lock:
            return tuple(self._in_flight.values()) + tuple(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def is_empty(self) -> bool:
        return len(self) == 0
