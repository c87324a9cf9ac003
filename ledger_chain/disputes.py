"""
Implementation of the DisputeManager class for the commission ledger.

A dispute never edits history. It stages a compensating transaction with
the negated amount, linked to the original through reference_id, and flags
the original Disputed. Once the compensating entry is mined, the pair sums
to zero.
"""

from typing import List
import logging

from ledger_core.errors import ValidationError
from ledger_transaction.transaction import CommissionTransaction, TransactionStatus
from .chain import Ledger

logger = logging.getLogger(__name__)

DISPUTE_PREFIX = "Dispute: "


class DisputeManager:
    """
    Opens and resolves commission disputes.

    Attributes:
        ledger (Ledger): Ledger the disputes are recorded on
    """

    def __init__(self, ledger: Ledger):
        self.ledger = ledger

    def dispute(self, transaction_id: str, reason: str) -> str:
        """
        Dispute a confirmed transaction.

        Args:
            transaction_id: Transaction being contested
            reason: Why it is contested

        Returns:
            str: ID of the new compensating transaction (Pending until mined)

        Raises:
            NotFoundError: If the transaction is unknown
            ValidationError: If the reason is empty
            StatusTransitionError: If the transaction is not Confirmed
        """
        if not reason or not reason.strip():
            raise ValidationError("Dispute reason must not be empty")

        original = self.ledger.get_transaction(transaction_id)

        compensation = CommissionTransaction.create(
            commission_id=original.commission_id,
            recruiter_id=original.recruiter_id,
            employer_id=original.employer_id,
            amount=-original.amount,
            currency=original.currency,
            description=DISPUTE_PREFIX + reason,
            reference_id=original.id
        )

        original.state.transition(TransactionStatus.DISPUTED)
        self.ledger.submit(compensation)

        logger.info(
            f"Commission dispute created: {compensation.id} against {original.id}"
        )
        return compensation.id

    def resolve(self, transaction_id: str) -> CommissionTransaction:
        """
        Mark a disputed transaction Resolved.

        Raises:
            NotFoundError: If the transaction is unknown
            StatusTransitionError: If the transaction is not Disputed
        """
        original = self.ledger.get_transaction(transaction_id)
        original.state.transition(TransactionStatus.RESOLVED)
        logger.info(f"Commission dispute resolved: {transaction_id}")
        return original

    def disputes_for(self, transaction_id: str) -> List[CommissionTransaction]:
        """Compensating transactions referencing a transaction, sealed first."""
        found = {}
        sealed = [tx for _, tx in self.ledger.iter_sealed()]
        for tx in sealed + list(self.ledger.get_pending_transactions()):
            if tx.reference_id == transaction_id and tx.id not in found:
                found[tx.id] = tx
        return list(found.values())
