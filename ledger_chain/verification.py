"""
Implementation of the VerificationService class for the commission ledger.

Answers whether a commission has a durable, tamper-evident payment record.
Nothing stored is trusted: the transaction digest is recomputed, and the
chain up to the containing block must validate, before a record counts as
verified. Failures come back as results rather than exceptions.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple
import logging

from ledger_block.block import Block
from ledger_transaction.transaction import CommissionTransaction, TransactionStatus
from .chain import Ledger
from .validator import ChainValidator

logger = logging.getLogger(__name__)

STATUS_VERIFIED = "Verified on blockchain"
STATUS_NO_RECORD = "No blockchain record found"
STATUS_INTEGRITY_FAILED = "Integrity check failed"
STATUS_NOT_CONFIRMED = "Transaction not yet confirmed"


@dataclass
class VerificationResult:
    """Outcome of a commission or transaction verification."""
    is_verified: bool
    status: str
    block_index: Optional[int] = None
    transaction_id: Optional[str] = None
    transaction_hash: Optional[str] = None
    timestamp: Optional[datetime] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "is_verified": self.is_verified,
            "status": self.status,
            "block_index": self.block_index,
            "transaction_id": self.transaction_id,
            "transaction_hash": self.transaction_hash,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "amount": str(self.amount) if self.amount is not None else None,
            "currency": self.currency
        }


class VerificationService:
    """
    Verifies commission payments against the sealed chain.

    Attributes:
        ledger (Ledger): Ledger to read from
        validator (ChainValidator): Validator for the chain check
    """

    def __init__(self, ledger: Ledger, validator: Optional[ChainValidator] = None):
        self.ledger = ledger
        self.validator = validator or ledger.validator

    def verify(self, commission_id: str) -> VerificationResult:
        """
        Verify the latest Confirmed payment record for a commission.

        Pending transactions are never considered.

        Args:
            commission_id: Commission to verify

        Returns:
            VerificationResult describing the latest confirmed state
        """
        chain = self.ledger.get_blockchain()

        latest: Optional[Tuple[Block, CommissionTransaction]] = None
        for block, tx in self.ledger.iter_sealed(chain):
            if tx.commission_id == commission_id and tx.status is TransactionStatus.CONFIRMED:
                latest = (block, tx)

        if latest is None:
            logger.warning(f"No confirmed transaction found for commission: {commission_id}")
            return VerificationResult(is_verified=False, status=STATUS_NO_RECORD)

        block, tx = latest
        return self._check_sealed(chain, block, tx)

    def verify_transaction(self, transaction_id: str) -> VerificationResult:
        """
        Verify one transaction by ID.

        Only a sealed, Confirmed transaction whose hashes check out is
        verified; disputed or resolved ones report their status instead.

        Args:
            transaction_id: Transaction to verify

        Returns:
            VerificationResult for the transaction
        """
        if self.ledger.pending_pool.get(transaction_id):
            return VerificationResult(
                is_verified=False,
                status=STATUS_NOT_CONFIRMED,
                transaction_id=transaction_id
            )

        chain = self.ledger.get_blockchain()
        found = self.ledger.locate_transaction(transaction_id, chain)
        if found is None:
            logger.warning(f"Transaction not found: {transaction_id}")
            return VerificationResult(is_verified=False, status=STATUS_NO_RECORD)

        block, tx = found
        result = self._check_sealed(chain, block, tx)
        if result.is_verified and tx.status is not TransactionStatus.CONFIRMED:
            result.is_verified = False
            result.status = f"Transaction is {tx.status.value}"
        return result

    def _check_sealed(
        self,
        chain: Tuple[Block, ...],
        block: Block,
        tx: CommissionTransaction
    ) -> VerificationResult:
        """Recompute the transaction digest and validate the chain up to its block."""
        result = VerificationResult(
            is_verified=False,
            status=STATUS_INTEGRITY_FAILED,
            block_index=block.index,
            transaction_id=tx.id,
            transaction_hash=tx.hash,
            timestamp=tx.timestamp,
            amount=tx.amount,
            currency=tx.currency
        )

        if not tx.verify_hash():
            logger.error(f"Transaction hash mismatch for: {tx.id} in block {block.index}")
            return result

        chain_result = self.validator.validate(chain)
        if not chain_result.is_valid and chain_result.index <= block.index:
            logger.error(
                f"Commission {tx.commission_id} unverifiable: chain broken at block "
                f"{chain_result.index} ({chain_result.reason.value})"
            )
            return result

        result.is_verified = True
        result.status = STATUS_VERIFIED
        logger.info(f"Commission payment verified on blockchain: {tx.commission_id}")
        return result
