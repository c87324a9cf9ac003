"""
CommissionLedgerService - the surface the surrounding application calls.

The commission approval workflow, the mining scheduler, reconciliation
screens, earnings reports, the dispute workflow and the audit health check
all go through this facade. It holds one explicitly constructed Ledger; no
state is shared between service instances.
"""

from decimal import Decimal
from typing import List, Optional, Union
import logging

from ledger_core.config import LedgerConfig
from ledger_transaction.transaction import CommissionTransaction
from .chain import BlockchainStats, Ledger
from .disputes import DisputeManager
from .validator import ChainValidationResult
from .verification import VerificationResult, VerificationService

logger = logging.getLogger(__name__)


class CommissionLedgerService:
    """
    Facade over a ledger and its verification and dispute services.

    Attributes:
        ledger (Ledger): The ledger
        verification (VerificationService): Commission verification
        disputes (DisputeManager): Dispute handling
    """

    def __init__(
        self,
        ledger: Optional[Ledger] = None,
        config: Optional[LedgerConfig] = None
    ):
        self.ledger = ledger or Ledger(config=config)
        self.verification = VerificationService(self.ledger)
        self.disputes = DisputeManager(self.ledger)

    def create_commission_transaction(
        self,
        commission_id: str,
        recruiter_id: str,
        employer_id: str,
        amount: Union[Decimal, int, str, float],
        currency: Optional[str] = None,
        description: str = ""
    ) -> str:
        """Stage a commission payout approved for payment."""
        return self.ledger.create_transaction(
            commission_id, recruiter_id, employer_id, amount, currency, description
        )

    def mine_pending_transactions(self, miner_identity: str) -> str:
        """Seal every pending transaction into a new block."""
        return self.ledger.seal(miner_identity)

    def verify_commission(self, commission_id: str) -> VerificationResult:
        return self.verification.verify(commission_id)

    def verify_commission_transaction(self, transaction_id: str) -> VerificationResult:
        return self.verification.verify_transaction(transaction_id)

    def get_transaction(self, transaction_id: str) -> CommissionTransaction:
        return self.ledger.get_transaction(transaction_id)

    def get_transactions_by_recruiter(self, recruiter_id: str) -> List[CommissionTransaction]:
        return self.ledger.get_transactions_by_recruiter(recruiter_id)

    def get_total_commission_earned(
        self,
        recruiter_id: str,
        currency: Optional[str] = None
    ) -> Decimal:
        return self.ledger.total_confirmed_amount(recruiter_id, currency)

    def dispute_commission(self, transaction_id: str, reason: str) -> str:
        """Open a dispute, returning the compensating transaction ID."""
        return self.disputes.dispute(transaction_id, reason)

    def resolve_dispute(self, transaction_id: str) -> CommissionTransaction:
        return self.disputes.resolve(transaction_id)

    def cancel_commission_transaction(self, transaction_id: str) -> CommissionTransaction:
        return self.ledger.cancel_transaction(transaction_id)

    def validate_blockchain(self) -> ChainValidationResult:
        return self.ledger.validate()

    def get_blockchain_stats(self) -> BlockchainStats:
        return self.ledger.get_stats()

    def record_commission(
        self,
        commission_id: str,
        recruiter_id: str,
        employer_id: str,
        amount: Union[Decimal, int, str, float],
        description: str = "",
        currency: Optional[str] = None,
        miner_identity: str = "system"
    ) -> str:
        """
        Create a commission transaction and seal it immediately.

        Mines inline, so only call this from a background job, never from a
        request handler. Anything else already pending is sealed into the
        same block.

        Returns:
            str: ID of the new transaction
        """
        transaction_id = self.create_commission_transaction(
            commission_id, recruiter_id, employer_id, amount, currency, description
        )
        self.mine_pending_transactions(miner_identity)
        logger.info(f"Immutable commission record created: {transaction_id}")
        return transaction_id
