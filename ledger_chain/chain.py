"""
Implementation of the Ledger class for the commission ledger.

The ledger owns the ordered block list and the pending pool and is the
single entry point for mutation. The block list is an immutable tuple that
is replaced wholesale when a block is appended, so readers take whatever
tuple is current as a consistent snapshot without locking.
"""

from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union
import logging
import threading

from ledger_block.block import Block, meets_difficulty
from ledger_block.miner import Miner
from ledger_core.config import LedgerConfig
from ledger_core.errors import (
    ConcurrencyError,
    IntegrityError,
    NotFoundError,
    StatusTransitionError,
    ValidationError,
)
from ledger_transaction.pool import PendingPool
from ledger_transaction.transaction import CommissionTransaction, TransactionStatus
from .validator import ChainValidationResult, ChainValidator

logger = logging.getLogger(__name__)

# Sealed statuses whose amounts are still in force on the ledger
SETTLED_STATUSES = (
    TransactionStatus.CONFIRMED,
    TransactionStatus.DISPUTED,
    TransactionStatus.RESOLVED,
)


class BlockchainStats:
    """
    Operational snapshot of a ledger. Not authoritative for reporting.

    Attributes:
        total_blocks (int): Blocks in the chain, genesis included
        total_transactions (int): Sealed transactions
        pending_transactions (int): Transactions waiting in the pool
        last_block_hash (str): Hash of the chain tip
        is_valid (bool): Result of a full validation
    """

    def __init__(
        self,
        total_blocks: int,
        total_transactions: int,
        pending_transactions: int,
        last_block_hash: str,
        is_valid: bool
    ):
        self.total_blocks = total_blocks
        self.total_transactions = total_transactions
        self.pending_transactions = pending_transactions
        self.last_block_hash = last_block_hash
        self.is_valid = is_valid

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total_blocks": self.total_blocks,
            "total_transactions": self.total_transactions,
            "pending_transactions": self.pending_transactions,
            "last_block_hash": self.last_block_hash,
            "is_valid": self.is_valid
        }


class Ledger:
    """
    An append-only, proof-of-work sealed commission ledger.

    Attributes:
        config (LedgerConfig): Ledger settings
        miner (Miner): Miner used by seal()
        validator (ChainValidator): Validator used by validate()
        pending_pool (PendingPool): Unsealed transactions
        writer_lock (threading.RLock): Held by whoever appends blocks
    """

    def __init__(
        self,
        config: Optional[LedgerConfig] = None,
        miner: Optional[Miner] = None,
        blocks: Optional[List[Block]] = None
    ):
        """
        Initialize a ledger.

        Args:
            config: Optional settings, defaults to LedgerConfig()
            miner: Optional miner, defaults to one built from config
            blocks: Optional existing chain; a new genesis is mined if omitted

        Raises:
            IntegrityError: If the supplied chain fails validation
        """
        self.config = config or LedgerConfig()
        self.miner = miner or Miner.from_config(self.config)
        self.validator = ChainValidator()
        self.pending_pool = PendingPool()
        self.writer_lock = threading.RLock()

        if blocks:
            self.validator.ensure_valid(blocks)
            self._blocks: Tuple[Block, ...] = tuple(blocks)
        else:
            genesis = self.miner.mine_genesis()
            self._blocks = (genesis,)
            logger.info(f"Ledger initialized with genesis block {genesis.hash}")

    @property
    def last_block(self) -> Block:
        return self._blocks[-1]

    def __len__(self) -> int:
        return len(self._blocks)

    def create_transaction(
        self,
        commission_id: str,
        recruiter_id: str,
        employer_id: str,
        amount: Union[Decimal, int, str, float],
        currency: Optional[str] = None,
        description: str = ""
    ) -> str:
        """
        Create a Pending commission transaction and stage it for mining.

        Args:
            commission_id: Commission being paid
            recruiter_id: Recruiter receiving the payout
            employer_id: Employer paying it
            amount: Finite, non-zero amount
            currency: Currency code; config.default_currency if None
            description: Free text

        Returns:
            str: New transaction ID

        Raises:
            ValidationError: If amount is zero/non-finite or currency is empty
        """
        if currency is None:
            currency = self.config.default_currency

        transaction = CommissionTransaction.create(
            commission_id=commission_id,
            recruiter_id=recruiter_id,
            employer_id=employer_id,
            amount=amount,
            currency=currency,
            description=description
        )
        self.submit(transaction)
        logger.info(f"Commission transaction created: {transaction.id}")
        return transaction.id

    def submit(self, transaction: CommissionTransaction) -> None:
        """Stage an already-built Pending transaction."""
        self.pending_pool.add(transaction)

    def seal(self, miner_identity: str) -> str:
        """Mine the pending pool into a new block with this ledger's miner."""
        return self.miner.seal(self, miner_identity)

    def append_block(self, block: Block) -> None:
        """
        Publish a mined block at the tip of the chain.

        Its transactions are moved to Confirmed before the block becomes
        visible, so no reader ever sees a sealed block holding Pending
        transactions.

        Args:
            block: Mined block whose previous_hash is the current tip

        Raises:
            ConcurrencyError: If the block no longer links to the tip
            ValidationError: If the block hash is wrong, lacks proof-of-work
                or holds a transaction that is not Pending
        """
        with self.writer_lock:
            tip = self._blocks[-1]
            if block.index != tip.index + 1 or block.previous_hash != tip.hash:
                raise ConcurrencyError(
                    f"Block {block.index} does not extend tip {tip.index}"
                )
            if block.hash != block.compute_hash():
                raise ValidationError(f"Block {block.index} hash does not match contents")
            if not meets_difficulty(block.hash, self.miner.difficulty):
                raise ValidationError(f"Block {block.index} does not meet difficulty")
            for tx in block.transactions:
                if tx.status is not TransactionStatus.PENDING:
                    raise ValidationError(
                        f"Transaction {tx.id} is {tx.status.value}, not Pending"
                    )

            for tx in block.transactions:
                tx.state.transition(TransactionStatus.CONFIRMED, at=block.timestamp)
            self._blocks = self._blocks + (block,)

    def get_blockchain(self) -> Tuple[Block, ...]:
        """Get a read-only snapshot of the chain."""
        return self._blocks

    def get_block_by_hash(self, block_hash: str) -> Block:
        """
        Get block by hash.

        Raises:
            NotFoundError: If no block has that hash
        """
        for block in self._blocks:
            if block.hash == block_hash:
                return block
        raise NotFoundError(f"Block not found: {block_hash}")

    def iter_sealed(
        self,
        chain: Optional[Tuple[Block, ...]] = None
    ) -> Iterator[Tuple[Block, CommissionTransaction]]:
        """Yield (block, transaction) pairs in chain order."""
        for block in chain if chain is not None else self._blocks:
            for tx in block.transactions:
                yield block, tx

    def locate_transaction(
        self,
        tx_id: str,
        chain: Optional[Tuple[Block, ...]] = None
    ) -> Optional[Tuple[Block, CommissionTransaction]]:
        """Find a sealed transaction and the block holding it."""
        for block, tx in self.iter_sealed(chain):
            if tx.id == tx_id:
                return block, tx
        return None

    def get_transaction(self, tx_id: str) -> CommissionTransaction:
        """
        Get a transaction by ID, searching the pool then sealed blocks.

        The pool only forgets a transaction after its block is published, so
        asking the pool first and then reading the current chain cannot miss
        a transaction that is being sealed concurrently.

        Raises:
            NotFoundError: If the transaction is unknown
        """
        pending = self.pending_pool.get(tx_id)
        if pending:
            return pending

        found = self.locate_transaction(tx_id)
        if found:
            return found[1]

        raise NotFoundError(f"Transaction not found: {tx_id}")

    def get_pending_transactions(self) -> Tuple[CommissionTransaction, ...]:
        return self.pending_pool.snapshot()

    def get_transactions_by_recruiter(self, recruiter_id: str) -> List[CommissionTransaction]:
        """Sealed transactions for a recruiter, in chain order. Pool excluded."""
        return [
            tx for _, tx in self.iter_sealed()
            if tx.recruiter_id == recruiter_id
        ]

    def get_transactions_by_commission(self, commission_id: str) -> List[CommissionTransaction]:
        """Sealed transactions for a commission, in chain order. Pool excluded."""
        return [
            tx for _, tx in self.iter_sealed()
            if tx.commission_id == commission_id
        ]

    def total_confirmed_amount(
        self,
        recruiter_id: str,
        currency: Optional[str] = None
    ) -> Decimal:
        """
        Sum of Confirmed amounts for a recruiter (the earnings figure).

        Args:
            recruiter_id: Recruiter to total
            currency: Optional currency filter

        Returns:
            Decimal: Total, Decimal('0') if none
        """
        return sum(
            (
                tx.amount for tx in self.get_transactions_by_recruiter(recruiter_id)
                if tx.status is TransactionStatus.CONFIRMED
                and (currency is None or tx.currency == currency)
            ),
            Decimal("0")
        )

    def net_settled_amount(
        self,
        recruiter_id: str,
        currency: Optional[str] = None
    ) -> Decimal:
        """
        Sum of every sealed amount still in force for a recruiter.

        Unlike total_confirmed_amount(), disputed originals are counted
        alongside their compensating entries, so a mined dispute nets to zero.
        """
        return sum(
            (
                tx.amount for tx in self.get_transactions_by_recruiter(recruiter_id)
                if tx.status in SETTLED_STATUSES
                and (currency is None or tx.currency == currency)
            ),
            Decimal("0")
        )

    def cancel_transaction(self, tx_id: str) -> CommissionTransaction:
        """
        Cancel a transaction that is still waiting in the pool.

        Raises:
            StatusTransitionError: If the transaction is sealed or being sealed
            NotFoundError: If the transaction is unknown
        """
        try:
            transaction = self.pending_pool.cancel(tx_id)
        except NotFoundError:
            found = self.locate_transaction(tx_id)
            if found:
                raise StatusTransitionError(
                    found[1].status.value, TransactionStatus.CANCELLED.value
                ) from None
            raise

        logger.info(f"Commission transaction cancelled: {tx_id}")
        return transaction

    def validate(self) -> ChainValidationResult:
        """Validate the current chain snapshot."""
        return self.validator.validate(self._blocks)

    def get_stats(self) -> BlockchainStats:
        """Collect operational statistics from one chain snapshot."""
        chain = self._blocks
        return BlockchainStats(
            total_blocks=len(chain),
            total_transactions=sum(len(block.transactions) for block in chain),
            pending_transactions=len(self.pending_pool),
            last_block_hash=chain[-1].hash,
            is_valid=self.validator.validate(chain).is_valid
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert chain and pending pool to dictionary for serialization."""
        return {
            "blocks": [block.to_dict() for block in self._blocks],
            "pending": [tx.to_dict() for tx in self.pending_pool.snapshot()]
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        config: Optional[LedgerConfig] = None
    ) -> 'Ledger':
        """
        Restore a ledger from its dictionary form.

        Pending transactions are replayed into the pool in their stored order.

        Raises:
            IntegrityError: If the stored chain fails validation
            ValidationError: If the data is malformed
        """
        blocks = [Block.from_dict(block_data) for block_data in data.get("blocks", [])]
        if not blocks:
            raise IntegrityError(0, "BrokenLink", "Snapshot has no genesis block")

        ledger = cls(config=config, blocks=blocks)
        for tx_data in data.get("pending", []):
            ledger.submit(CommissionTransaction.from_dict(tx_data))

        logger.info(
            f"Ledger restored: {len(blocks)} blocks, {len(ledger.pending_pool)} pending"
        )
        return ledger
