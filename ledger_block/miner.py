"""
Implementation of the Miner class for the commission ledger.

The miner seals the whole pending pool into exactly one new block. It works
against any ledger object that exposes `writer_lock`, `pending_pool`,
`last_block` and `append_block()`; holding the writer lock for the full pass
makes mining single-writer.
"""

from typing import TYPE_CHECKING, List, Optional
import logging

from ledger_core.config import DEFAULT_DIFFICULTY, DEFAULT_MAX_SEAL_RETRIES, LedgerConfig
from ledger_core.errors import ConcurrencyError, EmptyPendingPoolError, MiningError
from ledger_transaction.transaction import CommissionTransaction, utc_now
from .block import Block

if TYPE_CHECKING:
    from ledger_chain.chain import Ledger

logger = logging.getLogger(__name__)


class Miner:
    """
    Seals pending transactions into proof-of-work blocks.

    Attributes:
        difficulty (int): Leading '0' hex characters required
        max_nonce (Optional[int]): Nonce search bound, None for unbounded
        max_seal_retries (int): Re-link attempts if the chain tip moves
    """

    def __init__(
        self,
        difficulty: int = DEFAULT_DIFFICULTY,
        max_nonce: Optional[int] = None,
        max_seal_retries: int = DEFAULT_MAX_SEAL_RETRIES
    ):
        self.difficulty = difficulty
        self.max_nonce = max_nonce
        self.max_seal_retries = max_seal_retries

    @classmethod
    def from_config(cls, config: LedgerConfig) -> 'Miner':
        return cls(
            difficulty=config.difficulty,
            max_nonce=config.max_nonce,
            max_seal_retries=config.max_seal_retries
        )

    def seal(self, ledger: 'Ledger', miner_identity: str) -> str:
        """
        Seal the entire pending pool into one new block.

        Args:
            ledger: Ledger to mine for
            miner_identity: Who is sealing, recorded on the block

        Returns:
            str: Hash of the new block

        Raises:
            EmptyPendingPoolError: If nothing is waiting to be sealed
            MiningError: If no valid nonce exists below max_nonce
        """
        with ledger.writer_lock:
            batch = ledger.pending_pool.drain()
            if not batch:
                raise EmptyPendingPoolError("No pending transactions to mine")

            try:
                block = self._mine_and_publish(ledger, batch, miner_identity)
            except Exception:
                ledger.pending_pool.requeue(batch)
                raise

            ledger.pending_pool.settle(batch)

        logger.info(
            f"Block {block.index} sealed by {miner_identity}: "
            f"{len(block.transactions)} transactions, nonce={block.nonce}, hash={block.hash}"
        )
        return block.hash

    def mine_genesis(self) -> Block:
        """Create and mine a genesis block at this miner's difficulty."""
        genesis = Block.genesis()
        if not genesis.mine(self.difficulty, self.max_nonce):
            raise MiningError("Could not mine genesis block within nonce bound")
        return genesis

    def _mine_and_publish(
        self,
        ledger: 'Ledger',
        batch: List[CommissionTransaction],
        miner_identity: str
    ) -> Block:
        """Build, mine and append a block, re-linking if the tip moved."""
        for attempt in range(self.max_seal_retries + 1):
            tip = ledger.last_block
            block = Block(
                index=tip.index + 1,
                timestamp=utc_now(),
                transactions=batch,
                previous_hash=tip.hash,
                miner=miner_identity
            )

            if not block.mine(self.difficulty, self.max_nonce):
                raise MiningError(
                    f"No nonce below {self.max_nonce} meets difficulty {self.difficulty}"
                )

            try:
                ledger.append_block(block)
                return block
            except ConcurrencyError as e:
                logger.warning(f"Chain tip moved while mining (attempt {attempt + 1}): {e}")

        raise MiningError(
            f"Chain tip kept moving; gave up after {self.max_seal_retries + 1} attempts"
        )
