"""
Implementation of the Block class for the commission ledger.

A block is an ordered batch of commission transactions linked to its
predecessor by hash and sealed by proof-of-work: the hex digest must start
with a configured number of '0' characters.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple

from ledger_core.errors import ValidationError
from ledger_core.hasher import block_digest
from ledger_transaction.transaction import CommissionTransaction, utc_now

GENESIS_PREVIOUS_HASH = "0"


def meets_difficulty(block_hash: Optional[str], difficulty: int) -> bool:
    """
    Check the proof-of-work predicate.

    Args:
        block_hash: Hex digest to test
        difficulty: Number of leading '0' characters required

    Returns:
        bool: True if the hash has at least `difficulty` leading zeros
    """
    if not block_hash:
        return False
    return block_hash.startswith("0" * difficulty)


class Block:
    """
    A sealed (or candidate) block in the commission ledger.

    Attributes:
        index (int): Position in chain, 0 for genesis
        timestamp (datetime): Sealing time (UTC)
        transactions (Tuple[CommissionTransaction, ...]): Sealed transactions
        previous_hash (str): Hash of the preceding block, "0" for genesis
        nonce (int): Proof-of-work nonce
        miner (Optional[str]): Identity that sealed the block (not hashed)
        hash (Optional[str]): Block hash (None until mined)
    """

    def __init__(
        self,
        index: int,
        timestamp: datetime,
        transactions: Iterable[CommissionTransaction],
        previous_hash: str,
        nonce: int = 0,
        miner: Optional[str] = None
    ):
        """
        Initialize a new block (unmined).

        Args:
            index: Position in chain
            timestamp: Sealing time
            transactions: Transactions to seal, in order
            previous_hash: Hash of previous block
            nonce: Starting nonce
            miner: Identity of the sealing party

        Raises:
            ValidationError: If a non-genesis block has no transactions
        """
        self.transactions: Tuple[CommissionTransaction, ...] = tuple(transactions)
        if index > 0 and not self.transactions:
            raise ValidationError("Only the genesis block may be empty")

        self.index = index
        self.timestamp = timestamp
        self.previous_hash = previous_hash
        self.nonce = nonce
        self.miner = miner
        self.hash: Optional[str] = None

    @classmethod
    def genesis(cls, timestamp: Optional[datetime] = None) -> 'Block':
        """Create the (unmined) genesis block."""
        return cls(
            index=0,
            timestamp=timestamp or utc_now(),
            transactions=(),
            previous_hash=GENESIS_PREVIOUS_HASH,
            miner="genesis"
        )

    def compute_hash(self) -> str:
        """
        Compute SHA-256 hash of the block's current contents.

        Returns:
            str: Hex-encoded hash
        """
        return block_digest(self)

    def mine(self, difficulty: int, max_nonce: Optional[int] = None) -> bool:
        """
        Mine the block by finding a valid proof-of-work.

        Starts from the current nonce and increments it until the digest
        meets the difficulty.

        Args:
            difficulty: Leading '0' hex characters required
            max_nonce: Optional exclusive upper bound on the nonce

        Returns:
            bool: True if valid nonce found, False if not

        Note:
            Updates hash if successful
        """
        while max_nonce is None or self.nonce < max_nonce:
            digest = self.compute_hash()
            if meets_difficulty(digest, difficulty):
                self.hash = digest
                return True
            self.nonce += 1

        return False

    def is_genesis(self) -> bool:
        return self.index == 0

    def find_transaction(self, tx_id: str) -> Optional[CommissionTransaction]:
        """Get a transaction in this block by ID."""
        for tx in self.transactions:
            if tx.id == tx_id:
                return tx
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "index": self.index,
            "timestamp": self.timestamp.isoformat(),
            "transactions": [tx.to_dict() for tx in self.transactions],
            "previous_hash": self.previous_hash,
            "nonce": self.nonce,
            "miner": self.miner,
            "hash": self.hash
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Block':
        """
        Create from dictionary representation.

        The stored hash is restored untouched; use a validator to check it.
        """
        try:
            block = cls(
                index=data["index"],
                timestamp=datetime.fromisoformat(data["timestamp"]),
                transactions=[
                    CommissionTransaction.from_dict(tx_data)
                    for tx_data in data["transactions"]
                ],
                previous_hash=data["previous_hash"],
                nonce=data["nonce"],
                miner=data.get("miner")
            )
        except (KeyError, TypeError) as e:
            raise ValidationError(f"Error deserializing block: {str(e)}")

        block.hash = data["hash"]
        return block

    def __repr__(self) -> str:
        short = self.hash[:16] if self.hash else None
        return f"<Block(index={self.index}, txs={len(self.transactions)}, hash={short})>"
