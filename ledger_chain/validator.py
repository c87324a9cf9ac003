"""
Implementation of the ChainValidator class for the commission ledger.

The validator certifies a chain by recomputation alone: every block hash is
recomputed from the block contents (including each transaction's fields)
and every link is compared with the preceding block's stored hash. It stops
at the first failure, since one break invalidates everything after it.
"""

from enum import Enum
from typing import Any, Dict, Optional, Sequence
import logging

from ledger_block.block import Block, GENESIS_PREVIOUS_HASH, meets_difficulty
from ledger_core.errors import IntegrityError

logger = logging.getLogger(__name__)


class InvalidReason(Enum):
    """Why a block failed validation."""
    HASH_MISMATCH = "HashMismatch"
    BROKEN_LINK = "BrokenLink"
    INSUFFICIENT_WORK = "InsufficientWork"


class ChainValidationResult:
    """
    Outcome of validating a chain: Ok, or Err(index, reason).

    Attributes:
        is_valid (bool): True if every block checked out
        index (Optional[int]): First invalid block index
        reason (Optional[InvalidReason]): Why that block failed
        detail (Optional[str]): Human-readable explanation
    """

    def __init__(
        self,
        is_valid: bool,
        index: Optional[int] = None,
        reason: Optional[InvalidReason] = None,
        detail: Optional[str] = None
    ):
        self.is_valid = is_valid
        self.index = index
        self.reason = reason
        self.detail = detail

    @classmethod
    def ok(cls) -> 'ChainValidationResult':
        return cls(True)

    @classmethod
    def err(
        cls,
        index: int,
        reason: InvalidReason,
        detail: Optional[str] = None
    ) -> 'ChainValidationResult':
        return cls(False, index, reason, detail)

    def __bool__(self) -> bool:
        return self.is_valid

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChainValidationResult):
            return NotImplemented
        return (self.is_valid, self.index, self.reason) == (
            other.is_valid, other.index, other.reason
        )

    def __repr__(self) -> str:
        if self.is_valid:
            return "Ok()"
        return f"Err(index={self.index}, reason={self.reason.value})"

    def raise_for_status(self) -> None:
        """
        Raise if the chain is invalid.

        Raises:
            IntegrityError: Carrying the failing index and reason
        """
        if not self.is_valid:
            raise IntegrityError(self.index, self.reason.value, self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "is_valid": self.is_valid,
            "index": self.index,
            "reason": self.reason.value if self.reason else None,
            "detail": self.detail
        }


class ChainValidator:
    """
    Certifies chain integrity by recomputing hashes and links.

    Attributes:
        difficulty (Optional[int]): If set, non-genesis blocks must also
            meet this proof-of-work difficulty
    """

    def __init__(self, difficulty: Optional[int] = None):
        self.difficulty = difficulty

    def validate(self, chain: Sequence[Block]) -> ChainValidationResult:
        """
        Validate an entire chain from genesis.

        Args:
            chain: Blocks in chain order

        Returns:
            ChainValidationResult: Ok, or the first failing index and reason
        """
        if not chain:
            return ChainValidationResult.err(
                0, InvalidReason.BROKEN_LINK, "Chain has no genesis block"
            )

        result = self._validate_genesis(chain[0])
        if not result:
            return self._log_failure(result)

        for position in range(1, len(chain)):
            result = self._validate_block(chain[position], chain[position - 1], position)
            if not result:
                return self._log_failure(result)

        return ChainValidationResult.ok()

    def ensure_valid(self, chain: Sequence[Block]) -> None:
        """
        Validate and raise on failure.

        Raises:
            IntegrityError: If any block fails validation
        """
        self.validate(chain).raise_for_status()

    def _validate_genesis(self, genesis: Block) -> ChainValidationResult:
        """Genesis needs previous_hash "0" and a hash matching its contents."""
        if genesis.index != 0:
            return ChainValidationResult.err(
                0, InvalidReason.BROKEN_LINK, f"Genesis has index {genesis.index}"
            )
        if genesis.previous_hash != GENESIS_PREVIOUS_HASH:
            return ChainValidationResult.err(
                0, InvalidReason.BROKEN_LINK, "Genesis previous_hash is not \"0\""
            )
        if genesis.hash != genesis.compute_hash():
            return ChainValidationResult.err(
                0, InvalidReason.HASH_MISMATCH, "Genesis hash does not match contents"
            )
        return ChainValidationResult.ok()

    def _validate_block(
        self,
        block: Block,
        prev_block: Block,
        position: int
    ) -> ChainValidationResult:
        """
        Validate a single non-genesis block against its predecessor.

        Args:
            block: Block to validate
            prev_block: Block stored immediately before it
            position: Position of the block in the chain

        Returns:
            ChainValidationResult for this block
        """
        computed = block.compute_hash()
        if block.hash != computed:
            return ChainValidationResult.err(
                position,
                InvalidReason.HASH_MISMATCH,
                f"Stored hash {str(block.hash)[:16]}... != computed {computed[:16]}..."
            )

        if block.previous_hash != prev_block.hash:
            return ChainValidationResult.err(
                position,
                InvalidReason.BROKEN_LINK,
                "previous_hash does not match preceding block"
            )

        if block.index != position:
            return ChainValidationResult.err(
                position,
                InvalidReason.BROKEN_LINK,
                f"Block claims index {block.index} at position {position}"
            )

        if self.difficulty is not None and not meets_difficulty(block.hash, self.difficulty):
            return ChainValidationResult.err(
                position,
                InvalidReason.INSUFFICIENT_WORK,
                f"Hash has fewer than {self.difficulty} leading zeros"
            )

        return ChainValidationResult.ok()

    @staticmethod
    def _log_failure(result: ChainValidationResult) -> ChainValidationResult:
        logger.error(
            f"Block {result.index} failed validation: {result.reason.value} ({result.detail})"
        )
        return result
