"""
Tests for the Block class.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ledger_block.block import Block, GENESIS_PREVIOUS_HASH, meets_difficulty
from ledger_core.errors import ValidationError
from ledger_transaction.transaction import CommissionTransaction


@pytest.fixture
def sample_transactions():
    """Create sample transactions for testing."""
    return [
        CommissionTransaction.create(f"comm-{i}", "rec-1", "emp-1", 100 * (i + 1), "VND")
        for i in range(3)
    ]


@pytest.fixture
def sample_block(sample_transactions):
    """Create an unmined block."""
    return Block(
        index=1,
        timestamp=datetime(2024, 6, 1, tzinfo=timezone.utc),
        transactions=sample_transactions,
        previous_hash="0" * 64
    )


def test_block_creation(sample_block, sample_transactions):
    """Test block initialization."""
    assert sample_block.index == 1
    assert sample_block.transactions == tuple(sample_transactions)
    assert sample_block.nonce == 0
    assert sample_block.hash is None
    assert not sample_block.is_genesis()


def test_empty_non_genesis_rejected():
    """Test only genesis may have no transactions."""
    with pytest.raises(ValidationError):
        Block(index=1, timestamp=datetime.now(timezone.utc), transactions=[], previous_hash="x")


def test_genesis():
    """Test genesis block defaults."""
    genesis = Block.genesis()
    assert genesis.index == 0
    assert genesis.previous_hash == GENESIS_PREVIOUS_HASH == "0"
    assert genesis.transactions == ()
    assert genesis.is_genesis()


def test_meets_difficulty():
    """Test the leading-zeros predicate."""
    assert meets_difficulty("00ab", 2)
    assert meets_difficulty("000b", 2)
    assert not meets_difficulty("0abc", 2)
    assert meets_difficulty("abcd", 0)
    assert not meets_difficulty(None, 1)


def test_mine(sample_block):
    """Test mining finds a hash meeting the difficulty."""
    assert sample_block.mine(difficulty=2)
    assert sample_block.hash.startswith("00")
    assert sample_block.hash == sample_block.compute_hash()


def test_mine_respects_bound(sample_block):
    """Test mining gives up at max_nonce."""
    assert not sample_block.mine(difficulty=64, max_nonce=50)
    assert sample_block.hash is None
    assert sample_block.nonce == 50


def test_hash_depends_on_transaction_fields(sample_block):
    """Test editing a sealed transaction changes the block hash."""
    sample_block.mine(difficulty=1)
    stored = sample_block.hash

    object.__setattr__(sample_block.transactions[0], "amount", Decimal("999"))
    assert sample_block.compute_hash() != stored


def test_find_transaction(sample_block, sample_transactions):
    """Test looking up a transaction inside a block."""
    assert sample_block.find_transaction(sample_transactions[1].id) is sample_transactions[1]
    assert sample_block.find_transaction("missing") is None


def test_serialization(sample_block):
    """Test to_dict/from_dict round trip keeps the hash valid."""
    sample_block.mine(difficulty=1)
    restored = Block.from_dict(sample_block.to_dict())

    assert restored.hash == sample_block.hash
    assert restored.compute_hash() == sample_block.hash
    assert [tx.id for tx in restored.transactions] == [
        tx.id for tx in sample_block.transactions
    ]
