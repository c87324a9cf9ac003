"""
Tests for the Miner class.
"""

import pytest

from ledger_block.block import Block
from ledger_block.miner import Miner
from ledger_core.config import LedgerConfig
from ledger_core.errors import ConcurrencyError, EmptyPendingPoolError, MiningError
from ledger_chain.chain import Ledger
from ledger_transaction.transaction import TransactionStatus


def add_commissions(ledger, count=3):
    return [
        ledger.create_transaction(f"comm-{i}", "rec-1", "emp-1", 100 * (i + 1), "VND")
        for i in range(count)
    ]


def test_from_config():
    """Test miner settings come from config."""
    miner = Miner.from_config(LedgerConfig(difficulty=3, max_nonce=10, max_seal_retries=1))
    assert miner.difficulty == 3
    assert miner.max_nonce == 10
    assert miner.max_seal_retries == 1


def test_seal_meets_difficulty():
    """Test sealed blocks carry the required leading zeros."""
    ledger = Ledger(config=LedgerConfig(difficulty=3))
    add_commissions(ledger, 2)

    block_hash = ledger.miner.seal(ledger, "miner-a")

    assert block_hash.startswith("000")
    assert ledger.last_block.hash == block_hash
    assert ledger.last_block.miner == "miner-a"
    assert ledger.get_blockchain()[0].hash.startswith("000")


def test_seal_confirms_everything(ledger):
    """Test every pooled transaction lands in one block, Confirmed."""
    ids = add_commissions(ledger)

    ledger.miner.seal(ledger, "miner-a")

    block = ledger.last_block
    assert block.index == 1
    assert [tx.id for tx in block.transactions] == ids
    for tx in block.transactions:
        assert tx.status is TransactionStatus.CONFIRMED
        assert tx.state.confirmed_at == block.timestamp
    assert ledger.pending_pool.is_empty()
    assert ledger.pending_pool.snapshot() == ()


def test_seal_empty_pool(ledger):
    """Test sealing nothing raises and leaves the chain alone."""
    with pytest.raises(EmptyPendingPoolError):
        ledger.miner.seal(ledger, "miner-a")
    assert len(ledger) == 1


def test_mining_failure_requeues(ledger):
    """Test a failed mining pass puts the batch back."""
    ids = add_commissions(ledger, 2)
    ledger.miner.difficulty = 64
    ledger.miner.max_nonce = 20

    with pytest.raises(MiningError):
        ledger.miner.seal(ledger, "miner-a")

    assert len(ledger) == 1
    assert [tx.id for tx in ledger.pending_pool.snapshot()] == ids
    assert all(
        tx.status is TransactionStatus.PENDING for tx in ledger.pending_pool.snapshot()
    )


def test_retries_when_tip_moves(ledger, monkeypatch):
    """Test a ConcurrencyError on publish is retried, not surfaced."""
    add_commissions(ledger, 1)
    real_append = ledger.append_block
    calls = []

    def flaky_append(block):
        calls.append(block.nonce)
        if len(calls) == 1:
            raise ConcurrencyError("tip moved")
        real_append(block)

    monkeypatch.setattr(ledger, "append_block", flaky_append)

    block_hash = ledger.miner.seal(ledger, "miner-a")
    assert len(calls) == 2
    assert ledger.last_block.hash == block_hash
    assert ledger.validate().is_valid


def test_gives_up_after_retries(ledger, monkeypatch):
    """Test the miner stops after max_seal_retries and restores the pool."""
    add_commissions(ledger, 1)
    ledger.miner.max_seal_retries = 1

    def always_moved(block):
        raise ConcurrencyError("tip moved")

    monkeypatch.setattr(ledger, "append_block", always_moved)

    with pytest.raises(MiningError):
        ledger.miner.seal(ledger, "miner-a")
    assert len(ledger.pending_pool) == 1


def test_mine_genesis():
    """Test the genesis block is mined at the miner's difficulty."""
    genesis = Miner(difficulty=2).mine_genesis()
    assert isinstance(genesis, Block)
    assert genesis.hash.startswith("00")
    assert genesis.previous_hash == "0"
