"""
Shared pytest fixtures for the commission ledger packages.
"""

import pytest

from ledger_core.config import LedgerConfig
from ledger_chain.chain import Ledger

# Low difficulty keeps mining instant in tests
TEST_DIFFICULTY = 1


@pytest.fixture
def config():
    """Create a low-difficulty config."""
    return LedgerConfig(difficulty=TEST_DIFFICULTY, mining_interval_seconds=0.05)


@pytest.fixture
def ledger(config):
    """Create a fresh ledger with only a genesis block."""
    return Ledger(config=config)


@pytest.fixture
def sealed_ledger(ledger):
    """Ledger with one block holding three commissions of one recruiter."""
    for i, amount in enumerate(("100", "200", "300")):
        ledger.create_transaction(
            commission_id=f"comm-{i}",
            recruiter_id="recruiter-1",
            employer_id="employer-1",
            amount=amount,
            currency="VND",
            description=f"Placement fee {i}"
        )
    ledger.seal("test-miner")
    return ledger
