"""
Tests for the VerificationService class.
"""

from decimal import Decimal

import pytest

from ledger_chain.disputes import DisputeManager
from ledger_chain.verification import (
    STATUS_INTEGRITY_FAILED,
    STATUS_NO_RECORD,
    STATUS_NOT_CONFIRMED,
    STATUS_VERIFIED,
    VerificationService,
)


@pytest.fixture
def service(sealed_ledger):
    return VerificationService(sealed_ledger)


def test_verify_confirmed(service, sealed_ledger):
    """Test a sealed commission verifies with its block details."""
    result = service.verify("comm-1")
    tx = sealed_ledger.get_transactions_by_commission("comm-1")[0]

    assert result.is_verified
    assert result.status == STATUS_VERIFIED == "Verified on blockchain"
    assert result.block_index == 1
    assert result.transaction_id == tx.id
    assert result.transaction_hash == tx.hash
    assert result.amount == Decimal("200")
    assert result.currency == "VND"


def test_verify_unknown(service):
    """Test an unknown commission has no record."""
    result = service.verify("comm-unknown")
    assert not result.is_verified
    assert result.status == STATUS_NO_RECORD == "No blockchain record found"
    assert result.block_index is None


def test_pending_is_not_verified(ledger):
    """Test pending transactions never count as records."""
    tx_id = ledger.create_transaction("comm-p", "rec-1", "emp-1", 10, "VND")
    service = VerificationService(ledger)

    assert service.verify("comm-p").status == STATUS_NO_RECORD

    result = service.verify_transaction(tx_id)
    assert not result.is_verified
    assert result.status == STATUS_NOT_CONFIRMED


def test_tampered_transaction(service, sealed_ledger):
    """Test a sealed record edited in place fails verification."""
    tx = sealed_ledger.get_transactions_by_commission("comm-2")[0]
    object.__setattr__(tx, "amount", Decimal("1"))

    result = service.verify("comm-2")
    assert not result.is_verified
    assert result.status == STATUS_INTEGRITY_FAILED


def test_broken_chain_before_record(service, sealed_ledger):
    """Test a record is unverifiable when an earlier block is broken."""
    sealed_ledger.create_transaction("comm-late", "rec-1", "emp-1", 10, "VND")
    sealed_ledger.seal("test-miner")

    genesis = sealed_ledger.get_blockchain()[0]
    genesis.nonce += 1

    result = service.verify("comm-late")
    assert not result.is_verified
    assert result.status == STATUS_INTEGRITY_FAILED


def test_break_after_record_does_not_affect_it(service, sealed_ledger):
    """Test damage in a later block leaves earlier records verifiable."""
    late_id = sealed_ledger.create_transaction("comm-late", "rec-1", "emp-1", 10, "VND")
    sealed_ledger.seal("test-miner")
    object.__setattr__(sealed_ledger.get_transaction(late_id), "amount", Decimal("5"))

    assert service.verify("comm-0").is_verified
    assert not service.verify("comm-late").is_verified


def test_verify_returns_latest_confirmed(sealed_ledger):
    """Test verify picks the latest Confirmed record for a commission."""
    first = sealed_ledger.get_transactions_by_commission("comm-0")[0]
    DisputeManager(sealed_ledger).dispute(first.id, "Duplicate billing")
    sealed_ledger.seal("test-miner")

    result = VerificationService(sealed_ledger).verify("comm-0")
    assert result.is_verified
    assert result.block_index == 2
    assert result.amount == Decimal("-100")
    assert result.transaction_id != first.id


def test_verify_transaction(service, sealed_ledger):
    """Test verification by transaction id."""
    tx = sealed_ledger.last_block.transactions[0]
    result = service.verify_transaction(tx.id)
    assert result.is_verified
    assert result.transaction_id == tx.id

    assert service.verify_transaction("missing").status == STATUS_NO_RECORD


def test_verify_transaction_disputed(service, sealed_ledger):
    """Test a disputed transaction reports its status instead of verifying."""
    tx = sealed_ledger.last_block.transactions[0]
    DisputeManager(sealed_ledger).dispute(tx.id, "Wrong amount")

    result = service.verify_transaction(tx.id)
    assert not result.is_verified
    assert result.status == "Transaction is Disputed"


def test_result_to_dict(service):
    """Test result serialization uses text for amount and timestamp."""
    data = service.verify("comm-0").to_dict()
    assert data["is_verified"] is True
    assert data["amount"] == "100"
    assert isinstance(data["timestamp"], str)
