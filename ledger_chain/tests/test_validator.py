"""
Tests for the ChainValidator class.
"""

from decimal import Decimal

import pytest

from ledger_core.errors import IntegrityError
from ledger_chain.validator import ChainValidationResult, ChainValidator, InvalidReason


@pytest.fixture
def validator():
    return ChainValidator()


@pytest.fixture
def long_ledger(sealed_ledger):
    """Ledger with three blocks after genesis."""
    for n in range(2):
        sealed_ledger.create_transaction(f"comm-x{n}", "recruiter-2", "employer-1", 10, "VND")
        sealed_ledger.seal("test-miner")
    return sealed_ledger


def test_valid_chain(validator, long_ledger):
    """Test an untouched chain validates."""
    result = validator.validate(long_ledger.get_blockchain())
    assert result.is_valid
    assert bool(result)
    assert repr(result) == "Ok()"
    assert result.index is None


def test_empty_chain(validator):
    """Test a chain without genesis is invalid."""
    result = validator.validate([])
    assert result == ChainValidationResult.err(0, InvalidReason.BROKEN_LINK)


def test_genesis_tampering(validator, ledger):
    """Test a rewritten genesis is caught at index 0."""
    chain = ledger.get_blockchain()
    chain[0].nonce += 1
    result = validator.validate(chain)
    assert result == ChainValidationResult.err(0, InvalidReason.HASH_MISMATCH)


def test_genesis_must_link_to_zero(validator, ledger):
    """Test genesis previous_hash must be "0"."""
    chain = ledger.get_blockchain()
    chain[0].previous_hash = "1"
    result = validator.validate(chain)
    assert result.index == 0
    assert result.reason is InvalidReason.BROKEN_LINK


def test_transaction_tampering(validator, long_ledger):
    """Test editing a sealed transaction is reported at its block."""
    chain = long_ledger.get_blockchain()
    object.__setattr__(chain[2].transactions[0], "recruiter_id", "someone-else")

    result = validator.validate(chain)
    assert result == ChainValidationResult.err(2, InvalidReason.HASH_MISMATCH)
    assert repr(result) == "Err(index=2, reason=HashMismatch)"


def test_first_failure_wins(validator, long_ledger):
    """Test validation stops at the earliest broken block."""
    chain = long_ledger.get_blockchain()
    object.__setattr__(chain[3].transactions[0], "amount", Decimal("1"))
    object.__setattr__(chain[1].transactions[0], "amount", Decimal("1"))

    assert validator.validate(chain).index == 1


def test_rehashed_block_breaks_link(validator, long_ledger):
    """Test re-hashing a tampered block is caught by the next link."""
    chain = long_ledger.get_blockchain()
    block = chain[1]
    object.__setattr__(block.transactions[0], "amount", Decimal("1"))
    block.hash = block.compute_hash()

    result = validator.validate(chain)
    assert result == ChainValidationResult.err(2, InvalidReason.BROKEN_LINK)


def test_reordered_blocks(validator, long_ledger):
    """Test swapping blocks is not accepted."""
    chain = list(long_ledger.get_blockchain())
    chain[1], chain[2] = chain[2], chain[1]

    result = validator.validate(chain)
    assert not result.is_valid
    assert result.index == 1
    assert result.reason is InvalidReason.BROKEN_LINK


def test_difficulty_check(long_ledger):
    """Test an optional difficulty requirement is enforced on non-genesis blocks."""
    strict = ChainValidator(difficulty=64)
    result = strict.validate(long_ledger.get_blockchain())
    assert result.index == 1
    assert result.reason is InvalidReason.INSUFFICIENT_WORK


def test_ensure_valid_raises(validator, long_ledger):
    """Test ensure_valid raises IntegrityError with index and reason."""
    chain = long_ledger.get_blockchain()
    validator.ensure_valid(chain)

    object.__setattr__(chain[1].transactions[1], "currency", "USD")
    with pytest.raises(IntegrityError) as excinfo:
        validator.ensure_valid(chain)
    assert excinfo.value.index == 1
    assert excinfo.value.reason == "HashMismatch"
    assert "block 1" in str(excinfo.value)


def test_result_to_dict():
    """Test result serialization."""
    assert ChainValidationResult.ok().to_dict() == {
        "is_valid": True, "index": None, "reason": None, "detail": None
    }
    data = ChainValidationResult.err(3, InvalidReason.BROKEN_LINK, "gap").to_dict()
    assert data["reason"] == "BrokenLink"
    assert data["index"] == 3


def test_shifted_field_boundary_detected(validator, ledger):
    """Test moving a delimiter between currency and description is caught."""
    ledger.create_transaction("comm-1", "rec-1", "emp-1", 100, "VND", "Fee|bonus")
    ledger.seal("test-miner")
    tx = ledger.last_block.transactions[0]

    object.__setattr__(tx, "currency", "VND|Fee")
    object.__setattr__(tx, "description", "bonus")

    assert not tx.verify_hash()
    assert validator.validate(ledger.get_blockchain()) == ChainValidationResult.err(
        1, InvalidReason.HASH_MISMATCH
    )
