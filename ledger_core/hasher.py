"""
Canonical hashing for transactions and blocks.

Both digests are SHA-256 over the UTF-8 bytes of a compact JSON array whose
first element is the format version. JSON string quoting keeps every field
boundary unambiguous, so text cannot move from one field into its neighbour
without changing the digest. Field order and encoding are part of the stored
chain: changing either needs a new HASH_FORMAT_VERSION, or every previously
sealed block stops validating.

    transaction: ["v2",id,commission_id,recruiter_id,employer_id,amount,currency,description,timestamp]
    block:       ["v2",index,timestamp,[tx_digest,...],previous_hash,nonce]
"""

import hashlib
import json
from datetime import datetime
from decimal import Decimal
from typing import Any, List

HASH_FORMAT_VERSION = "v2"
JSON_SEPARATORS = (",", ":")


def _normalize_amount(amount: Decimal) -> str:
    """Decimal as written at creation; '100' and '100.00' hash differently."""
    return str(amount)


def _normalize_timestamp(ts: datetime) -> str:
    """ISO-8601, including the UTC offset."""
    return ts.isoformat()


def canonical_payload(fields: List[Any]) -> str:
    """Encode fields as a compact JSON array, version first."""
    return json.dumps(
        [HASH_FORMAT_VERSION] + fields,
        separators=JSON_SEPARATORS,
        ensure_ascii=False
    )


def sha256_hex(data: str) -> str:
    """SHA-256 of the UTF-8 encoding, lowercase hex."""
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def transaction_digest(tx: Any) -> str:
    """
    Compute the identity hash of a commission transaction.

    Status, lifecycle timestamps and the dispute reference are not covered,
    so status changes never alter the hash.

    Args:
        tx: Object with id, commission_id, recruiter_id, employer_id,
            amount, currency, description and timestamp attributes

    Returns:
        str: 64-character lowercase hex digest
    """
    payload = canonical_payload([
        str(tx.id),
        str(tx.commission_id),
        str(tx.recruiter_id),
        str(tx.employer_id),
        _normalize_amount(tx.amount),
        tx.currency,
        tx.description,
        _normalize_timestamp(tx.timestamp)
    ])
    return sha256_hex(payload)


def block_digest(block: Any) -> str:
    """
    Compute the hash of a block from its current contents.

    Transaction digests are recomputed from the transaction fields rather
    than read from the stored hashes, so editing a sealed transaction
    changes the block digest.

    Args:
        block: Object with index, timestamp, transactions, previous_hash
            and nonce attributes

    Returns:
        str: 64-character lowercase hex digest
    """
    payload = canonical_payload([
        block.index,
        _normalize_timestamp(block.timestamp),
        [transaction_digest(tx) for tx in block.transactions],
        block.previous_hash,
        block.nonce
    ])
    return sha256_hex(payload)
