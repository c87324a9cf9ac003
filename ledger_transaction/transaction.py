"""
Implementation of the CommissionTransaction class for the commission ledger.

A transaction records one commission movement: a payout to a recruiter, or
the compensating entry that reverses it after a dispute. The financial
record is a frozen value whose hash is computed once at creation; the
lifecycle status lives in a separate mutable TransactionState, so a status
change can never alter the record or its hash.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional, Union
import threading
import uuid

from ledger_core.errors import StatusTransitionError, ValidationError
from ledger_core.hasher import transaction_digest


class TransactionStatus(Enum):
    """Lifecycle states of a commission transaction."""
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    DISPUTED = "Disputed"
    RESOLVED = "Resolved"
    CANCELLED = "Cancelled"


# Pending -> Confirmed -> Disputed -> Resolved, and Pending -> Cancelled.
ALLOWED_TRANSITIONS = {
    TransactionStatus.PENDING: {TransactionStatus.CONFIRMED, TransactionStatus.CANCELLED},
    TransactionStatus.CONFIRMED: {TransactionStatus.DISPUTED},
    TransactionStatus.DISPUTED: {TransactionStatus.RESOLVED},
    TransactionStatus.RESOLVED: set(),
    TransactionStatus.CANCELLED: set(),
}

# Lifecycle timestamp recorded when entering each state
_STAMP_FIELDS = {
    TransactionStatus.CONFIRMED: "confirmed_at",
    TransactionStatus.DISPUTED: "disputed_at",
    TransactionStatus.RESOLVED: "resolved_at",
    TransactionStatus.CANCELLED: "cancelled_at",
}


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _format_ts(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts else None


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class TransactionState:
    """
    Mutable lifecycle cell attached to an immutable transaction.

    Attributes:
        status (TransactionStatus): Current lifecycle state
        confirmed_at (Optional[datetime]): When the transaction was sealed (paid)
        disputed_at (Optional[datetime]): When a dispute was opened
        resolved_at (Optional[datetime]): When the dispute was resolved
        cancelled_at (Optional[datetime]): When it was cancelled before sealing
    """

    def __init__(self, status: TransactionStatus = TransactionStatus.PENDING):
        self._lock = threading.Lock()
        self._status = status
        self.confirmed_at: Optional[datetime] = None
        self.disputed_at: Optional[datetime] = None
        self.resolved_at: Optional[datetime] = None
        self.cancelled_at: Optional[datetime] = None

    @property
    def status(self) -> TransactionStatus:
        return self._status

    def transition(
        self,
        new_status: TransactionStatus,
        at: Optional[datetime] = None
    ) -> None:
        """
        Move to a new status if the lifecycle allows it.

        Args:
            new_status: Target status
            at: Time of the change, defaults to now

        Raises:
            StatusTransitionError: If the move is not allowed
        """
        with self._lock:
            if new_status not in ALLOWED_TRANSITIONS[self._status]:
                raise StatusTransitionError(self._status.value, new_status.value)
            self._status = new_status
            setattr(self, _STAMP_FIELDS[new_status], at or utc_now())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "status": self._status.value,
            "confirmed_at": _format_ts(self.confirmed_at),
            "disputed_at": _format_ts(self.disputed_at),
            "resolved_at": _format_ts(self.resolved_at),
            "cancelled_at": _format_ts(self.cancelled_at)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TransactionState':
        """Create from dictionary representation."""
        state = cls(TransactionStatus(data["status"]))
        state.confirmed_at = _parse_ts(data.get("confirmed_at"))
        state.disputed_at = _parse_ts(data.get("disputed_at"))
        state.resolved_at = _parse_ts(data.get("resolved_at"))
        state.cancelled_at = _parse_ts(data.get("cancelled_at"))
        return state


def parse_amount(value: Union[Decimal, int, str, float]) -> Decimal:
    """
    Convert a caller-supplied amount to a finite, non-zero Decimal.

    Floats go through str() so 0.1 becomes Decimal('0.1'), not its binary
    expansion.

    Raises:
        ValidationError: If the value is not a finite, non-zero number
    """
    if isinstance(value, bool):
        raise ValidationError("Amount must be a number")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Amount is not a number: {value!r}")
    if not amount.is_finite():
        raise ValidationError("Amount must be finite")
    if amount == 0:
        raise ValidationError("Amount must be non-zero")
    return amount


@dataclass(frozen=True)
class CommissionTransaction:
    """
    An immutable commission movement.

    Attributes:
        id (str): Unique transaction identifier
        commission_id (str): Commission this movement pays or reverses
        recruiter_id (str): Recruiter receiving the commission
        employer_id (str): Employer paying the commission
        amount (Decimal): Signed amount; negative for reversals
        currency (str): Currency code
        description (str): Free text
        timestamp (datetime): Creation time (UTC)
        hash (str): Identity digest over the fields above
        reference_id (Optional[str]): Transaction this one compensates
        state (TransactionState): Mutable lifecycle status
    """
    id: str
    commission_id: str
    recruiter_id: str
    employer_id: str
    amount: Decimal
    currency: str
    description: str
    timestamp: datetime
    hash: str
    reference_id: Optional[str] = None
    state: TransactionState = field(
        default_factory=TransactionState, compare=False, repr=False
    )

    @classmethod
    def create(
        cls,
        commission_id: str,
        recruiter_id: str,
        employer_id: str,
        amount: Union[Decimal, int, str, float],
        currency: str,
        description: str = "",
        reference_id: Optional[str] = None
    ) -> 'CommissionTransaction':
        """
        Create a new Pending transaction with its hash computed.

        Args:
            commission_id: Commission reference
            recruiter_id: Recruiter reference
            employer_id: Employer reference
            amount: Signed, finite, non-zero amount
            currency: Currency code
            description: Free text
            reference_id: Optional id of the transaction being compensated

        Returns:
            New CommissionTransaction

        Raises:
            ValidationError: If any input is malformed
        """
        for name, value in (
            ("commission_id", commission_id),
            ("recruiter_id", recruiter_id),
            ("employer_id", employer_id),
        ):
            if not value or not str(value).strip():
                raise ValidationError(f"{name} must not be empty")
        if not currency or not currency.strip():
            raise ValidationError("Currency must not be empty")

        fields_ = {
            "id": str(uuid.uuid4()),
            "commission_id": str(commission_id),
            "recruiter_id": str(recruiter_id),
            "employer_id": str(employer_id),
            "amount": parse_amount(amount),
            "currency": currency.strip().upper(),
            "description": description or "",
            "timestamp": utc_now(),
        }
        draft = cls(hash="", reference_id=reference_id, **fields_)
        return replace(draft, hash=transaction_digest(draft))

    @property
    def status(self) -> TransactionStatus:
        return self.state.status

    def compute_hash(self) -> str:
        """Recompute the identity digest from the current field values."""
        return transaction_digest(self)

    def verify_hash(self) -> bool:
        """Check the stored hash against a fresh recomputation."""
        return self.compute_hash() == self.hash

    def to_dict(self) -> Dict[str, Any]:
        """Convert transaction to dictionary for serialization."""
        data = {
            "id": self.id,
            "commission_id": self.commission_id,
            "recruiter_id": self.recruiter_id,
            "employer_id": self.employer_id,
            "amount": str(self.amount),
            "currency": self.currency,
            "description": self.description,
            "timestamp": self.timestamp.isoformat(),
            "hash": self.hash,
            "reference_id": self.reference_id
        }
        data.update(self.state.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CommissionTransaction':
        """
        Create transaction from dictionary representation.

        The stored hash is kept as-is, not recomputed, so corrupted records
        stay detectable by verification.

        Raises:
            ValidationError: If data is incomplete or malformed
        """
        try:
            return cls(
                id=data["id"],
                commission_id=data["commission_id"],
                recruiter_id=data["recruiter_id"],
                employer_id=data["employer_id"],
                amount=Decimal(data["amount"]),
                currency=data["currency"],
                description=data["description"],
                timestamp=datetime.fromisoformat(data["timestamp"]),
                hash=data["hash"],
                reference_id=data.get("reference_id"),
                state=TransactionState.from_dict(data)
            )
        except (KeyError, ValueError, InvalidOperation) as e:
            raise ValidationError(f"Error deserializing transaction: {str(e)}")

