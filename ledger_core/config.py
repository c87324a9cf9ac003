"""
Runtime configuration for the commission ledger.

Settings are plain constructor parameters with defaults. Hosts that
configure through the environment use LedgerConfig.from_env(), which reads
a .env file first when one is present.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv

from .errors import ValidationError

DEFAULT_DIFFICULTY = 4
DEFAULT_CURRENCY = "VND"
DEFAULT_MINING_INTERVAL = 30.0  # seconds
DEFAULT_MAX_SEAL_RETRIES = 3

ENV_PREFIX = "COMMISSION_LEDGER_"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class LedgerConfig:
    """
    Settings for a ledger instance and its miner.

    Attributes:
        difficulty (int): Leading '0' hex characters a block hash needs
        max_nonce (Optional[int]): Upper bound on the nonce search, None for unbounded
        default_currency (str): Currency used when callers pass none
        mining_interval_seconds (float): Pause between scheduled mining passes
        max_seal_retries (int): Re-link attempts when the chain tip moves
    """

    def __init__(
        self,
        difficulty: int = DEFAULT_DIFFICULTY,
        max_nonce: Optional[int] = None,
        default_currency: str = DEFAULT_CURRENCY,
        mining_interval_seconds: float = DEFAULT_MINING_INTERVAL,
        max_seal_retries: int = DEFAULT_MAX_SEAL_RETRIES
    ):
        if difficulty < 0 or difficulty > 64:
            raise ValidationError("Difficulty must be between 0 and 64")
        if max_nonce is not None and max_nonce <= 0:
            raise ValidationError("max_nonce must be positive")
        if not default_currency:
            raise ValidationError("Default currency must not be empty")
        if mining_interval_seconds <= 0:
            raise ValidationError("Mining interval must be positive")
        if max_seal_retries < 0:
            raise ValidationError("max_seal_retries must not be negative")

        self.difficulty = difficulty
        self.max_nonce = max_nonce
        self.default_currency = default_currency
        self.mining_interval_seconds = mining_interval_seconds
        self.max_seal_retries = max_seal_retries

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> 'LedgerConfig':
        """
        Build a config from environment variables.

        Recognised names (with the default prefix): COMMISSION_LEDGER_DIFFICULTY,
        COMMISSION_LEDGER_MAX_NONCE, COMMISSION_LEDGER_DEFAULT_CURRENCY,
        COMMISSION_LEDGER_MINING_INTERVAL, COMMISSION_LEDGER_MAX_SEAL_RETRIES.

        Args:
            prefix: Prefix shared by all variable names

        Returns:
            New LedgerConfig

        Raises:
            ValidationError: If a variable holds an unusable value
        """
        load_dotenv()

        def _get(name: str) -> Optional[str]:
            value = os.getenv(prefix + name)
            return value if value not in (None, "") else None

        try:
            difficulty = _get("DIFFICULTY")
            max_nonce = _get("MAX_NONCE")
            interval = _get("MINING_INTERVAL")
            retries = _get("MAX_SEAL_RETRIES")

            return cls(
                difficulty=int(difficulty) if difficulty else DEFAULT_DIFFICULTY,
                max_nonce=int(max_nonce) if max_nonce else None,
                default_currency=_get("DEFAULT_CURRENCY") or DEFAULT_CURRENCY,
                mining_interval_seconds=(
                    float(interval) if interval else DEFAULT_MINING_INTERVAL
                ),
                max_seal_retries=int(retries) if retries else DEFAULT_MAX_SEAL_RETRIES
            )
        except ValueError as e:
            if isinstance(e, ValidationError):
                raise
            raise ValidationError(f"Invalid ledger configuration: {str(e)}")

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "difficulty": self.difficulty,
            "max_nonce": self.max_nonce,
            "default_currency": self.default_currency,
            "mining_interval_seconds": self.mining_interval_seconds,
            "max_seal_retries": self.max_seal_retries
        }


def configure_logging(level: int = logging.INFO) -> None:
    """Attach a basic stderr handler for hosts that have none."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
