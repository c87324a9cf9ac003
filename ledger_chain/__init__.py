"""
Commission Ledger - Chain Module

This module implements the ledger itself: chain management, integrity
validation, commission verification, disputes, background mining and the
service facade used by the surrounding application.
"""

from .chain import Ledger, BlockchainStats
from .validator import ChainValidator, ChainValidationResult, InvalidReason
from .verification import VerificationService, VerificationResult
from .disputes import DisputeManager
from .worker import MiningWorker
from .service import CommissionLedgerService

__all__ = [
    'Ledger', 'BlockchainStats', 'ChainValidator', 'ChainValidationResult',
    'InvalidReason', 'VerificationService', 'VerificationResult',
    'DisputeManager', 'MiningWorker', 'CommissionLedgerService',
]
