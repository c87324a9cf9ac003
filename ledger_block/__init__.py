"""
Commission Ledger - Block Module

This module implements the block structure and proof-of-work sealing for
the commission ledger.
"""

from .block import Block, meets_difficulty, GENESIS_PREVIOUS_HASH
from .miner import Miner

__all__ = ['Block', 'Miner', 'meets_difficulty', 'GENESIS_PREVIOUS_HASH']
