"""
State tables for the fee router
"""

from .canonical import canonical_id
from .identity import derive_address
from .ledger import TokenLedger
from .records import RecordStore

__all__ = [
    "canonical_id",
    "derive_address",
    "TokenLedger",
    "RecordStore",
]
