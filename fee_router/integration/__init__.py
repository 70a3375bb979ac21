"""
Fee router service layer
"""

from .adapters import LedgerFeeClaimAdapter, StaticEligibilityReader
from .config import FeeRouterConfig, load_config, load_policy_init
from .service import CrankOutcome, FeeRouterService, InvestorRef
from .snapshot import load_snapshot, save_snapshot

__all__ = [
    "LedgerFeeClaimAdapter",
    "StaticEligibilityReader",
    "FeeRouterConfig",
    "load_config",
    "load_policy_init",
    "CrankOutcome",
    "FeeRouterService",
    "InvestorRef",
    "load_snapshot",
    "save_snapshot",
]
