"""`distribution`: the paginated daily fee-distribution crank.

Semantics:
- deterministic, integer-only transitions (u64 working width, u128 products),
- immutable records (frozen dataclasses),
- fail-closed guards and invariant checks; a rejected crank has no effects.

Public API:
- `crank(policy, progress, params, rules) -> CrankResult`
- `crank_or_raise(...)` (raises the typed error on rejection)
- `initial_progress(now) -> Progress`, `day_phase(progress) -> DayPhase`
"""

from .engine import DEFAULT_RULES, crank, crank_or_raise
from .state import day_phase, initial_progress, record_from_dict, record_to_dict
from .types import (
    Allocation,
    ClaimResult,
    CrankParams,
    CrankResult,
    CrankRules,
    CursorPolicy,
    DayPhase,
    HonoraryPosition,
    PageEntry,
    PayoutKind,
    Policy,
    Progress,
    Transfer,
)

__all__ = [
    "DEFAULT_RULES",
    "crank",
    "crank_or_raise",
    "day_phase",
    "initial_progress",
    "record_from_dict",
    "record_to_dict",
    "Allocation",
    "ClaimResult",
    "CrankParams",
    "CrankResult",
    "CrankRules",
    "CursorPolicy",
    "DayPhase",
    "HonoraryPosition",
    "PageEntry",
    "PayoutKind",
    "Policy",
    "Progress",
    "Transfer",
]
