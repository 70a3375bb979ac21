"""
Core fee-distribution kernels
"""

from .distribution import (
    CrankParams,
    CrankResult,
    CrankRules,
    CursorPolicy,
    DayPhase,
    Policy,
    Progress,
    crank,
    crank_or_raise,
)
from .errors import (
    ArithmeticOverflow,
    CapExceeded,
    ConstraintViolation,
    DailyWindowNotReady,
    FeeRouterError,
    InsufficientFunds,
    InvalidInvestorPage,
    QuoteOnlyViolation,
    Unauthorized,
)
from .events import event_to_dict
from .policy import PolicyInit, PolicyUpdate, init_policy, update_policy
from .binder import bind_position

__all__ = [
    "CrankParams",
    "CrankResult",
    "CrankRules",
    "CursorPolicy",
    "DayPhase",
    "Policy",
    "Progress",
    "crank",
    "crank_or_raise",
    "ArithmeticOverflow",
    "CapExceeded",
    "ConstraintViolation",
    "DailyWindowNotReady",
    "FeeRouterError",
    "InsufficientFunds",
    "InvalidInvestorPage",
    "QuoteOnlyViolation",
    "Unauthorized",
    "event_to_dict",
    "PolicyInit",
    "PolicyUpdate",
    "init_policy",
    "update_policy",
    "bind_position",
]
