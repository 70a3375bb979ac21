"""Exception taxonomy for the fee router.

Every error aborts the whole invocation. Kernels raise these; the result-style
entry points (``crank()``) catch them and report ``rejection=<code>``.
"""

from __future__ import annotations


class FeeRouterError(Exception):
    """Base class. ``code`` is stable and safe to match on."""

    code = "fee_router_error"

    def __init__(self, message: str = "") -> None:
        self.message = message or self.code
        super().__init__(self.message)


class QuoteOnlyViolation(FeeRouterError):
    """Non-quote fee accrual detected (pool, position or claim result)."""

    code = "quote_only_violation"


class DailyWindowNotReady(FeeRouterError):
    """The current day is closed, or the clock maps to an earlier day."""

    code = "daily_window_not_ready"


class InvalidInvestorPage(FeeRouterError):
    """Non-monotonic cursor or malformed investor page."""

    code = "invalid_investor_page"


class CapExceeded(FeeRouterError):
    """Distribution would exceed the daily cap or the claimed total."""

    code = "cap_exceeded"


class ArithmeticOverflow(FeeRouterError):
    """A computation left the unsigned 64-bit range."""

    code = "arithmetic_overflow"


class ConstraintViolation(FeeRouterError):
    """Configuration or account relationship mismatch."""

    code = "constraint_violation"


class Unauthorized(FeeRouterError):
    """Caller is not the policy authority."""

    code = "unauthorized"


class InsufficientFunds(FeeRouterError):
    """Treasury cannot cover the transfers a crank would commit."""

    code = "insufficient_funds"


ERRORS_BY_CODE: dict[str, type[FeeRouterError]] = {
    cls.code: cls
    for cls in (
        QuoteOnlyViolation,
        DailyWindowNotReady,
        InvalidInvestorPage,
        CapExceeded,
        ArithmeticOverflow,
        ConstraintViolation,
        Unauthorized,
        InsufficientFunds,
    )
}
