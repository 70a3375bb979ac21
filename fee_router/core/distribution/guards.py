"""Guard functions for the crank.

Each guard inspects the PRE-state (or the state right after day rollover) and
raises a typed ``FeeRouterError`` when the invocation must be rejected. Guards
never mutate anything.
"""

from __future__ import annotations

from ..errors import (
    ConstraintViolation,
    DailyWindowNotReady,
    InvalidInvestorPage,
    QuoteOnlyViolation,
)
from .math import BPS_SCALE, is_u64, require_u64
from .types import ClaimResult, CrankParams, CrankRules, CursorPolicy, Policy, Progress


def guard_policy_ready(policy: Policy) -> None:
    if not policy.initialized:
        raise ConstraintViolation("policy is not initialized")
    if not (0 <= policy.investor_fee_share_bps <= BPS_SCALE):
        raise ConstraintViolation("investor_fee_share_bps out of range")
    if not is_u64(policy.y0_total) or policy.y0_total == 0:
        raise ConstraintViolation("y0_total must be a positive u64")


def guard_day_window(progress: Progress | None, today: int, rules: CrankRules) -> None:
    """Reject a closed day, a clock that went backwards, or (optionally) an early rollover.

    ``progress is None`` means the record has not been created yet; any day is
    acceptable then.
    """
    if progress is None:
        return
    if today < progress.current_day:
        raise DailyWindowNotReady(
            f"day {today} precedes current day {progress.current_day}"
        )
    if today == progress.current_day and progress.day_closed:
        raise DailyWindowNotReady(f"day {today} is already closed")
    if (
        today > progress.current_day
        and rules.require_closed_day_for_rollover
        and not progress.day_closed
    ):
        raise DailyWindowNotReady(
            f"day {progress.current_day} must close before day {today} starts"
        )


def guard_quote_only(claim: ClaimResult) -> None:
    require_u64(claim.quote_amount, name="claim.quote_amount")
    require_u64(claim.base_amount, name="claim.base_amount")
    if claim.base_amount != 0:
        raise QuoteOnlyViolation(
            f"claim returned {claim.base_amount} base units; only quote fees are allowed"
        )


def guard_page_shape(policy: Policy, params: CrankParams, rules: CrankRules) -> None:
    if len(params.investors) > rules.max_page_size:
        raise InvalidInvestorPage(
            f"page has {len(params.investors)} investors (max {rules.max_page_size})"
        )
    seen: set[str] = set()
    total_weight = 0
    for i, entry in enumerate(params.investors):
        if not is_u64(entry.weight):
            raise InvalidInvestorPage(f"investors[{i}].weight is not a u64")
        if entry.weight > policy.y0_total:
            raise InvalidInvestorPage(f"investors[{i}].weight exceeds y0_total")
        if entry.eligibility_ref in seen:
            raise InvalidInvestorPage(f"investors[{i}] repeats eligibility reference")
        seen.add(entry.eligibility_ref)
        total_weight += entry.weight
    if total_weight > policy.y0_total:
        raise InvalidInvestorPage("page weights sum past y0_total")


def guard_cursor(progress: Progress, page_cursor: int, rules: CrankRules) -> None:
    """No regression and no exact replay of a committed cursor within a day.

    Any u64 opens the day under MONOTONIC; SEQUENTIAL days start at 0.
    """
    if not is_u64(page_cursor):
        raise InvalidInvestorPage(f"page_cursor is not a u64: {page_cursor!r}")
    last = progress.page_cursor
    if rules.cursor_policy is CursorPolicy.SEQUENTIAL:
        expected = 0 if last is None else last + 1
        if page_cursor != expected:
            raise InvalidInvestorPage(f"page_cursor must be {expected}, got {page_cursor}")
        return
    if last is not None and page_cursor <= last:
        raise InvalidInvestorPage(f"page_cursor {page_cursor} <= committed cursor {last}")
