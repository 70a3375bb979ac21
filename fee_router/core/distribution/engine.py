"""Crank engine.

``crank(policy, progress, params, rules)`` is the single entry point. It:

1. Rolls the day forward (or rejects a closed / past day). If rules allow
   rolling over an open day, that day is closed first and its carry flushed.
2. Folds the claim result into the day, enforcing quote-only accrual.
3. Sizes the day's investor pool from the claimed quote and the daily cap.
4. Allocates per-investor shares, separating payouts from dust.
5. Checks the page cursor against the last committed cursor for the day.
6. Checks all invariants on the post-state (conservation, cap, u64 range).
7. On the last page, flushes the carry to the creator and closes the day.
8. Returns the new `Progress`, the transfers to execute, and the events.

The function is pure: a rejected crank returns ``accepted=False`` and nothing
needs to be undone.
"""

from __future__ import annotations

from .guards import (
    guard_cursor,
    guard_day_window,
    guard_page_shape,
    guard_policy_ready,
    guard_quote_only,
)
from .invariants import check_all
from .math import day_index
from .state import initial_progress
from .types import CrankParams, CrankResult, CrankRules, Policy, Progress
from .updates import allocate_page, apply_claim, apply_day_close, apply_page, apply_rollover
from ..errors import ArithmeticOverflow, CapExceeded, FeeRouterError, InvalidInvestorPage
from ..events import CreatorPayoutDayClosed, InvestorPayoutPage

DEFAULT_RULES = CrankRules()

_OVERFLOW_INVARIANTS = frozenset({"inv_amounts_u64"})


def _raise_for_violations(violations: list[str]) -> None:
    if not violations:
        return
    detail = f"invariant:{','.join(violations)}"
    if _OVERFLOW_INVARIANTS.intersection(violations):
        raise ArithmeticOverflow(detail)
    raise CapExceeded(detail)


def _crank(policy: Policy, progress: Progress | None, params: CrankParams, rules: CrankRules) -> CrankResult:
    guard_policy_ready(policy)
    if not isinstance(params.now, int) or isinstance(params.now, bool):
        raise InvalidInvestorPage("now must be an int timestamp")

    # 1. Day rollover.
    today = day_index(params.now)
    guard_day_window(progress, today, rules)
    state = progress if progress is not None else initial_progress(params.now)
    rolled_over = today > state.current_day
    stale_transfers: tuple = ()
    stale_close_event = None
    if rolled_over:
        if not state.day_closed:
            # Only reachable when rules allow rolling over an open day.
            stale_day, stale_remainder = state.current_day, state.carry_quote_today
            state, stale_transfer = apply_day_close(state, policy)
            if stale_transfer is not None:
                stale_transfers = (stale_transfer,)
            stale_close_event = CreatorPayoutDayClosed(day=stale_day, remainder=stale_remainder)
        state = apply_rollover(state, today)

    # 2. Claim.
    guard_quote_only(params.claim)
    state = apply_claim(state, params.claim)

    # 3-4. Investor pool (cap applied) + weight shares.
    guard_page_shape(policy, params, rules)
    page = allocate_page(policy, state, params.investors)
    if page.paid_total > page.room:
        raise CapExceeded("page payouts exceed the remaining investor pool")

    # 5. Cursor.
    guard_cursor(state, params.page_cursor, rules)

    # 6. Conservation.
    state = apply_page(state, page, page_cursor=params.page_cursor, now=params.now)
    _raise_for_violations(check_all(state, policy))

    page_event = InvestorPayoutPage(
        day=state.current_day,
        page_cursor=params.page_cursor,
        investors=len(params.investors),
        paid_total=page.paid_total,
        carry_after=state.carry_quote_today,
    )

    # 7. Day close.
    transfers = stale_transfers + page.transfers
    close_event = None
    if params.is_last_page:
        remainder = state.carry_quote_today
        state, creator_transfer = apply_day_close(state, policy)
        if creator_transfer is not None:
            transfers = transfers + (creator_transfer,)
        close_event = CreatorPayoutDayClosed(day=state.current_day, remainder=remainder)
        _raise_for_violations(check_all(state, policy))

    # 8. Persisted by the caller.
    return CrankResult(
        accepted=True,
        progress=state,
        transfers=transfers,
        allocations=page.allocations,
        page_event=page_event,
        close_event=close_event,
        stale_close_event=stale_close_event,
        rolled_over=rolled_over,
    )


def crank(
    policy: Policy,
    progress: Progress | None,
    params: CrankParams,
    rules: CrankRules = DEFAULT_RULES,
) -> CrankResult:
    """Execute one crank against the given records.

    ``progress=None`` means the pool has never been cranked; the record is
    created for the day of ``params.now``.

    Returns ``CrankResult`` with ``accepted=True`` on success, or
    ``accepted=False`` with ``rejection`` set to the error code.
    """
    try:
        return _crank(policy, progress, params, rules)
    except FeeRouterError as exc:
        return CrankResult(accepted=False, rejection=exc.code, error=exc)


def crank_or_raise(
    policy: Policy,
    progress: Progress | None,
    params: CrankParams,
    rules: CrankRules = DEFAULT_RULES,
) -> CrankResult:
    """Like ``crank()`` but raises the typed ``FeeRouterError`` on rejection."""
    result = crank(policy, progress, params, rules)
    if not result.accepted:
        assert result.error is not None
        raise result.error
    return result
