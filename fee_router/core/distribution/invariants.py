"""Invariant checkers for `Progress`.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass). The engine runs these
on every post-state before anything is committed.
"""

from __future__ import annotations

from typing import Callable

from .math import day_index, is_u64
from .types import Policy, Progress


def inv_amounts_u64(p: Progress, policy: Policy) -> bool:
    return all(
        is_u64(v)
        for v in (
            p.claimed_quote_today,
            p.distributed_quote_today,
            p.carry_quote_today,
        )
    ) and (p.page_cursor is None or is_u64(p.page_cursor))


def inv_accounting_bounded(p: Progress, policy: Policy) -> bool:
    return p.distributed_quote_today + p.carry_quote_today <= p.claimed_quote_today


def inv_carry_is_unpaid(p: Progress, policy: Policy) -> bool:
    if p.day_closed:
        return True
    return p.carry_quote_today == p.claimed_quote_today - p.distributed_quote_today


def inv_cap_respected(p: Progress, policy: Policy) -> bool:
    if policy.daily_cap_quote == 0:
        return True
    return p.distributed_quote_today <= policy.daily_cap_quote


def inv_closed_day_flushed(p: Progress, policy: Policy) -> bool:
    if not p.day_closed:
        return True
    return p.carry_quote_today == 0


def inv_ts_within_day(p: Progress, policy: Policy) -> bool:
    if p.last_distribution_ts == 0:
        return True
    return day_index(p.last_distribution_ts) == p.current_day


INVARIANT_REGISTRY: dict[str, Callable[[Progress, Policy], bool]] = {
    "inv_amounts_u64": inv_amounts_u64,
    "inv_accounting_bounded": inv_accounting_bounded,
    "inv_carry_is_unpaid": inv_carry_is_unpaid,
    "inv_cap_respected": inv_cap_respected,
    "inv_closed_day_flushed": inv_closed_day_flushed,
    "inv_ts_within_day": inv_ts_within_day,
}


def check_all(progress: Progress, policy: Policy) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(progress, policy)
    ]
