"""State transition functions for the crank.

Each function returns a new `Progress` (via `dataclasses.replace()` on the
frozen record) or a pure computation result; nothing here has side effects.

Accounting model for one day:
- the investor pool is ``floor(min(claimed, cap) * bps / 10000)`` and grows as
  fees are claimed;
- every page draws ``floor(pool * weight / y0_total)`` per investor, bounded by
  what is left of the pool;
- carry is everything claimed and not yet paid, ``claimed - distributed``,
  and is flushed to the creator when the day closes.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence, Tuple

from .math import checked_add, checked_sub, investor_pool, weight_share
from .types import (
    Allocation,
    ClaimResult,
    PageEntry,
    PayoutKind,
    Policy,
    Progress,
    Transfer,
)


@dataclass(frozen=True)
class PageAllocation:
    """Everything one page computes before it is applied."""

    pool: int
    room: int
    paid_total: int
    dust_total: int
    allocations: Tuple[Allocation, ...]
    transfers: Tuple[Transfer, ...]


def apply_rollover(progress: Progress, today: int) -> Progress:
    return replace(
        progress,
        current_day=today,
        claimed_quote_today=0,
        distributed_quote_today=0,
        carry_quote_today=0,
        page_cursor=None,
        day_closed=False,
    )


def apply_claim(progress: Progress, claim: ClaimResult) -> Progress:
    claimed = checked_add(progress.claimed_quote_today, claim.quote_amount, name="claimed_quote_today")
    return replace(
        progress,
        claimed_quote_today=claimed,
        carry_quote_today=checked_sub(claimed, progress.distributed_quote_today, name="carry_quote_today"),
    )


def allocate_page(policy: Policy, progress: Progress, investors: Sequence[PageEntry]) -> PageAllocation:
    """Pay the page's investors their weight share of the day's investor pool.

    Shares below ``min_payout_lamports`` are dust: no transfer, the amount
    stays in carry. Zero shares are neither paid nor counted.
    """
    pool = investor_pool(
        progress.claimed_quote_today, policy.investor_fee_share_bps, policy.daily_cap_quote,
    )
    room = max(0, pool - progress.distributed_quote_today)

    left = room
    paid_total = 0
    dust_total = 0
    allocations = []
    transfers = []
    for entry in investors:
        share = min(weight_share(pool, entry.weight, policy.y0_total), left)
        paid = share > 0 and share >= policy.min_payout_lamports
        if paid:
            left -= share
            paid_total = checked_add(paid_total, share, name="paid_total")
            transfers.append(Transfer(destination=entry.destination, amount=share, kind=PayoutKind.INVESTOR))
        else:
            dust_total = checked_add(dust_total, share, name="dust_total")
        allocations.append(
            Allocation(destination=entry.destination, weight=entry.weight, share=share, paid=paid)
        )

    return PageAllocation(
        pool=pool,
        room=room,
        paid_total=paid_total,
        dust_total=dust_total,
        allocations=tuple(allocations),
        transfers=tuple(transfers),
    )


def apply_page(progress: Progress, page: PageAllocation, *, page_cursor: int, now: int) -> Progress:
    distributed = checked_add(
        progress.distributed_quote_today, page.paid_total, name="distributed_quote_today",
    )
    return replace(
        progress,
        distributed_quote_today=distributed,
        carry_quote_today=checked_sub(progress.claimed_quote_today, distributed, name="carry_quote_today"),
        page_cursor=page_cursor,
        last_distribution_ts=now,
    )


def apply_day_close(progress: Progress, policy: Policy) -> Tuple[Progress, Transfer | None]:
    """Flush the whole carry to the creator and lock the day."""
    remainder = progress.carry_quote_today
    transfer = None
    if remainder > 0:
        transfer = Transfer(
            destination=policy.creator_destination, amount=remainder, kind=PayoutKind.CREATOR,
        )
    return replace(progress, carry_quote_today=0, day_closed=True), transfer
