"""Data types for the distribution kernel.

All types are frozen dataclasses (immutable).

Units/conventions:
- `*_quote` and `*_lamports` values are integer quote-token units (u64).
- `*_bps` rates are basis points (1/10_000).
- `*_ts` values are unix seconds; `current_day` is ``floor(ts / 86400)``.
- Identities are canonical 32-byte hex strings (see `state/canonical.py`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Tuple

from ..errors import FeeRouterError
from ..events import CreatorPayoutDayClosed, InvestorPayoutPage


@unique
class CursorPolicy(Enum):
    """How strictly page cursors must advance within a day."""
    MONOTONIC = "monotonic"    # any value > last committed cursor
    SEQUENTIAL = "sequential"  # 0 for the first page of a day, then exactly last + 1


@unique
class DayPhase(Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"


@unique
class PayoutKind(Enum):
    INVESTOR = "investor"
    CREATOR = "creator"


@dataclass(frozen=True)
class Policy:
    """Distribution parameters bound to one pool."""

    authority: str
    pool: str
    quote_mint: str
    creator_destination: str
    treasury_destination: str
    investor_fee_share_bps: int
    y0_total: int
    daily_cap_quote: int = 0       # 0 = uncapped
    min_payout_lamports: int = 0   # dust threshold
    initialized: bool = False


@dataclass(frozen=True)
class Progress:
    """Per-pool, per-day distribution progress."""

    current_day: int = 0
    last_distribution_ts: int = 0
    claimed_quote_today: int = 0
    distributed_quote_today: int = 0
    carry_quote_today: int = 0
    page_cursor: int | None = None  # last committed cursor for current_day; None = no page yet
    day_closed: bool = False


@dataclass(frozen=True)
class HonoraryPosition:
    """Binding of an external fee position to an engine-controlled owner."""

    owner: str
    position: str
    pool: str
    quote_mint: str


@dataclass(frozen=True)
class ClaimResult:
    """What the fee claim adapter reports for one claim."""

    quote_amount: int = 0
    base_amount: int = 0


@dataclass(frozen=True)
class PageEntry:
    """One investor in a page, with the weight read from its eligibility reference."""

    destination: str
    eligibility_ref: str
    weight: int


@dataclass(frozen=True)
class CrankRules:
    """Deployment knobs for the crank."""

    cursor_policy: CursorPolicy = CursorPolicy.MONOTONIC
    max_page_size: int = 16
    # If True, a later day cannot start while the previous day is still open.
    # If False, the open day is closed (carry flushed to the creator) on rollover.
    require_closed_day_for_rollover: bool = True


@dataclass(frozen=True)
class CrankParams:
    """Input of one crank invocation."""

    now: int
    page_cursor: int
    is_last_page: bool
    investors: Tuple[PageEntry, ...] = ()
    claim: ClaimResult = ClaimResult()


@dataclass(frozen=True)
class Allocation:
    """Per-investor outcome inside a page."""

    destination: str
    weight: int
    share: int
    paid: bool


@dataclass(frozen=True)
class Transfer:
    """A treasury outflow the shell must execute for a committed crank."""

    destination: str
    amount: int
    kind: PayoutKind


@dataclass(frozen=True)
class CrankResult:
    """Result of a single crank step."""

    accepted: bool
    progress: Progress | None = None
    transfers: Tuple[Transfer, ...] = ()
    allocations: Tuple[Allocation, ...] = ()
    page_event: InvestorPayoutPage | None = None
    close_event: CreatorPayoutDayClosed | None = None
    # Close of a previous day that was still open when this crank rolled over.
    stale_close_event: CreatorPayoutDayClosed | None = None
    rolled_over: bool = False
    rejection: str | None = None
    error: FeeRouterError | None = field(default=None, compare=False)

    @property
    def events(self) -> tuple:
        out: tuple = ()
        if self.stale_close_event is not None:
            out += (self.stale_close_event,)
        if self.page_event is not None:
            out += (self.page_event,)
        if self.close_event is not None:
            out += (self.close_event,)
        return out

    @property
    def paid_total(self) -> int:
        return sum(t.amount for t in self.transfers if t.kind is PayoutKind.INVESTOR)
