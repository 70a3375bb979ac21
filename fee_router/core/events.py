"""Events emitted by committed transitions.

Events are the only externally observable side channel besides balance
changes. Each one serializes to a flat dict with an ``event`` discriminator.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum, unique
from typing import Any, Dict, Union


@unique
class EventKind(Enum):
    POLICY_INITIALIZED = "PolicyInitialized"
    POLICY_UPDATED = "PolicyUpdated"
    HONORARY_POSITION_INITIALIZED = "HonoraryPositionInitialized"
    INVESTOR_PAYOUT_PAGE = "InvestorPayoutPage"
    CREATOR_PAYOUT_DAY_CLOSED = "CreatorPayoutDayClosed"


@dataclass(frozen=True)
class PolicyInitialized:
    policy: str
    config_hash: str

    kind = EventKind.POLICY_INITIALIZED


@dataclass(frozen=True)
class PolicyUpdated:
    policy: str
    config_hash: str

    kind = EventKind.POLICY_UPDATED


@dataclass(frozen=True)
class HonoraryPositionInitialized:
    pool: str
    position: str
    owner: str

    kind = EventKind.HONORARY_POSITION_INITIALIZED


@dataclass(frozen=True)
class InvestorPayoutPage:
    day: int
    page_cursor: int
    investors: int
    paid_total: int
    # Carry after this page's payouts, before any day-close flush.
    carry_after: int

    kind = EventKind.INVESTOR_PAYOUT_PAGE


@dataclass(frozen=True)
class CreatorPayoutDayClosed:
    day: int
    remainder: int

    kind = EventKind.CREATOR_PAYOUT_DAY_CLOSED


Event = Union[
    PolicyInitialized,
    PolicyUpdated,
    HonoraryPositionInitialized,
    InvestorPayoutPage,
    CreatorPayoutDayClosed,
]


def event_to_dict(event: Event) -> Dict[str, Any]:
    out: Dict[str, Any] = {"event": event.kind.value}
    out.update(asdict(event))
    return out
