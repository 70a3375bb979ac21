"""
Policy configuration kernel.

Pure validation + construction of the per-pool `Policy` record:
- `init_policy` creates it once (fail-closed on any relationship mismatch),
- `update_policy` lets the authority retune the mutable parameters,
- `policy_config_hash` commits to the effective parameters for audit events.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from ..state.canonical import canonical_id, canonical_json_bytes, domain_sep_bytes, sha256_hex
from .distribution.math import BPS_SCALE, is_u64
from .distribution.types import Policy
from .errors import ConstraintViolation, Unauthorized


@dataclass(frozen=True)
class TokenAccountInfo:
    """The two facts the kernel needs about a token account."""

    owner: str
    mint: str


@dataclass(frozen=True)
class PolicyInit:
    authority: str
    pool: str
    quote_mint: str
    creator_destination: str
    treasury_destination: str
    investor_fee_share_bps: int
    y0_total: int
    daily_cap_quote: int = 0
    min_payout_lamports: int = 0


@dataclass(frozen=True)
class PolicyUpdate:
    """Mutable parameters; None leaves a field unchanged."""

    investor_fee_share_bps: Optional[int] = None
    daily_cap_quote: Optional[int] = None
    min_payout_lamports: Optional[int] = None
    creator_destination: Optional[str] = None


def require_id(value: str, *, name: str) -> str:
    try:
        return canonical_id(value, name=name)
    except (TypeError, ValueError) as exc:
        raise ConstraintViolation(str(exc)) from exc


def _require_bps(v: int) -> int:
    if not isinstance(v, int) or isinstance(v, bool) or not (0 <= v <= BPS_SCALE):
        raise ConstraintViolation(f"investor_fee_share_bps must be in [0, {BPS_SCALE}]: {v!r}")
    return v


def _require_u64(v: int, *, name: str) -> int:
    if not is_u64(v):
        raise ConstraintViolation(f"{name} must be a u64: {v!r}")
    return v


def _require_quote_account(info: TokenAccountInfo | None, quote_mint: str, *, name: str) -> None:
    if info is None:
        raise ConstraintViolation(f"{name} does not exist")
    if require_id(info.mint, name=f"{name}.mint") != quote_mint:
        raise ConstraintViolation(f"{name} is not denominated in the quote mint")


def init_policy(
    existing: Policy | None,
    args: PolicyInit,
    *,
    vault_authority: str,
    treasury: TokenAccountInfo | None,
    creator: TokenAccountInfo | None,
) -> Policy:
    """
    Validate `args` and build the initialized `Policy`.

    Raises:
        ConstraintViolation: already initialized, bad bounds, or a destination
            not denominated in the quote mint / treasury not controlled by
            `vault_authority`.
    """
    if existing is not None and existing.initialized:
        raise ConstraintViolation("policy already initialized for this pool")

    quote_mint = require_id(args.quote_mint, name="quote_mint")
    _require_bps(args.investor_fee_share_bps)
    y0_total = _require_u64(args.y0_total, name="y0_total")
    if y0_total == 0:
        raise ConstraintViolation("y0_total must be positive")
    daily_cap = _require_u64(args.daily_cap_quote, name="daily_cap_quote")
    min_payout = _require_u64(args.min_payout_lamports, name="min_payout_lamports")

    _require_quote_account(treasury, quote_mint, name="treasury_destination")
    assert treasury is not None
    if require_id(treasury.owner, name="treasury.owner") != require_id(vault_authority, name="vault_authority"):
        raise ConstraintViolation("treasury_destination is not controlled by the vault authority")
    _require_quote_account(creator, quote_mint, name="creator_destination")

    return Policy(
        authority=require_id(args.authority, name="authority"),
        pool=require_id(args.pool, name="pool"),
        quote_mint=quote_mint,
        creator_destination=require_id(args.creator_destination, name="creator_destination"),
        treasury_destination=require_id(args.treasury_destination, name="treasury_destination"),
        investor_fee_share_bps=args.investor_fee_share_bps,
        y0_total=y0_total,
        daily_cap_quote=daily_cap,
        min_payout_lamports=min_payout,
        initialized=True,
    )


def require_authority(policy: Policy, caller: str) -> None:
    if require_id(caller, name="caller") != policy.authority:
        raise Unauthorized("caller is not the policy authority")


def update_policy(
    policy: Policy,
    changes: PolicyUpdate,
    *,
    caller: str,
    creator: TokenAccountInfo | None = None,
) -> Policy:
    """Apply authority-gated parameter changes. Identity fields never change."""
    if not policy.initialized:
        raise ConstraintViolation("policy is not initialized")
    require_authority(policy, caller)

    updated = policy
    if changes.investor_fee_share_bps is not None:
        updated = replace(updated, investor_fee_share_bps=_require_bps(changes.investor_fee_share_bps))
    if changes.daily_cap_quote is not None:
        updated = replace(updated, daily_cap_quote=_require_u64(changes.daily_cap_quote, name="daily_cap_quote"))
    if changes.min_payout_lamports is not None:
        updated = replace(
            updated,
            min_payout_lamports=_require_u64(changes.min_payout_lamports, name="min_payout_lamports"),
        )
    if changes.creator_destination is not None:
        _require_quote_account(creator, policy.quote_mint, name="creator_destination")
        updated = replace(
            updated,
            creator_destination=require_id(changes.creator_destination, name="creator_destination"),
        )
    return updated


def policy_config_hash(policy: Policy) -> str:
    """sha256 commitment over the effective distribution parameters."""
    payload = {
        "pool": policy.pool,
        "quote_mint": policy.quote_mint,
        "creator_destination": policy.creator_destination,
        "treasury_destination": policy.treasury_destination,
        "investor_fee_share_bps": policy.investor_fee_share_bps,
        "y0_total": policy.y0_total,
        "daily_cap_quote": policy.daily_cap_quote,
        "min_payout_lamports": policy.min_payout_lamports,
    }
    return sha256_hex(domain_sep_bytes("policy_config") + canonical_json_bytes(payload))
