"""
Position binder kernel.

Links an externally-owned fee position to the engine-controlled owner identity
exactly once. The resulting `HonoraryPosition` is never mutated afterwards.
"""

from __future__ import annotations

from .distribution.types import HonoraryPosition, Policy
from .errors import ConstraintViolation, QuoteOnlyViolation
from .policy import require_authority, require_id


def bind_position(
    policy: Policy,
    *,
    caller: str,
    pool: str,
    quote_mint: str,
    external_position: str,
    owner: str,
    existing: HonoraryPosition | None,
    bound_elsewhere: bool,
    quote_only: bool,
) -> HonoraryPosition:
    """
    Validate the binding and build the `HonoraryPosition` record.

    `bound_elsewhere` and `quote_only` are facts supplied by the shell (the
    position index and the fee adapter's pool check respectively).

    Raises:
        Unauthorized: `caller` is not the policy authority.
        ConstraintViolation: pool/quote mismatch, policy already bound, or the
            position already bound to another policy.
        QuoteOnlyViolation: the pool/position can accrue non-quote fees.
    """
    if not policy.initialized:
        raise ConstraintViolation("policy is not initialized")
    require_authority(policy, caller)
    if require_id(pool, name="pool") != policy.pool:
        raise ConstraintViolation("pool does not match policy")
    if require_id(quote_mint, name="quote_mint") != policy.quote_mint:
        raise ConstraintViolation("quote mint does not match policy")
    if existing is not None:
        raise ConstraintViolation("policy already has a bound position")
    if bound_elsewhere:
        raise ConstraintViolation("position is already bound to another policy")
    if not quote_only:
        raise QuoteOnlyViolation("position does not accrue quote-only fees")

    return HonoraryPosition(
        owner=require_id(owner, name="owner"),
        position=require_id(external_position, name="external_position"),
        pool=policy.pool,
        quote_mint=policy.quote_mint,
    )
