"""Checked unsigned arithmetic for the distribution kernel.

Every function operates on plain Python ints and enforces the u64 working
width explicitly, raising ``ArithmeticOverflow`` instead of wrapping. Products
are formed in a u128 intermediate and floor-divided back down; there is no
floating point anywhere in amount computations.
"""

from __future__ import annotations

from ..errors import ArithmeticOverflow

U64_MAX: int = (1 << 64) - 1
U128_MAX: int = (1 << 128) - 1
BPS_SCALE: int = 10_000
SECONDS_PER_DAY: int = 86_400


# -- Range helpers -----------------------------------------------------------

def is_u64(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= U64_MAX


def require_u64(x: object, *, name: str) -> int:
    if not is_u64(x):
        raise ArithmeticOverflow(f"{name} outside u64 range: {x!r}")
    return int(x)  # type: ignore[arg-type]


def checked_add(a: int, b: int, *, name: str = "sum") -> int:
    out = a + b
    if out > U64_MAX:
        raise ArithmeticOverflow(f"{name} overflows u64")
    return out


def checked_sub(a: int, b: int, *, name: str = "difference") -> int:
    if b > a:
        raise ArithmeticOverflow(f"{name} underflows u64")
    return a - b


def mul_div_floor(a: int, b: int, denom: int, *, name: str = "product") -> int:
    """``floor(a * b / denom)`` with a u128 intermediate, narrowed to u64."""
    if denom <= 0:
        raise ArithmeticOverflow(f"{name}: division by zero")
    wide = a * b
    if wide > U128_MAX:
        raise ArithmeticOverflow(f"{name} overflows u128 intermediate")
    return require_u64(wide // denom, name=name)


# -- Day window --------------------------------------------------------------

def day_index(ts: int) -> int:
    """UTC day number: ``floor(ts / 86400)`` (floors toward -inf for negatives)."""
    return ts // SECONDS_PER_DAY


# -- Distribution formulas ---------------------------------------------------

def page_entitlement(available: int, investor_fee_share_bps: int) -> int:
    """Investor share of ``available``: ``floor(available * bps / 10000)``."""
    return mul_div_floor(available, investor_fee_share_bps, BPS_SCALE, name="entitlement")


def weight_share(entitlement: int, weight: int, y0_total: int) -> int:
    """Pro-rata slice: ``floor(entitlement * weight / y0_total)``."""
    return mul_div_floor(entitlement, weight, y0_total, name="weight_share")


def investor_pool(claimed_quote_today: int, investor_fee_share_bps: int, daily_cap_quote: int) -> int:
    """Investors' share of everything claimed today, bounded by the daily cap."""
    base = claimed_quote_today if daily_cap_quote == 0 else min(claimed_quote_today, daily_cap_quote)
    return page_entitlement(base, investor_fee_share_bps)
