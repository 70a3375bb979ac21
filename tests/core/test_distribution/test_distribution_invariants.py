"""Tests for fee_router/core/distribution/invariants.py."""

from dataclasses import replace

from fee_router.core.distribution import Policy, Progress
from fee_router.core.distribution.invariants import INVARIANT_REGISTRY, check_all


def _id(n: int) -> str:
    return "0x" + f"{n:064x}"


POLICY = Policy(
    authority=_id(1),
    pool=_id(2),
    quote_mint=_id(3),
    creator_destination=_id(4),
    treasury_destination=_id(5),
    investor_fee_share_bps=2000,
    y0_total=1_000_000,
    daily_cap_quote=1_000,
    initialized=True,
)

GOOD = Progress(
    current_day=10,
    last_distribution_ts=10 * 86_400 + 5,
    claimed_quote_today=5_000,
    distributed_quote_today=1_000,
    carry_quote_today=4_000,
    page_cursor=2,
)


def test_registry_is_complete() -> None:
    assert set(INVARIANT_REGISTRY) == {
        "inv_amounts_u64",
        "inv_accounting_bounded",
        "inv_carry_is_unpaid",
        "inv_cap_respected",
        "inv_closed_day_flushed",
        "inv_ts_within_day",
    }


def test_good_state_passes() -> None:
    assert check_all(GOOD, POLICY) == []
    assert check_all(Progress(), POLICY) == []


def test_accounting_bounded() -> None:
    bad = replace(GOOD, carry_quote_today=4_001)
    assert check_all(bad, POLICY) == ["inv_accounting_bounded", "inv_carry_is_unpaid"]


def test_open_day_carry_is_claimed_minus_distributed() -> None:
    short = replace(GOOD, carry_quote_today=3_999)
    assert check_all(short, POLICY) == ["inv_carry_is_unpaid"]
    # A closed day has flushed its carry and is exempt.
    assert check_all(replace(GOOD, carry_quote_today=0, day_closed=True), POLICY) == []


def test_cap_respected() -> None:
    bad = replace(GOOD, distributed_quote_today=1_001, carry_quote_today=3_999)
    assert check_all(bad, POLICY) == ["inv_cap_respected"]
    assert check_all(bad, replace(POLICY, daily_cap_quote=0)) == []


def test_closed_day_must_be_flushed() -> None:
    bad = replace(GOOD, day_closed=True)
    assert check_all(bad, POLICY) == ["inv_closed_day_flushed"]
    assert check_all(replace(bad, carry_quote_today=0), POLICY) == []


def test_timestamp_within_current_day() -> None:
    bad = replace(GOOD, last_distribution_ts=11 * 86_400)
    assert check_all(bad, POLICY) == ["inv_ts_within_day"]


def test_amounts_u64() -> None:
    bad = replace(GOOD, page_cursor=-1)
    assert "inv_amounts_u64" in check_all(bad, POLICY)


def test_no_page_yet_is_valid() -> None:
    assert check_all(replace(GOOD, page_cursor=None), POLICY) == []
    assert check_all(replace(GOOD, page_cursor=0), POLICY) == []
