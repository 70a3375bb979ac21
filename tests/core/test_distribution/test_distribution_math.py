"""Tests for fee_router/core/distribution/math.py."""

import pytest

from fee_router.core.distribution.math import (
    BPS_SCALE,
    U64_MAX,
    checked_add,
    checked_sub,
    day_index,
    is_u64,
    mul_div_floor,
    investor_pool,
    page_entitlement,
    require_u64,
    weight_share,
)
from fee_router.core.errors import ArithmeticOverflow


class TestRange:
    def test_is_u64(self):
        assert is_u64(0)
        assert is_u64(U64_MAX)
        assert not is_u64(U64_MAX + 1)
        assert not is_u64(-1)
        assert not is_u64(True)
        assert not is_u64(1.0)

    def test_require_u64_raises(self):
        with pytest.raises(ArithmeticOverflow):
            require_u64(-5, name="x")

    def test_checked_add(self):
        assert checked_add(1, 2) == 3
        assert checked_add(U64_MAX - 1, 1) == U64_MAX
        with pytest.raises(ArithmeticOverflow):
            checked_add(U64_MAX, 1)

    def test_checked_sub(self):
        assert checked_sub(5, 5) == 0
        with pytest.raises(ArithmeticOverflow):
            checked_sub(4, 5)


class TestMulDiv:
    def test_floor(self):
        assert mul_div_floor(7, 3, 2) == 10
        assert mul_div_floor(1, 1, 3) == 0

    def test_wide_intermediate_narrowed(self):
        # u64 * u64 fits the u128 intermediate; the quotient must fit u64 again.
        assert mul_div_floor(U64_MAX, U64_MAX, U64_MAX) == U64_MAX
        with pytest.raises(ArithmeticOverflow):
            mul_div_floor(U64_MAX, 2, 1)

    def test_zero_denominator(self):
        with pytest.raises(ArithmeticOverflow):
            mul_div_floor(1, 1, 0)


class TestDayWindow:
    def test_day_index(self):
        assert day_index(0) == 0
        assert day_index(86_399) == 0
        assert day_index(86_400) == 1
        assert day_index(1_700_000_000) == 19_675


class TestFormulas:
    def test_page_entitlement(self):
        assert page_entitlement(500_000, 2000) == 100_000
        assert page_entitlement(999, 1) == 0
        assert page_entitlement(12_345, BPS_SCALE) == 12_345

    def test_weight_share(self):
        assert weight_share(100_000, 1_000_000, 1_000_000) == 100_000
        assert weight_share(100_000, 333_333, 1_000_000) == 33_333
        assert weight_share(100_000, 1, 1_000_000) == 0

    def test_investor_pool(self):
        assert investor_pool(500_000, 2000, 0) == 100_000
        assert investor_pool(500_000, 2000, 50_000) == 10_000
        assert investor_pool(40_000, 10_000, 50_000) == 40_000
        assert investor_pool(0, 2000, 0) == 0
