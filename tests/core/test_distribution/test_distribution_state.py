"""Tests for fee_router/core/distribution/state.py: phases and record (de)serialization."""

import pytest

from fee_router.core.distribution import (
    DayPhase,
    HonoraryPosition,
    Policy,
    Progress,
    day_phase,
    initial_progress,
    record_from_dict,
    record_to_dict,
)


def _id(n: int) -> str:
    return "0x" + f"{n:064x}"


class TestInitialProgress:
    def test_day_from_timestamp(self):
        assert initial_progress(3 * 86_400 + 1) == Progress(current_day=3)

    def test_default(self):
        assert initial_progress() == Progress()


class TestDayPhase:
    def test_none_is_idle(self):
        assert day_phase(None) is DayPhase.IDLE

    def test_fresh_day_is_idle(self):
        assert day_phase(Progress(current_day=5)) is DayPhase.IDLE

    def test_in_progress(self):
        assert day_phase(Progress(current_day=5, page_cursor=1)) is DayPhase.IN_PROGRESS

    def test_cursor_zero_is_in_progress(self):
        assert day_phase(Progress(current_day=5, page_cursor=0)) is DayPhase.IN_PROGRESS

    def test_closed(self):
        assert day_phase(Progress(current_day=5, page_cursor=1, day_closed=True)) is DayPhase.CLOSED


class TestRecordDicts:
    def test_progress_roundtrip(self):
        p = Progress(
            current_day=9,
            last_distribution_ts=9 * 86_400,
            claimed_quote_today=10,
            distributed_quote_today=3,
            carry_quote_today=7,
            page_cursor=4,
            day_closed=False,
        )
        assert record_from_dict(Progress, record_to_dict(p)) == p

    def test_progress_without_page_roundtrip(self):
        p = Progress(current_day=9)
        d = record_to_dict(p)
        assert d["page_cursor"] is None
        assert record_from_dict(Progress, d) == p

    def test_policy_roundtrip(self):
        policy = Policy(
            authority=_id(1),
            pool=_id(2),
            quote_mint=_id(3),
            creator_destination=_id(4),
            treasury_destination=_id(5),
            investor_fee_share_bps=2500,
            y0_total=42,
            daily_cap_quote=7,
            min_payout_lamports=1,
            initialized=True,
        )
        assert record_from_dict(Policy, record_to_dict(policy)) == policy

    def test_position_roundtrip(self):
        pos = HonoraryPosition(owner=_id(1), position=_id(2), pool=_id(3), quote_mint=_id(4))
        assert record_from_dict(HonoraryPosition, record_to_dict(pos)) == pos

    def test_missing_field(self):
        d = record_to_dict(Progress())
        del d["page_cursor"]
        with pytest.raises(KeyError):
            record_from_dict(Progress, d)

    def test_bool_is_not_int(self):
        d = record_to_dict(Progress())
        d["page_cursor"] = True
        with pytest.raises(TypeError):
            record_from_dict(Progress, d)

    def test_int_is_not_bool(self):
        d = record_to_dict(Progress())
        d["day_closed"] = 1
        with pytest.raises(TypeError):
            record_from_dict(Progress, d)

    def test_str_fields(self):
        d = record_to_dict(HonoraryPosition(owner=_id(1), position=_id(2), pool=_id(3), quote_mint=_id(4)))
        d["owner"] = 5
        with pytest.raises(TypeError):
            record_from_dict(HonoraryPosition, d)
