"""Tests for fee_router/integration/config.py (YAML loading, fail-closed schema)."""

from __future__ import annotations

import textwrap

import pytest

from fee_router.core.distribution import CrankRules, CursorPolicy
from fee_router.integration.config import (
    DEFAULT_PROGRAM_ID,
    ConfigError,
    FeeRouterConfig,
    config_from_mapping,
    load_config,
    load_policy_init,
    policy_init_from_mapping,
)


def _write(tmp_path, text: str):
    path = tmp_path / "cfg.yaml"
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return path


class TestFeeRouterConfig:
    def test_defaults(self):
        cfg = FeeRouterConfig()
        assert cfg.program_id == DEFAULT_PROGRAM_ID
        assert cfg.crank_rules() == CrankRules()

    def test_program_id_canonicalized(self):
        assert FeeRouterConfig(program_id="AB" * 32).program_id == "0x" + "ab" * 32

    def test_bad_program_id(self):
        with pytest.raises(ConfigError):
            FeeRouterConfig(program_id="nope")

    def test_bad_page_size(self):
        with pytest.raises(ConfigError):
            FeeRouterConfig(max_page_size=0)

    def test_from_mapping(self):
        cfg = config_from_mapping(
            {"cursor_policy": "sequential", "max_page_size": 8, "require_closed_day_for_rollover": False}
        )
        rules = cfg.crank_rules()
        assert rules.cursor_policy is CursorPolicy.SEQUENTIAL
        assert rules.max_page_size == 8
        assert rules.require_closed_day_for_rollover is False

    def test_unknown_key(self):
        with pytest.raises(ConfigError):
            config_from_mapping({"max_pages": 3})

    def test_unknown_cursor_policy(self):
        with pytest.raises(ConfigError):
            config_from_mapping({"cursor_policy": "random"})

    def test_flag_must_be_bool(self):
        with pytest.raises(ConfigError):
            config_from_mapping({"require_closed_day_for_rollover": "yes please"})


class TestYaml:
    def test_load_nested_document(self, tmp_path):
        path = _write(
            tmp_path,
            f"""
            fee_router:
              program_id: "{'12' * 32}"
              cursor_policy: monotonic
              max_page_size: 4
            """,
        )
        cfg = load_config(path)
        assert cfg.program_id == "0x" + "12" * 32
        assert cfg.max_page_size == 4

    def test_load_bare_document(self, tmp_path):
        path = _write(tmp_path, "max_page_size: 2\n")
        assert load_config(path).max_page_size == 2

    def test_unquoted_hex_id(self, tmp_path):
        path = _write(tmp_path, "program_id: 0x" + "0a" * 32 + "\n")
        assert load_config(path).program_id == "0x" + "0a" * 32

    def test_invalid_yaml(self, tmp_path):
        path = _write(tmp_path, "fee_router: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = _write(tmp_path, "- 1\n- 2\n")
        with pytest.raises(ConfigError):
            load_config(path)


class TestPolicyInit:
    DOC = {
        "authority": "0x" + "01" * 32,
        "pool": "0x" + "02" * 32,
        "quote_mint": "0x" + "03" * 32,
        "creator_destination": "0x" + "04" * 32,
        "treasury_destination": "0x" + "05" * 32,
        "investor_fee_share_bps": 2000,
        "y0_total": 1_000_000,
    }

    def test_from_mapping(self):
        args = policy_init_from_mapping(self.DOC)
        assert args.pool == "0x" + "02" * 32
        assert args.daily_cap_quote == 0
        assert args.min_payout_lamports == 0

    def test_missing_key(self):
        doc = dict(self.DOC)
        del doc["y0_total"]
        with pytest.raises(ConfigError):
            policy_init_from_mapping(doc)

    def test_negative_amount(self):
        with pytest.raises(ConfigError):
            policy_init_from_mapping({**self.DOC, "daily_cap_quote": -1})

    def test_load_from_yaml(self, tmp_path):
        lines = ["policy:"] + [
            f'  {k}: "{v}"' if isinstance(v, str) else f"  {k}: {v}" for k, v in self.DOC.items()
        ]
        lines.append("  min_payout_lamports: 1000")
        path = _write(tmp_path, "\n".join(lines) + "\n")
        args = load_policy_init(path)
        assert args.authority == "0x" + "01" * 32
        assert args.min_payout_lamports == 1000
