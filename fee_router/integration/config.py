"""
Configuration for the fee router shell.

Two documents, both YAML with fail-closed schema checks:
- the deployment config (`FeeRouterConfig`): program id + crank rules,
- a policy document (`PolicyInit`): the arguments of `init_policy`.

Unknown keys are rejected so a typo never silently falls back to a default.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..core.distribution.types import CrankRules, CursorPolicy
from ..core.policy import PolicyInit
from ..state.canonical import canonical_id


DEFAULT_PROGRAM_ID = "0x" + "4f" * 32


class ConfigError(ValueError):
    """Raised when a configuration document is malformed."""


@dataclass(frozen=True)
class FeeRouterConfig:
    # Namespace for every derived identity (policy, progress, vault authority, ...).
    program_id: str = DEFAULT_PROGRAM_ID

    # Crank rules:
    # - `cursor_policy`: "monotonic" accepts any cursor above the last committed one,
    #   "sequential" requires exactly last + 1.
    # - `max_page_size`: investors per crank call.
    # - `require_closed_day_for_rollover`: if True, an unclosed day blocks the next one;
    #   if False, the open day is closed on rollover and its carry goes to the creator.
    cursor_policy: CursorPolicy = CursorPolicy.MONOTONIC
    max_page_size: int = 16
    require_closed_day_for_rollover: bool = True

    def __post_init__(self) -> None:
        try:
            canonical = canonical_id(self.program_id, name="program_id")
        except (TypeError, ValueError) as exc:
            raise ConfigError(str(exc)) from exc
        object.__setattr__(self, "program_id", canonical)
        if not isinstance(self.cursor_policy, CursorPolicy):
            raise ConfigError("cursor_policy must be a CursorPolicy")
        if not isinstance(self.max_page_size, int) or isinstance(self.max_page_size, bool) or self.max_page_size <= 0:
            raise ConfigError("max_page_size must be a positive int")
        if not isinstance(self.require_closed_day_for_rollover, bool):
            raise ConfigError("require_closed_day_for_rollover must be a bool")

    def crank_rules(self) -> CrankRules:
        return CrankRules(
            cursor_policy=self.cursor_policy,
            max_page_size=self.max_page_size,
            require_closed_day_for_rollover=self.require_closed_day_for_rollover,
        )


_CONFIG_KEYS = frozenset({"program_id", "cursor_policy", "max_page_size", "require_closed_day_for_rollover"})
_POLICY_REQUIRED = (
    "authority",
    "pool",
    "quote_mint",
    "creator_destination",
    "treasury_destination",
    "investor_fee_share_bps",
    "y0_total",
)
_POLICY_OPTIONAL = ("daily_cap_quote", "min_payout_lamports")


def _require_mapping(obj: Any, *, name: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise ConfigError(f"{name} must be a mapping")
    return obj


def _require_known_keys(obj: Mapping[str, Any], allowed: frozenset[str], *, name: str) -> None:
    unknown = sorted(set(obj) - allowed)
    if unknown:
        raise ConfigError(f"{name}: unknown keys {unknown}")


def _require_int(obj: Any, *, name: str) -> int:
    if not isinstance(obj, int) or isinstance(obj, bool) or obj < 0:
        raise ConfigError(f"{name} must be a non-negative int")
    return obj


def _require_str(obj: Any, *, name: str) -> str:
    if not isinstance(obj, str) or not obj.strip():
        raise ConfigError(f"{name} must be a non-empty string")
    return obj.strip()


def _require_id(obj: Any, *, name: str) -> str:
    # Unquoted 0x... scalars load as ints under YAML 1.1; restore the hex form.
    if isinstance(obj, int) and not isinstance(obj, bool) and 0 <= obj < (1 << 256):
        return f"0x{obj:064x}"
    return _require_str(obj, name=name)


def _load_yaml(path: str | Path, *, section: str) -> dict[str, Any]:
    raw = Path(path).read_text(encoding="utf-8")
    try:
        root = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: invalid YAML: {exc}") from exc
    root = _require_mapping(root, name=str(path))
    # Accept either a bare document or one nested under its section name.
    if section in root and len(root) == 1:
        return _require_mapping(root[section], name=section)
    return root


def config_from_mapping(d: Mapping[str, Any]) -> FeeRouterConfig:
    d = _require_mapping(dict(d), name="fee_router")
    _require_known_keys(d, _CONFIG_KEYS, name="fee_router")
    kwargs: dict[str, Any] = {}
    if "program_id" in d:
        kwargs["program_id"] = _require_id(d["program_id"], name="program_id")
    if "cursor_policy" in d:
        value = _require_str(d["cursor_policy"], name="cursor_policy")
        try:
            kwargs["cursor_policy"] = CursorPolicy(value)
        except ValueError as exc:
            raise ConfigError(f"unsupported cursor_policy: {value}") from exc
    if "max_page_size" in d:
        kwargs["max_page_size"] = _require_int(d["max_page_size"], name="max_page_size")
    if "require_closed_day_for_rollover" in d:
        flag = d["require_closed_day_for_rollover"]
        if not isinstance(flag, bool):
            raise ConfigError("require_closed_day_for_rollover must be a bool")
        kwargs["require_closed_day_for_rollover"] = flag
    return FeeRouterConfig(**kwargs)


def load_config(path: str | Path) -> FeeRouterConfig:
    return config_from_mapping(_load_yaml(path, section="fee_router"))


def policy_init_from_mapping(d: Mapping[str, Any]) -> PolicyInit:
    d = _require_mapping(dict(d), name="policy")
    _require_known_keys(d, frozenset(_POLICY_REQUIRED + _POLICY_OPTIONAL), name="policy")
    missing = [k for k in _POLICY_REQUIRED if k not in d]
    if missing:
        raise ConfigError(f"policy: missing keys {missing}")
    return PolicyInit(
        authority=_require_id(d["authority"], name="authority"),
        pool=_require_id(d["pool"], name="pool"),
        quote_mint=_require_id(d["quote_mint"], name="quote_mint"),
        creator_destination=_require_id(d["creator_destination"], name="creator_destination"),
        treasury_destination=_require_id(d["treasury_destination"], name="treasury_destination"),
        investor_fee_share_bps=_require_int(d["investor_fee_share_bps"], name="investor_fee_share_bps"),
        y0_total=_require_int(d["y0_total"], name="y0_total"),
        daily_cap_quote=_require_int(d.get("daily_cap_quote", 0), name="daily_cap_quote"),
        min_payout_lamports=_require_int(d.get("min_payout_lamports", 0), name="min_payout_lamports"),
    )


def load_policy_init(path: str | Path) -> PolicyInit:
    return policy_init_from_mapping(_load_yaml(path, section="policy"))
