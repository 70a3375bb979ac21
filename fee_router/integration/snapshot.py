"""
Fee router state snapshot encoding.

Goals:
- Deterministic JSON serialization of the record store and token ledger for
  hashing / backup.
- Round-trippable into `RecordStore` + `TokenLedger`.
- Explicit versioning.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

from ..core.distribution import HonoraryPosition, Policy, Progress, record_from_dict, record_to_dict
from ..state.canonical import canonical_id, canonical_json_bytes, domain_sep_bytes, sha256_hex
from ..state.ledger import TokenLedger
from ..state.records import RecordStore


FEE_ROUTER_SNAPSHOT_VERSION = 1


def _require_list(value: Any, *, name: str, max_items: int) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"{name} must be a list")
    if len(value) > max_items:
        raise ValueError(f"too many {name} entries: {len(value)} > {max_items}")
    return value


def _require_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return int(value)


@dataclass(frozen=True)
class FeeRouterSnapshot:
    """
    Deterministic, versioned snapshot of the fee router state.

    The commitment is *not* included inside `data` to avoid self-reference.
    """

    version: int
    data: Dict[str, Any]

    def canonical_bytes(self) -> bytes:
        return canonical_json_bytes(self.data)

    def commitment_bytes(self) -> bytes:
        payload = domain_sep_bytes("fee_router_snapshot", version=self.version) + self.canonical_bytes()
        return hashlib.sha256(payload).digest()

    def commitment_hex(self) -> str:
        payload = domain_sep_bytes("fee_router_snapshot", version=self.version) + self.canonical_bytes()
        return sha256_hex(payload)


def snapshot_from_state(
    store: RecordStore,
    ledger: TokenLedger,
    *,
    version: int = FEE_ROUTER_SNAPSHOT_VERSION,
) -> FeeRouterSnapshot:
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")

    accounts = [
        {"account_id": aid, "owner": acct.owner, "mint": acct.mint, "amount": int(acct.amount)}
        for aid, acct in ledger.get_all_accounts().items()
    ]
    accounts.sort(key=lambda e: e["account_id"])

    policies = [
        {"policy_id": pid, **record_to_dict(policy)}
        for pid, policy in store.get_all_policies().items()
    ]
    policies.sort(key=lambda e: e["policy_id"])

    progress = [
        {"progress_id": pid, **record_to_dict(p)}
        for pid, p in store.get_all_progress().items()
    ]
    progress.sort(key=lambda e: e["progress_id"])

    positions = [
        {"position_id": pid, "policy_id": policy_id, **record_to_dict(rec)}
        for pid, (policy_id, rec) in store.get_all_positions().items()
    ]
    positions.sort(key=lambda e: e["position_id"])

    data: Dict[str, Any] = {
        "version": int(version),
        "accounts": accounts,
        "policies": policies,
        "progress": progress,
        "positions": positions,
    }
    return FeeRouterSnapshot(version=version, data=data)


def state_from_snapshot(
    snapshot: Mapping[str, Any],
    *,
    max_accounts: int = 200_000,
    max_records: int = 50_000,
) -> Tuple[RecordStore, TokenLedger]:
    """Rebuild `(store, ledger)`. Raises TypeError/ValueError on malformed input."""
    if not isinstance(snapshot, Mapping):
        raise TypeError("snapshot must be a mapping")

    version = snapshot.get("version", FEE_ROUTER_SNAPSHOT_VERSION)
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("snapshot.version must be a positive int")
    if version != FEE_ROUTER_SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {version}")

    ledger = TokenLedger()
    for entry in _require_list(snapshot.get("accounts"), name="accounts", max_items=max_accounts):
        if not isinstance(entry, Mapping):
            raise TypeError("snapshot.accounts entries must be objects")
        ledger.open_account(
            entry.get("account_id"),
            owner=entry.get("owner"),
            mint=entry.get("mint"),
            amount=_require_int(entry.get("amount"), name="account.amount"),
        )

    store = RecordStore()
    for entry in _require_list(snapshot.get("policies"), name="policies", max_items=max_records):
        if not isinstance(entry, Mapping):
            raise TypeError("snapshot.policies entries must be objects")
        pid = canonical_id(entry.get("policy_id"), name="policy_id")
        if store.get_policy(pid) is not None:
            raise ValueError("duplicate policy entry (policy_id)")
        store.put_policy(pid, record_from_dict(Policy, entry))

    for entry in _require_list(snapshot.get("progress"), name="progress", max_items=max_records):
        if not isinstance(entry, Mapping):
            raise TypeError("snapshot.progress entries must be objects")
        pid = canonical_id(entry.get("progress_id"), name="progress_id")
        if store.get_progress(pid) is not None:
            raise ValueError("duplicate progress entry (progress_id)")
        store.put_progress(pid, record_from_dict(Progress, entry))

    for entry in _require_list(snapshot.get("positions"), name="positions", max_items=max_records):
        if not isinstance(entry, Mapping):
            raise TypeError("snapshot.positions entries must be objects")
        policy_id = canonical_id(entry.get("policy_id"), name="position.policy_id")
        if store.get_policy(policy_id) is None:
            raise ValueError(f"position references unknown policy: {policy_id}")
        store.put_position(entry.get("position_id"), policy_id, record_from_dict(HonoraryPosition, entry))

    return store, ledger


def save_snapshot(path: str | Path, store: RecordStore, ledger: TokenLedger) -> str:
    """Write the canonical snapshot JSON to `path`. Returns its commitment hex."""
    snap = snapshot_from_state(store, ledger)
    Path(path).write_bytes(snap.canonical_bytes())
    return snap.commitment_hex()


def load_snapshot(path: str | Path) -> Tuple[RecordStore, TokenLedger]:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return state_from_snapshot(raw)
