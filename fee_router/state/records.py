"""
Keyed record store for Policy / Progress / HonoraryPosition.

One table per record type, keyed by derived identity, plus an index from bound
external positions to the policy that owns them. Records are frozen, so a
snapshot is a set of shallow dict copies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from ..core.distribution.types import HonoraryPosition, Policy, Progress
from .canonical import canonical_id


@dataclass(frozen=True)
class StoreSnapshot:
    policies: Mapping[str, Policy]
    progress: Mapping[str, Progress]
    positions: Mapping[str, HonoraryPosition]
    bound_positions: Mapping[str, str]


@dataclass
class RecordStore:
    _policies: Dict[str, Policy] = field(default_factory=dict)
    _progress: Dict[str, Progress] = field(default_factory=dict)
    _positions: Dict[str, HonoraryPosition] = field(default_factory=dict)
    # external position -> policy id
    _bound_positions: Dict[str, str] = field(default_factory=dict)

    # -- policies ------------------------------------------------------------

    def get_policy(self, policy_id: str) -> Optional[Policy]:
        return self._policies.get(canonical_id(policy_id, name="policy_id"))

    def put_policy(self, policy_id: str, policy: Policy) -> None:
        self._policies[canonical_id(policy_id, name="policy_id")] = policy

    # -- progress ------------------------------------------------------------

    def get_progress(self, progress_id: str) -> Optional[Progress]:
        return self._progress.get(canonical_id(progress_id, name="progress_id"))

    def put_progress(self, progress_id: str, progress: Progress) -> None:
        self._progress[canonical_id(progress_id, name="progress_id")] = progress

    # -- honorary positions --------------------------------------------------

    def get_position(self, position_id: str) -> Optional[HonoraryPosition]:
        return self._positions.get(canonical_id(position_id, name="position_id"))

    def put_position(self, position_id: str, policy_id: str, record: HonoraryPosition) -> None:
        """Insert a binding. Bindings are write-once."""
        pid = canonical_id(position_id, name="position_id")
        if pid in self._positions:
            raise ValueError(f"honorary position already recorded: {pid}")
        if record.position in self._bound_positions:
            raise ValueError(f"external position already bound: {record.position}")
        self._positions[pid] = record
        self._bound_positions[record.position] = canonical_id(policy_id, name="policy_id")

    def policy_for_position(self, external_position: str) -> Optional[str]:
        return self._bound_positions.get(canonical_id(external_position, name="external_position"))

    # -- iteration -----------------------------------------------------------

    def get_all_policies(self) -> Mapping[str, Policy]:
        return dict(self._policies)

    def get_all_progress(self) -> Mapping[str, Progress]:
        return dict(self._progress)

    def get_all_positions(self) -> Mapping[str, Tuple[str, HonoraryPosition]]:
        """position_id -> (policy_id, record)"""
        return {pid: (self._bound_positions[rec.position], rec) for pid, rec in self._positions.items()}

    # -- snapshots -----------------------------------------------------------

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            policies=dict(self._policies),
            progress=dict(self._progress),
            positions=dict(self._positions),
            bound_positions=dict(self._bound_positions),
        )

    def restore(self, snap: StoreSnapshot) -> None:
        self._policies = dict(snap.policies)
        self._progress = dict(snap.progress)
        self._positions = dict(snap.positions)
        self._bound_positions = dict(snap.bound_positions)
