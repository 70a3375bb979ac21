"""
Deterministic derivation of engine-controlled identities.

Every record and authority the engine owns lives at an address derived from a
program id plus a list of seeds, so any caller can recompute it and no caller
can choose it.
"""

from __future__ import annotations

import hashlib

from .canonical import canonical_id, domain_sep_bytes, encode_seed, id_to_bytes


POLICY_SEED = b"policy"
PROGRESS_SEED = b"progress"
VAULT_SEED = b"vault"
POSITION_SEED = b"position"
FEE_POS_OWNER_SEED = b"investor_fee_pos_owner"

_MAX_SEEDS = 16
_MAX_SEED_LEN = 32


def derive_address(program_id: str, *seeds: bytes) -> str:
    """
    Derive a 32-byte identity from `program_id` and `seeds`.

    Seeds are length-prefixed before hashing, so `(b"ab", b"c")` and
    `(b"a", b"bc")` derive different addresses.
    """
    if len(seeds) > _MAX_SEEDS:
        raise ValueError(f"at most {_MAX_SEEDS} seeds allowed")
    h = hashlib.sha256()
    h.update(domain_sep_bytes("address"))
    h.update(id_to_bytes(program_id, name="program_id"))
    for i, seed in enumerate(seeds):
        if not isinstance(seed, (bytes, bytearray)):
            raise TypeError(f"seed[{i}] must be bytes")
        if len(seed) > _MAX_SEED_LEN:
            raise ValueError(f"seed[{i}] exceeds {_MAX_SEED_LEN} bytes")
        h.update(encode_seed(seed))
    return "0x" + h.hexdigest()


def policy_address(program_id: str, pool: str) -> str:
    return derive_address(program_id, POLICY_SEED, id_to_bytes(pool, name="pool"))


def progress_address(program_id: str, pool: str) -> str:
    return derive_address(program_id, PROGRESS_SEED, id_to_bytes(pool, name="pool"))


def vault_authority_address(program_id: str, policy_id: str) -> str:
    """Authority that signs every treasury outflow for `policy_id`."""
    return derive_address(program_id, VAULT_SEED, id_to_bytes(policy_id, name="policy_id"))


def honorary_position_address(program_id: str, policy_id: str) -> str:
    return derive_address(program_id, POSITION_SEED, id_to_bytes(policy_id, name="policy_id"))


def position_owner_address(program_id: str, policy_id: str) -> str:
    """Engine-controlled owner of the bound fee position."""
    return derive_address(
        program_id,
        VAULT_SEED,
        id_to_bytes(policy_id, name="policy_id"),
        FEE_POS_OWNER_SEED,
    )


def is_canonical_id(value: object) -> bool:
    if not isinstance(value, str):
        return False
    try:
        return canonical_id(value) == value
    except ValueError:
        return False
