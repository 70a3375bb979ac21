"""
Deterministic canonical encoding primitives.

Used for config hashes, address derivation and snapshot commitments. All
encodings are integer-only; floats are rejected outright.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any


# Identities (pools, mints, token accounts, authorities) are 32-byte values.
ID_NBYTES = 32

_ID_HEX_RE = re.compile(r"[0-9a-f]{%d}" % (2 * ID_NBYTES))
_DOMAIN_LABEL_RE = re.compile(r"[a-z0-9_]+")


def _walk_no_floats(value: Any, path: str = "$") -> None:
    if isinstance(value, float):
        raise TypeError(f"float at {path}; amounts must be ints")
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"non-str key at {path}")
            _walk_no_floats(item, f"{path}.{key}")
    elif isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _walk_no_floats(item, f"{path}[{i}]")


def canonical_json_bytes(value: Any) -> bytes:
    """Compact, key-sorted UTF-8 JSON of `value` (no floats, no NaN)."""
    _walk_no_floats(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode(
        "utf-8"
    )


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """`fee_router:<label>:v<version>` followed by a NUL byte."""
    if not isinstance(label, str) or not _DOMAIN_LABEL_RE.fullmatch(label):
        raise ValueError(f"domain label must match [a-z0-9_]+: {label!r}")
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return f"fee_router:{label}:v{version}".encode("ascii") + b"\x00"


def encode_seed(seed: bytes) -> bytes:
    """One length byte followed by the seed (seeds are at most 255 bytes)."""
    if not isinstance(seed, (bytes, bytearray)):
        raise TypeError("seed must be bytes")
    if len(seed) > 0xFF:
        raise ValueError("seed longer than 255 bytes")
    return bytes((len(seed),)) + bytes(seed)


def canonical_id(value: str, *, name: str = "id") -> str:
    """
    Canonicalize a 32-byte identity (lowercase, 0x-prefixed).

    Accepts either 0x-prefixed or raw hex input, any case.
    """
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str")
    body = value.strip().lower()
    if body.startswith("0x"):
        body = body[2:]
    if not _ID_HEX_RE.fullmatch(body):
        raise ValueError(f"{name} must be {ID_NBYTES} bytes of hex")
    return "0x" + body


def id_to_bytes(value: str, *, name: str = "id") -> bytes:
    return bytes.fromhex(canonical_id(value, name=name)[2:])
