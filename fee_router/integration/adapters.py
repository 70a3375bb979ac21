"""
External collaborators consumed by the fee router shell.

- `FeeClaimAdapter`: yields newly accrued fees from a bound position.
- `EligibilityReader`: reads an investor's locked-allocation weight.

Both are protocols; the reference implementations below are backed by the
token ledger / a plain mapping so the engine can run deterministically in
tests and offline replays.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Protocol

from ..core.distribution.types import ClaimResult
from ..state.canonical import canonical_id, id_to_bytes
from ..state.identity import derive_address
from ..state.ledger import TokenLedger


# Program namespace for the reference adapter's fee escrow accounts.
DEFAULT_ESCROW_PROGRAM_ID = "0x" + "fe" * 32


class FeeClaimAdapter(Protocol):
    def claim(self, position: str, destination: str) -> ClaimResult:
        """Move newly accrued fees of `position` into `destination` and report them."""
        ...

    def is_quote_only(self, pool: str, position: str, quote_mint: str) -> bool:
        """True iff `position` on `pool` can only accrue fees in `quote_mint`."""
        ...


class EligibilityReader(Protocol):
    def locked_amount(self, reference: str) -> int:
        """Still-locked allocation behind `reference` (investor weight)."""
        ...


@dataclass(frozen=True)
class PositionEscrow:
    pool: str
    quote_account: str
    base_account: str
    collects_base: bool = False


class LedgerFeeClaimAdapter:
    """
    Fee position model on top of `TokenLedger`.

    Each registered position has a quote escrow and a base escrow account.
    `accrue()` credits them; `claim()` sweeps the quote escrow into the
    destination and reports (never moves) the base escrow balance.
    """

    def __init__(self, ledger: TokenLedger, *, program_id: str = DEFAULT_ESCROW_PROGRAM_ID) -> None:
        self._ledger = ledger
        self._program_id = canonical_id(program_id, name="program_id")
        self._authority = derive_address(self._program_id, b"escrow_authority")
        self._escrows: Dict[str, PositionEscrow] = {}

    @property
    def escrow_authority(self) -> str:
        return self._authority

    def register_position(
        self,
        position: str,
        *,
        pool: str,
        quote_mint: str,
        base_mint: str,
        collects_base: bool = False,
    ) -> PositionEscrow:
        pos = canonical_id(position, name="position")
        if pos in self._escrows:
            raise ValueError(f"position already registered: {pos}")
        pos_bytes = id_to_bytes(pos)
        quote_account = derive_address(self._program_id, b"fee_escrow", pos_bytes, b"quote")
        base_account = derive_address(self._program_id, b"fee_escrow", pos_bytes, b"base")
        self._ledger.open_account(quote_account, owner=self._authority, mint=quote_mint)
        self._ledger.open_account(base_account, owner=self._authority, mint=base_mint)
        escrow = PositionEscrow(
            pool=canonical_id(pool, name="pool"),
            quote_account=quote_account,
            base_account=base_account,
            collects_base=collects_base,
        )
        self._escrows[pos] = escrow
        return escrow

    def escrow(self, position: str) -> PositionEscrow:
        pos = canonical_id(position, name="position")
        try:
            return self._escrows[pos]
        except KeyError:
            raise ValueError(f"unknown position: {pos}") from None

    def accrue(self, position: str, *, quote: int = 0, base: int = 0) -> None:
        escrow = self.escrow(position)
        if quote:
            self._ledger.mint_to(escrow.quote_account, quote)
        if base:
            self._ledger.mint_to(escrow.base_account, base)

    def claim(self, position: str, destination: str) -> ClaimResult:
        escrow = self.escrow(position)
        quote = self._ledger.balance(escrow.quote_account)
        base = self._ledger.balance(escrow.base_account)
        self._ledger.transfer(self._authority, escrow.quote_account, destination, quote)
        return ClaimResult(quote_amount=quote, base_amount=base)

    def is_quote_only(self, pool: str, position: str, quote_mint: str) -> bool:
        pos = canonical_id(position, name="position")
        escrow = self._escrows.get(pos)
        if escrow is None or escrow.collects_base:
            return False
        if escrow.pool != canonical_id(pool, name="pool"):
            return False
        quote_acct = self._ledger.require(escrow.quote_account)
        return quote_acct.mint == canonical_id(quote_mint, name="quote_mint")


class StaticEligibilityReader:
    """Weights from a fixed mapping; unknown references read as 0."""

    def __init__(self, weights: Mapping[str, int] | None = None) -> None:
        self._weights: Dict[str, int] = {}
        for ref, weight in (weights or {}).items():
            self.set(ref, weight)

    def set(self, reference: str, weight: int) -> None:
        self._weights[canonical_id(reference, name="reference")] = weight

    def locked_amount(self, reference: str) -> int:
        return self._weights.get(canonical_id(reference, name="reference"), 0)
