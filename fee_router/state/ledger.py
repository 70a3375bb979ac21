"""
Token ledger: the transfer primitive the distribution engine pays through.

Implements TokenLedger[AccountId] -> (owner, mint, amount). Amounts are
non-negative ints that fit in u64.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Mapping

from .canonical import canonical_id


AccountId = str  # 32-byte hex identity (0x...)
MAX_AMOUNT = (1 << 64) - 1


class LedgerError(ValueError):
    """Raised when a ledger operation is structurally invalid."""


class InsufficientBalanceError(LedgerError):
    """Raised when a transfer source cannot cover the amount."""


def _require_amount(amount: int, *, name: str = "amount") -> int:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError(f"{name} must be an int")
    if amount < 0 or amount > MAX_AMOUNT:
        raise LedgerError(f"{name} out of u64 range: {amount}")
    return amount


@dataclass(frozen=True)
class TokenAccount:
    owner: str
    mint: str
    amount: int = 0

    def __post_init__(self) -> None:
        _require_amount(self.amount)


class TokenLedger:
    """
    Mutable table of token accounts.

    Like the other state tables this stores a plain dict; callers that hash or
    serialize must sort keys themselves (see `integration/snapshot.py`).
    """

    def __init__(self) -> None:
        self._accounts: Dict[AccountId, TokenAccount] = {}

    def open_account(self, account_id: str, *, owner: str, mint: str, amount: int = 0) -> AccountId:
        """Create a token account. Raises LedgerError if it already exists."""
        aid = canonical_id(account_id, name="account_id")
        if aid in self._accounts:
            raise LedgerError(f"account already exists: {aid}")
        self._accounts[aid] = TokenAccount(
            owner=canonical_id(owner, name="owner"),
            mint=canonical_id(mint, name="mint"),
            amount=_require_amount(amount),
        )
        return aid

    def get(self, account_id: str) -> TokenAccount | None:
        return self._accounts.get(canonical_id(account_id, name="account_id"))

    def require(self, account_id: str) -> TokenAccount:
        acct = self.get(account_id)
        if acct is None:
            raise LedgerError(f"unknown account: {account_id}")
        return acct

    def balance(self, account_id: str) -> int:
        """Balance of `account_id`; 0 for unknown accounts."""
        acct = self.get(account_id)
        return 0 if acct is None else acct.amount

    def mint_to(self, account_id: str, amount: int) -> None:
        """Credit `amount` out of thin air (fixtures and fee accrual)."""
        _require_amount(amount)
        aid = canonical_id(account_id, name="account_id")
        acct = self.require(aid)
        new_amount = acct.amount + amount
        if new_amount > MAX_AMOUNT:
            raise LedgerError(f"balance overflow on {aid}")
        self._accounts[aid] = replace(acct, amount=new_amount)

    def transfer(self, authority: str, source: str, destination: str, amount: int) -> None:
        """
        Move `amount` from `source` to `destination`.

        Raises:
            LedgerError: unknown account, wrong authority, mint mismatch or
                destination overflow.
            InsufficientBalanceError: source balance below `amount`.
        """
        _require_amount(amount)
        src_id = canonical_id(source, name="source")
        dst_id = canonical_id(destination, name="destination")
        src = self.require(src_id)
        dst = self.require(dst_id)
        if src.owner != canonical_id(authority, name="authority"):
            raise LedgerError(f"authority does not own source account {src_id}")
        if src.mint != dst.mint:
            raise LedgerError("source and destination mints differ")
        if amount == 0 or src_id == dst_id:
            return
        if src.amount < amount:
            raise InsufficientBalanceError(
                f"Insufficient balance: {src.amount} < {amount} on {src_id}"
            )
        if dst.amount + amount > MAX_AMOUNT:
            raise LedgerError(f"balance overflow on {dst_id}")
        self._accounts[src_id] = replace(src, amount=src.amount - amount)
        self._accounts[dst_id] = replace(dst, amount=dst.amount + amount)

    def get_all_accounts(self) -> Mapping[AccountId, TokenAccount]:
        # Shallow copy; TokenAccount values are frozen.
        return dict(self._accounts)

    def snapshot(self) -> Dict[AccountId, TokenAccount]:
        return dict(self._accounts)

    def restore(self, snapshot: Mapping[AccountId, TokenAccount]) -> None:
        self._accounts = dict(snapshot)

    def __len__(self) -> int:
        return len(self._accounts)
