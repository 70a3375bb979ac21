"""Tests for fee_router/state/ledger.py."""

import pytest

from fee_router.state.ledger import (
    MAX_AMOUNT,
    InsufficientBalanceError,
    LedgerError,
    TokenAccount,
    TokenLedger,
)


def _id(n: int) -> str:
    return "0x" + f"{n:064x}"


OWNER = _id(1)
MINT = _id(2)
OTHER_MINT = _id(3)
A = _id(10)
B = _id(11)
C = _id(12)


def _ledger() -> TokenLedger:
    ledger = TokenLedger()
    ledger.open_account(A, owner=OWNER, mint=MINT, amount=100)
    ledger.open_account(B, owner=_id(9), mint=MINT)
    ledger.open_account(C, owner=OWNER, mint=OTHER_MINT, amount=5)
    return ledger


class TestAccounts:
    def test_open_and_get(self):
        ledger = _ledger()
        assert ledger.get(A) == TokenAccount(owner=OWNER, mint=MINT, amount=100)
        assert ledger.get(_id(99)) is None
        assert len(ledger) == 3

    def test_ids_canonicalized(self):
        ledger = _ledger()
        assert ledger.balance(A[2:].upper()) == 100

    def test_duplicate_open(self):
        with pytest.raises(LedgerError):
            _ledger().open_account(A, owner=OWNER, mint=MINT)

    def test_require_unknown(self):
        with pytest.raises(LedgerError):
            _ledger().require(_id(99))

    def test_balance_of_unknown_is_zero(self):
        assert _ledger().balance(_id(99)) == 0

    def test_negative_amount_rejected(self):
        with pytest.raises(LedgerError):
            TokenLedger().open_account(A, owner=OWNER, mint=MINT, amount=-1)

    def test_mint_to_overflow(self):
        ledger = TokenLedger()
        ledger.open_account(A, owner=OWNER, mint=MINT, amount=MAX_AMOUNT)
        with pytest.raises(LedgerError):
            ledger.mint_to(A, 1)


class TestTransfer:
    def test_moves_balance(self):
        ledger = _ledger()
        ledger.transfer(OWNER, A, B, 40)
        assert ledger.balance(A) == 60
        assert ledger.balance(B) == 40

    def test_wrong_authority(self):
        ledger = _ledger()
        with pytest.raises(LedgerError):
            ledger.transfer(_id(9), A, B, 1)
        assert ledger.balance(A) == 100

    def test_mint_mismatch(self):
        with pytest.raises(LedgerError):
            _ledger().transfer(OWNER, C, A, 1)

    def test_insufficient_balance(self):
        ledger = _ledger()
        with pytest.raises(InsufficientBalanceError):
            ledger.transfer(OWNER, A, B, 101)
        assert ledger.balance(A) == 100
        assert ledger.balance(B) == 0

    def test_zero_amount_is_noop(self):
        ledger = _ledger()
        ledger.transfer(OWNER, A, B, 0)
        assert ledger.balance(A) == 100

    def test_self_transfer_is_noop(self):
        ledger = _ledger()
        ledger.transfer(OWNER, A, A, 50)
        assert ledger.balance(A) == 100

    def test_bool_amount_rejected(self):
        with pytest.raises(TypeError):
            _ledger().transfer(OWNER, A, B, True)


def test_snapshot_restore() -> None:
    ledger = _ledger()
    snap = ledger.snapshot()
    ledger.transfer(OWNER, A, B, 30)
    ledger.open_account(_id(50), owner=OWNER, mint=MINT)
    ledger.restore(snap)
    assert ledger.balance(A) == 100
    assert ledger.balance(B) == 0
    assert ledger.get(_id(50)) is None
