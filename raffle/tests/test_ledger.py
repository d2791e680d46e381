import threading

import pytest

from raffle.errors import InsufficientFunds, LedgerError, TransferRejected
from raffle.ledger import MAX_BALANCE_BITS, Ledger

A, B, C = "0x" + "0a" * 20, "0x" + "0b" * 20, "0x" + "0c" * 20


def test_transfer_moves_funds():
    led = Ledger({A: 100})
    led.transfer(A, B, 40)
    assert led.balance(A) == 60
    assert led.balance(B) == 40
    assert led.total_supply() == 100


def test_transfer_to_self_is_noop():
    led = Ledger({A: 100})
    led.transfer(A, A, 40)
    assert led.balance(A) == 100


def test_insufficient_funds_changes_nothing():
    led = Ledger({A: 10})
    with pytest.raises(InsufficientFunds) as ei:
        led.transfer(A, B, 11)
    assert (ei.value.balance, ei.value.amount) == (10, 11)
    assert ei.value.reason == "insufficient balance"
    assert led.balance(A) == 10
    assert led.balance(B) == 0


def test_refusing_recipient_rejects_even_zero():
    led = Ledger({A: 10})
    led.refuse(B)
    assert list(led.refusing()) == [B]
    with pytest.raises(TransferRejected):
        led.transfer(A, B, 0)
    with pytest.raises(TransferRejected):
        led.transfer(A, B, 5)
    assert led.balance(A) == 10
    led.accept(B)
    led.transfer(A, B, 5)
    assert led.balance(B) == 5


@pytest.mark.parametrize("amount", [-1, 1.5, True, 2**MAX_BALANCE_BITS])
def test_bad_amounts(amount):
    led = Ledger({A: 10})
    with pytest.raises(LedgerError):
        led.transfer(A, B, amount)


def test_credit_overflow():
    led = Ledger({A: 2**MAX_BALANCE_BITS - 1})
    with pytest.raises(LedgerError):
        led.credit(A, 1)


def test_debit():
    led = Ledger({A: 10})
    led.debit(A, 4)
    assert led.balance(A) == 6
    with pytest.raises(InsufficientFunds):
        led.debit(A, 7)


def test_concurrent_transfers_conserve_supply():
    led = Ledger({A: 10_000, B: 10_000})

    def worker(src, dst):
        for _ in range(1_000):
            led.transfer(src, dst, 1)

    threads = [threading.Thread(target=worker, args=pair) for pair in ((A, B), (B, A), (A, C))]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert led.total_supply() == 20_000
    assert led.balance(C) == 1_000


def test_addresses_are_case_insensitive():
    led = Ledger({A.upper().replace("0X", "0x"): 10})
    assert led.balance(A) == 10
    led.refuse(B.upper().replace("0X", "0x"))
    assert list(led.refusing()) == [B]
    with pytest.raises(TransferRejected):
        led.transfer(A, B, 1)
    led.accept(B)
    led.transfer(A.upper().replace("0X", "0x"), B, 1)
    assert led.balance(B) == 1


@pytest.mark.parametrize("addr", ["0x1234", "not-an-address", 42])
def test_bad_addresses(addr):
    led = Ledger({A: 10})
    with pytest.raises(LedgerError):
        led.transfer(A, addr, 1)
    with pytest.raises(LedgerError):
        led.credit(addr, 1)
    assert led.balance(A) == 10
